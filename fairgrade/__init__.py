"""
FairGrade Backend Package
=========================

Flask functions behind the FairGrade browser extension: activity tracking,
heartbeat, extension pairing and contribution scoring.

Structure:
- routes/: function blueprints (served under /functions/v1/)
- services/: scope checks, ingestion, scoring and the Supabase store
- config.py: Configuration management
- auth.py: Bearer token verification
"""

from .config import Config

__version__ = "1.0.0"

__all__ = ['Config']
