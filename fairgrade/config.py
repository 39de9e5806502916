"""
Configuration management for the FairGrade tracking backend.
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", "")

# Server configuration
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
DEBUG = os.getenv("DEBUG", "").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Headers the browser extension and supabase-js clients send
CORS_ALLOW_HEADERS = [
    "authorization",
    "x-client-info",
    "apikey",
    "content-type",
    "x-supabase-client-platform",
    "x-supabase-client-platform-version",
    "x-supabase-client-runtime",
    "x-supabase-client-runtime-version",
]

AUTH_MODES = ("remote", "local")
SCOPE_MATCH_MODES = ("hostname", "substring")
RECALC_MODES = ("local", "remote", "off")


class Config:
    """Application configuration class."""

    def __init__(self):
        self.supabase_url = SUPABASE_URL
        self.supabase_service_key = SUPABASE_SERVICE_KEY
        self.supabase_jwt_secret = SUPABASE_JWT_SECRET
        self.auth_mode = "remote"
        self.extension_token_secret = ""
        self.extension_token_ttl_days = 7
        self.scope_match_mode = "hostname"
        self.recalc_mode = "local"
        self.recalc_workers = 2
        self.recalc_timeout = 10

    @classmethod
    def from_env(cls):
        cfg = cls()
        cfg.update({
            "auth_mode": os.getenv("AUTH_MODE", cfg.auth_mode),
            "extension_token_secret": os.getenv("EXTENSION_TOKEN_SECRET", ""),
            "extension_token_ttl_days": int(os.getenv("EXTENSION_TOKEN_TTL_DAYS", cfg.extension_token_ttl_days)),
            "scope_match_mode": os.getenv("SCOPE_MATCH_MODE", cfg.scope_match_mode),
            "recalc_mode": os.getenv("RECALC_MODE", cfg.recalc_mode),
            "recalc_workers": int(os.getenv("RECALC_WORKERS", cfg.recalc_workers)),
            "recalc_timeout": float(os.getenv("RECALC_TIMEOUT", cfg.recalc_timeout)),
        })
        return cfg

    @property
    def token_secret(self):
        """Secret used to sign extension session tokens."""
        return self.extension_token_secret or self.supabase_jwt_secret

    def validate(self):
        if self.auth_mode not in AUTH_MODES:
            raise ValueError(f"AUTH_MODE must be one of {AUTH_MODES}, got {self.auth_mode!r}")
        if self.scope_match_mode not in SCOPE_MATCH_MODES:
            raise ValueError(f"SCOPE_MATCH_MODE must be one of {SCOPE_MATCH_MODES}, got {self.scope_match_mode!r}")
        if self.recalc_mode not in RECALC_MODES:
            raise ValueError(f"RECALC_MODE must be one of {RECALC_MODES}, got {self.recalc_mode!r}")
        if self.auth_mode == "local" and not self.supabase_jwt_secret:
            raise ValueError("AUTH_MODE=local requires SUPABASE_JWT_SECRET")
        return self

    def to_dict(self):
        return {
            "supabase_url": self.supabase_url,
            "supabase_service_key": self.supabase_service_key,
            "supabase_jwt_secret": self.supabase_jwt_secret,
            "auth_mode": self.auth_mode,
            "extension_token_secret": self.extension_token_secret,
            "extension_token_ttl_days": self.extension_token_ttl_days,
            "scope_match_mode": self.scope_match_mode,
            "recalc_mode": self.recalc_mode,
            "recalc_workers": self.recalc_workers,
            "recalc_timeout": self.recalc_timeout,
        }

    def update(self, data: dict):
        for key, value in data.items():
            if hasattr(self, key):
                setattr(self, key, value)
