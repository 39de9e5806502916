"""
FairGrade Function Routes
=========================

Blueprints for the extension-facing functions, all served under
/functions/v1/.

Usage:
    from fairgrade.routes import register_routes
    register_routes(app)
"""
from .track_routes import track_bp
from .heartbeat_routes import heartbeat_bp
from .extension_routes import extension_bp
from .score_routes import score_bp


def register_routes(app):
    """Register all route blueprints with the Flask app."""
    app.register_blueprint(track_bp)
    app.register_blueprint(heartbeat_bp)
    app.register_blueprint(extension_bp)
    app.register_blueprint(score_bp)


__all__ = [
    'register_routes',
    'track_bp',
    'heartbeat_bp',
    'extension_bp',
    'score_bp',
]
