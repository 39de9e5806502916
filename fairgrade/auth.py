"""
Bearer token authentication for the FairGrade functions.
Validates the Authorization header on every /functions/v1/ route and
attaches the caller's id to ``flask.g``.
"""
import hmac
import logging

import jwt
from flask import request, g

from fairgrade.deps import get_config, get_store
from fairgrade.errors import Unauthorized
from fairgrade.services.extension_tokens import decode_token

logger = logging.getLogger(__name__)

FUNCTIONS_PREFIX = '/functions/v1/'

# Routes that don't require a bearer token
PUBLIC_EXACT = [
    '/functions/v1/extension-auth',   # Exchanges a pairing token, checked in the handler
]

# Which credential each route expects; anything else takes a Supabase user token
TOKEN_KINDS = {
    '/functions/v1/track-batch': 'extension',
    '/functions/v1/calculate-scores': 'service',
}


def extract_bearer(header):
    """Return the token from an Authorization header value, or '' if absent."""
    if not header:
        return ''
    parts = header.strip().split(None, 1)
    if parts and parts[0].lower() == 'bearer':
        return parts[1].strip() if len(parts) > 1 else ''
    return header.strip()


def validate_token(token, secret):
    """
    Validate a Supabase JWT offline and return the decoded payload.
    Returns None if invalid.
    """
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=['HS256'],
            audience='authenticated',
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def resolve_user(token):
    """Exchange a user access token for a user id, or raise Unauthorized."""
    cfg = get_config()
    if cfg.auth_mode == 'local':
        payload = validate_token(token, cfg.supabase_jwt_secret)
        user_id = payload.get('sub') if payload else None
    else:
        user_id = get_store().get_user_id(token)

    if not user_id:
        raise Unauthorized("Invalid token")
    return user_id


def check_service_key(token):
    key = get_config().supabase_service_key
    if not key or not hmac.compare_digest(token.encode(), key.encode()):
        raise Unauthorized("Invalid service key")


def init_auth(app):
    """
    Register the before_request auth hook on the Flask app.
    Call this BEFORE registering blueprints.
    """
    @app.before_request
    def check_auth():
        if not request.path.startswith(FUNCTIONS_PREFIX):
            return None

        # CORS preflight never carries credentials
        if request.method == 'OPTIONS':
            return None

        if request.path in PUBLIC_EXACT:
            return None

        token = extract_bearer(request.headers.get('Authorization'))
        if not token:
            raise Unauthorized("No authorization header")

        kind = TOKEN_KINDS.get(request.path, 'user')
        if kind == 'service':
            check_service_key(token)
            g.user_id = None
        elif kind == 'extension':
            payload = decode_token(token, get_config().token_secret)
            g.user_id = payload['sub']
        else:
            g.user_id = resolve_user(token)
        return None
