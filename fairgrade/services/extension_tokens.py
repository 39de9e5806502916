"""
Session tokens for the browser extension.

Students pair the extension with a short-lived pairing token; in exchange
the extension gets a signed HS256 JWT it presents to track-batch.
"""
import logging
from datetime import datetime, timedelta, timezone

import jwt

from fairgrade.errors import ServiceError, Unauthorized

logger = logging.getLogger(__name__)

AUDIENCE = "fairgrade-extension"
ALGORITHM = "HS256"


def _require_secret(secret):
    if not secret:
        raise ServiceError("Extension tokens not configured")
    return secret


def issue_token(profile, secret, ttl_days=7, now=None):
    """Sign a session token for the student described by ``profile``."""
    now = now or datetime.now(timezone.utc)
    payload = {
        "sub": profile["user_id"],
        "email": profile.get("email"),
        "name": profile.get("full_name"),
        "aud": AUDIENCE,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=ttl_days)).timestamp()),
    }
    return jwt.encode(payload, _require_secret(secret), algorithm=ALGORITHM)


def decode_token(token, secret):
    """Verify a session token and return its payload."""
    try:
        payload = jwt.decode(token, _require_secret(secret), algorithms=[ALGORITHM], audience=AUDIENCE)
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.InvalidTokenError as e:
        logger.info("Rejected extension token: %s", e)
        raise Unauthorized("Invalid token format")

    if not payload.get("sub"):
        raise Unauthorized("Invalid token format")
    return payload
