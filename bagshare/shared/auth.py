"""
Bearer Token Verification
=========================
Resolves an ``Authorization: Bearer <token>`` header to the authenticated
principal ``{user_id, email}``.

Tokens are ``<base64url(payload)>.<hex hmac-sha256(payload)>`` where the
payload is canonical JSON ``{"user_id", "email", "exp"}``. Issuance belongs
to the identity service; ``issue_token`` exists so that service (and the
tests) can mint tokens with the shared secret.
"""

import base64
import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Header

from bagshare import config
from .errors import AuthenticationFailed

logger = logging.getLogger(__name__)

if config.AUTH_TOKEN_SECRET == config.DEV_TOKEN_SECRET:
    logger.warning("AUTH_TOKEN_SECRET not configured, using development secret")


@dataclass(frozen=True)
class Principal:
    """The authenticated caller."""
    user_id: str
    email: str


def _sign(payload: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def _b64decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


def issue_token(
    user_id: str,
    email: str,
    secret: Optional[str] = None,
    ttl_hours: Optional[int] = None,
    now: Optional[datetime] = None,
) -> str:
    """Mint a signed bearer token for a user."""
    secret = secret or config.AUTH_TOKEN_SECRET
    ttl = config.AUTH_TOKEN_TTL_HOURS if ttl_hours is None else ttl_hours
    issued_at = now or datetime.now(timezone.utc)
    payload = json.dumps(
        {
            "user_id": user_id,
            "email": email,
            "exp": int((issued_at + timedelta(hours=ttl)).timestamp()),
        },
        sort_keys=True,
        separators=(",", ":"),
    ).encode()
    return f"{_b64encode(payload)}.{_sign(payload, secret)}"


def verify_token(
    token: str,
    secret: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Principal:
    """
    Verify a bearer token and return its principal.

    Raises:
        AuthenticationFailed: malformed, tampered or expired token
    """
    secret = secret or config.AUTH_TOKEN_SECRET
    try:
        encoded_payload, signature = token.split(".", 1)
        payload = _b64decode(encoded_payload)
    except (ValueError, TypeError):
        raise AuthenticationFailed("Invalid token")

    if not hmac.compare_digest(_sign(payload, secret), signature):
        raise AuthenticationFailed("Invalid token")

    try:
        claims = json.loads(payload)
        user_id = str(claims["user_id"])
        email = str(claims["email"])
        expires_at = int(claims["exp"])
    except (ValueError, KeyError, TypeError):
        raise AuthenticationFailed("Invalid token")

    current = now or datetime.now(timezone.utc)
    if current.timestamp() >= expires_at:
        raise AuthenticationFailed("Token expired")

    return Principal(user_id=user_id, email=email)


def _extract_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    token = authorization.replace("Bearer ", "", 1).strip()
    return token or None


# ============================================
# FastAPI dependencies
# ============================================

def require_principal(authorization: Optional[str] = Header(None)) -> Principal:
    """Dependency for authenticated endpoints. Raises 401 without a valid token."""
    token = _extract_bearer(authorization)
    if not token:
        raise AuthenticationFailed("No token provided")
    return verify_token(token)


def optional_principal(authorization: Optional[str] = Header(None)) -> Optional[Principal]:
    """Dependency for public endpoints: an invalid token is treated as anonymous."""
    token = _extract_bearer(authorization)
    if not token:
        return None
    try:
        return verify_token(token)
    except AuthenticationFailed:
        logger.debug("Ignoring invalid token on public endpoint")
        return None
