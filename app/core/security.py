"""
Identity-token verification (JWT via python-jose).

Tokens are minted by the external auth service and signed with the shared
``SECRET_KEY``; this service only verifies them and reads the ``sub`` (auth
uid) and ``email`` claims. ``create_identity_token`` mirrors the issuer and
is used by tooling and tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from app.core.config import settings

_ALGORITHM = settings.ALGORITHM
_SECRET = settings.SECRET_KEY


def create_identity_token(
    subject: str | Any,
    email: str,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.SESSION_COOKIE_MAX_AGE_MINUTES)
    )
    return jwt.encode(
        {"exp": expire, "sub": str(subject), "email": email, "type": "identity"},
        _SECRET,
        algorithm=_ALGORITHM,
    )


def decode_identity_token(token: str) -> dict | None:
    """Return payload dict if the token is valid and carries an email, else ``None``."""
    try:
        payload = jwt.decode(token, _SECRET, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != "identity":
        return None
    if not payload.get("sub") or not payload.get("email"):
        return None
    return payload
