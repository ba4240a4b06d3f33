"""
FastAPI dependencies — database session, record store, auth guards.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.authz import AuthorizationPolicy
from app.core.config import settings
from app.core.security import decode_identity_token
from app.db.session import async_session_factory
from app.db.store import RecordStore
from app.services.admins import check_is_admin, check_is_super_admin, get_admin_by_email

# auto_error=False so we can fall back to the HttpOnly cookie
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AdminContext:
    """The signed-in console operator."""

    email: str
    user_id: str
    is_super_admin: bool
    name: str | None = None


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_store(db: AsyncSession = Depends(get_db)) -> RecordStore:
    return RecordStore(db)


def get_authorization_policy() -> AuthorizationPolicy:
    return AuthorizationPolicy(super_admin_email=settings.SUPER_ADMIN_EMAIL)


# ── Auth dependencies ───────────────────────────────────────────────
def extract_token(
    credentials: Optional[HTTPAuthorizationCredentials],
    cookie_value: Optional[str],
) -> str | None:
    """Bearer header wins over the ``access_token`` cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    if cookie_value:
        # Cookie is stored as "Bearer <token>"
        if cookie_value.startswith("Bearer "):
            return cookie_value.split(" ", 1)[1]
        return cookie_value
    return None


async def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    access_token: Optional[str] = Cookie(default=None),
) -> dict:
    """Verify the identity token from header or cookie and return its claims."""
    credentials_exc = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    token = extract_token(credentials, access_token)
    if not token:
        raise credentials_exc
    payload = decode_identity_token(token)
    if payload is None:
        raise credentials_exc
    return payload


async def get_current_admin(
    identity: dict = Depends(get_identity),
    store: RecordStore = Depends(get_store),
    policy: AuthorizationPolicy = Depends(get_authorization_policy),
) -> AdminContext:
    """Reject identities that are not active admins."""
    email = identity["email"].strip().lower()
    if not await check_is_admin(store, policy, email):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    admin = await get_admin_by_email(store, email)
    return AdminContext(
        email=email,
        user_id=identity["sub"],
        is_super_admin=await check_is_super_admin(store, policy, email),
        name=admin.name if admin is not None else None,
    )


async def require_super_admin(
    current_admin: AdminContext = Depends(get_current_admin),
) -> AdminContext:
    """Only allow the super-admin role to proceed."""
    if not current_admin.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin privileges required",
        )
    return current_admin
