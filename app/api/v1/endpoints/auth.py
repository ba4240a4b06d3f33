"""
Auth endpoints — console sign-in with an identity token, logout, profile.

Credentials are checked by the external auth service; this API verifies the
identity token it issued, bootstraps the super admin on first sign-in and
keeps the token in an HttpOnly cookie for subsequent requests.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.api.v1.deps import AdminContext, get_authorization_policy, get_current_admin, get_store
from app.core.authz import AuthorizationPolicy
from app.core.config import settings
from app.core.security import decode_identity_token
from app.db.store import RecordStore
from app.schemas.common import MessageResponse
from app.schemas.token import SessionRead, SessionRequest
from app.services.admins import (
    bootstrap_super_admin,
    check_is_admin,
    check_is_super_admin,
    get_admin_by_email,
    update_last_login,
)

# Rate limiter keyed by client IP
limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/session", response_model=SessionRead)
@limiter.limit("10/minute")
async def create_session(
    request: Request,
    response: Response,
    body: SessionRequest,
    store: RecordStore = Depends(get_store),
    policy: AuthorizationPolicy = Depends(get_authorization_policy),
) -> SessionRead:
    """Exchange an identity token for a console session (HttpOnly cookie)."""
    payload = decode_identity_token(body.id_token)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired identity token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    email = payload["email"].strip().lower()
    user_id = payload["sub"]

    if policy.is_bootstrap_super_admin(email):
        await bootstrap_super_admin(store, policy, email, user_id)

    if not await check_is_admin(store, policy, email):
        logger.warning("Sign-in refused for non-admin %s", email)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not authorized as admin",
        )

    is_super_admin = await check_is_super_admin(store, policy, email)
    await update_last_login(store, email)
    admin = await get_admin_by_email(store, email)

    response.set_cookie(
        key="access_token",
        value=f"Bearer {body.id_token}",
        httponly=True,
        secure=settings.COOKIE_SECURE,  # Set to True in HTTPS production
        samesite="lax",
        max_age=settings.SESSION_COOKIE_MAX_AGE_MINUTES * 60,
    )
    logger.info("Console session opened for %s (super_admin=%s)", email, is_super_admin)

    return SessionRead(
        email=email,
        user_id=user_id,
        name=admin.name if admin is not None else None,
        is_admin=True,
        is_super_admin=is_super_admin,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    """Clear the session cookie."""
    response.delete_cookie("access_token")
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=SessionRead)
async def read_current_admin(
    current_admin: AdminContext = Depends(get_current_admin),
) -> SessionRead:
    """Return the profile of the signed-in admin."""
    return SessionRead(
        email=current_admin.email,
        user_id=current_admin.user_id,
        name=current_admin.name,
        is_admin=True,
        is_super_admin=current_admin.is_super_admin,
    )
