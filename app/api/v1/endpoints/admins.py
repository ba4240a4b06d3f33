"""
Admin account management — super admin only.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.api.v1.deps import AdminContext, get_store, require_super_admin
from app.core.exceptions import AuthorizationError
from app.db.store import ADMIN_USERS, RecordStore
from app.models.admin_user import AdminUser
from app.schemas.admin import AdminUserCreate, AdminUserCreated, AdminUserRead, AdminUserUpdate
from app.schemas.common import MessageResponse
from app.services.admins import add_admin_user, delete_admin_user, list_admin_users, update_admin_user

router = APIRouter(prefix="/admins", tags=["admins"])


@router.get("", response_model=list[AdminUserRead])
async def list_admins(
    store: RecordStore = Depends(get_store),
    _admin: AdminContext = Depends(require_super_admin),
) -> list[AdminUser]:
    return await list_admin_users(store)


@router.post("", response_model=AdminUserCreated, status_code=201)
async def create_admin(
    body: AdminUserCreate,
    store: RecordStore = Depends(get_store),
    admin: AdminContext = Depends(require_super_admin),
) -> AdminUserCreated:
    admin_id = await add_admin_user(store, body.model_dump(), created_by=admin.email)
    return AdminUserCreated(id=admin_id)


@router.get("/{admin_id}", response_model=AdminUserRead)
async def get_admin(
    admin_id: str,
    store: RecordStore = Depends(get_store),
    _admin: AdminContext = Depends(require_super_admin),
) -> AdminUser:
    admin = await store.get_by_id(ADMIN_USERS, admin_id)
    if admin is None:
        raise HTTPException(status_code=404, detail="Admin not found")
    return admin


@router.put("/{admin_id}", response_model=AdminUserRead)
async def update_admin(
    admin_id: str,
    body: AdminUserUpdate,
    store: RecordStore = Depends(get_store),
    _admin: AdminContext = Depends(require_super_admin),
) -> AdminUser:
    return await update_admin_user(store, admin_id, body.model_dump(exclude_unset=True))


@router.delete("/{admin_id}", response_model=MessageResponse)
async def delete_admin(
    admin_id: str,
    store: RecordStore = Depends(get_store),
    admin: AdminContext = Depends(require_super_admin),
) -> MessageResponse:
    target = await store.get_by_id(ADMIN_USERS, admin_id)
    if target is not None and target.email == admin.email:
        raise AuthorizationError("You cannot delete your own admin account")
    await delete_admin_user(store, admin_id)
    return MessageResponse(message=f"Admin '{admin_id}' deleted")
