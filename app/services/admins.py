"""
Admin accounts: CRUD, role checks and super-admin bootstrap.

The configured super-admin email (``AuthorizationPolicy``) is treated as an
admin and a super admin even before its record exists; the first sign-in
with that email materialises the record via ``bootstrap_super_admin``.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from app.core.authz import AuthorizationPolicy
from app.core.exceptions import AuthorizationError, DuplicateRecordError
from app.core.timeutils import now_ms
from app.db.store import ADMIN_USERS, RecordStore
from app.models.admin_user import AdminUser

logger = logging.getLogger(__name__)

SUPER_ADMIN = "super_admin"


async def list_admin_users(store: RecordStore) -> list[AdminUser]:
    return await store.get_all(ADMIN_USERS, order_by="created_at", descending=True)


async def get_admin_by_email(store: RecordStore, email: str) -> AdminUser | None:
    matches = await store.query_by_field(
        ADMIN_USERS, "email", email.strip().lower(), order_by="created_at"
    )
    return matches[0] if matches else None


async def add_admin_user(store: RecordStore, admin: dict[str, Any], created_by: str) -> str:
    email = admin["email"].strip().lower()
    if await get_admin_by_email(store, email) is not None:
        raise DuplicateRecordError(f"Admin '{email}' already registered")

    admin_id = uuid.uuid4().hex
    await store.write_one(
        ADMIN_USERS,
        admin_id,
        {
            "email": email,
            "name": admin["name"],
            "user_id": admin.get("user_id") or "",
            "role": admin.get("role") or "admin",
            "is_active": True,
            "created_at": now_ms(),
            "created_by": created_by,
            "last_login": 0,
        },
    )
    logger.info("Created admin %s (%s) by %s", email, admin.get("role") or "admin", created_by)
    return admin_id


async def update_admin_user(store: RecordStore, admin_id: str, changes: dict[str, Any]) -> AdminUser:
    email = changes.get("email")
    if email is not None:
        existing = await get_admin_by_email(store, email)
        if existing is not None and existing.id != admin_id:
            raise DuplicateRecordError(f"Admin '{email}' already registered")
    admin = await store.update_one(ADMIN_USERS, admin_id, changes)
    logger.info("Updated admin %s: %s", admin_id, sorted(changes))
    return admin


async def delete_admin_user(store: RecordStore, admin_id: str) -> None:
    await store.delete_one(ADMIN_USERS, admin_id)
    logger.info("Deleted admin %s", admin_id)


async def check_is_admin(store: RecordStore, policy: AuthorizationPolicy, email: str) -> bool:
    if policy.is_bootstrap_super_admin(email):
        return True
    admin = await get_admin_by_email(store, email)
    return admin is not None and admin.is_active


async def check_is_super_admin(store: RecordStore, policy: AuthorizationPolicy, email: str) -> bool:
    if policy.is_bootstrap_super_admin(email):
        return True
    admin = await get_admin_by_email(store, email)
    return admin is not None and admin.is_active and admin.role == SUPER_ADMIN


async def update_last_login(store: RecordStore, email: str) -> None:
    admin = await get_admin_by_email(store, email)
    if admin is not None:
        await store.update_one(ADMIN_USERS, admin.id, {"last_login": now_ms()})


async def bootstrap_super_admin(
    store: RecordStore,
    policy: AuthorizationPolicy,
    email: str,
    user_id: str,
) -> bool:
    """Create the super-admin record on first sign-in. Returns True if created."""
    if not policy.bootstrap_configured:
        raise AuthorizationError("Super admin email not configured. Set SUPER_ADMIN_EMAIL")
    if not policy.is_bootstrap_super_admin(email):
        raise AuthorizationError("Not authorized to bootstrap super admin")

    if await get_admin_by_email(store, email) is not None:
        logger.debug("Super admin %s already exists", email)
        return False

    now = now_ms()
    await store.write_one(
        ADMIN_USERS,
        uuid.uuid4().hex,
        {
            "email": email.strip().lower(),
            "name": "Super Administrator",
            "user_id": user_id,
            "role": SUPER_ADMIN,
            "is_active": True,
            "created_at": now,
            "created_by": "system",
            "last_login": now,
        },
    )
    logger.info("Super admin created: %s", email)
    return True
