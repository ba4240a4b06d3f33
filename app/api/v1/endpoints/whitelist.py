"""
Whitelist endpoints — CRUD, bulk import, export, bulk delete, deduplication.

- Every route requires an active admin.
- Admins who are not super admins only list / count the records they added.
- DELETE /whitelist and POST /whitelist/deduplicate are super-admin only;
  the engines refuse non-super-admin callers before touching the store.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from app.api.v1.deps import AdminContext, get_current_admin, get_store
from app.db.store import WHITELIST_USERS, RecordStore
from app.models.whitelist_user import WhitelistUser
from app.schemas.common import MessageResponse
from app.schemas.whitelist import (
    DeleteResultRead,
    ImportJsonRequest,
    ImportRequest,
    ImportResultRead,
    ReconcileResultRead,
    WhitelistStats,
    WhitelistUserCreate,
    WhitelistUserCreated,
    WhitelistUserRead,
    WhitelistUserUpdate,
)
from app.services.bulk_delete import delete_all_whitelist_users
from app.services.bulk_import import bulk_import_whitelist_users, import_whitelist_from_json
from app.services.export import export_whitelist_as_csv, export_whitelist_as_json
from app.services.progress import log_progress
from app.services.reconciliation import remove_duplicate_users
from app.services.whitelist import (
    add_whitelist_user,
    delete_whitelist_user,
    list_whitelist_users,
    update_whitelist_user,
    whitelist_stats,
)

router = APIRouter(prefix="/whitelist", tags=["whitelist"])
logger = logging.getLogger(__name__)


# ── Listing & stats ─────────────────────────────────────────────────
@router.get("", response_model=list[WhitelistUserRead])
async def list_users(
    store: RecordStore = Depends(get_store),
    admin: AdminContext = Depends(get_current_admin),
) -> list[WhitelistUser]:
    return await list_whitelist_users(store, admin.email, admin.is_super_admin)


@router.get("/stats", response_model=WhitelistStats)
async def stats(
    store: RecordStore = Depends(get_store),
    admin: AdminContext = Depends(get_current_admin),
) -> dict:
    """Dashboard counters: total, active, inactive, logged in recently."""
    return await whitelist_stats(store, admin.email, admin.is_super_admin)


@router.get("/export")
async def export_users(
    fmt: str = Query(default="json", alias="format", pattern="^(json|csv)$"),
    store: RecordStore = Depends(get_store),
    _admin: AdminContext = Depends(get_current_admin),
) -> Response:
    """Download the whole whitelist as JSON or CSV."""
    if fmt == "csv":
        content = await export_whitelist_as_csv(store)
        media_type = "text/csv"
    else:
        content = await export_whitelist_as_json(store)
        media_type = "application/json"
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename=whitelist_{stamp}.{fmt}"},
    )


# ── Bulk operations ─────────────────────────────────────────────────
@router.post("/import", response_model=ImportResultRead)
async def import_users(
    body: ImportRequest,
    store: RecordStore = Depends(get_store),
    admin: AdminContext = Depends(get_current_admin),
):
    """Validate and import a list of raw records; reports per-row errors."""
    return await bulk_import_whitelist_users(
        store, body.records, admin.email, log_progress("Whitelist import", logger)
    )


@router.post("/import/json", response_model=ImportResultRead)
async def import_users_json(
    body: ImportJsonRequest,
    store: RecordStore = Depends(get_store),
    admin: AdminContext = Depends(get_current_admin),
):
    """Import from the text of a JSON file (must be an array of objects)."""
    return await import_whitelist_from_json(
        store, body.json_data, admin.email, log_progress("Whitelist JSON import", logger)
    )


@router.delete("", response_model=DeleteResultRead)
async def delete_all_users(
    store: RecordStore = Depends(get_store),
    admin: AdminContext = Depends(get_current_admin),
):
    """Super admin only: delete every whitelist record."""
    logger.warning("Bulk whitelist delete requested by %s", admin.email)
    return await delete_all_whitelist_users(
        store, admin.is_super_admin, log_progress("Whitelist delete", logger)
    )


@router.post("/deduplicate", response_model=ReconcileResultRead)
async def deduplicate_users(
    store: RecordStore = Depends(get_store),
    admin: AdminContext = Depends(get_current_admin),
):
    """Super admin only: keep one record per userId, delete the rest."""
    return await remove_duplicate_users(
        store, admin.is_super_admin, log_progress("Duplicate removal", logger)
    )


# ── Single record CRUD ──────────────────────────────────────────────
@router.post("", response_model=WhitelistUserCreated, status_code=201)
async def create_user(
    body: WhitelistUserCreate,
    store: RecordStore = Depends(get_store),
    admin: AdminContext = Depends(get_current_admin),
) -> WhitelistUserCreated:
    record_id = await add_whitelist_user(store, body.model_dump(), admin.email)
    return WhitelistUserCreated(id=record_id)


@router.get("/{record_id}", response_model=WhitelistUserRead)
async def get_user(
    record_id: str,
    store: RecordStore = Depends(get_store),
    _admin: AdminContext = Depends(get_current_admin),
) -> WhitelistUser:
    user = await store.get_by_id(WHITELIST_USERS, record_id)
    if user is None:
        raise HTTPException(status_code=404, detail="Whitelist user not found")
    return user


@router.put("/{record_id}", response_model=WhitelistUserRead)
async def update_user(
    record_id: str,
    body: WhitelistUserUpdate,
    store: RecordStore = Depends(get_store),
    _admin: AdminContext = Depends(get_current_admin),
) -> WhitelistUser:
    """Edit fields or toggle ``isActive``."""
    return await update_whitelist_user(store, record_id, body.model_dump(exclude_unset=True))


@router.delete("/{record_id}", response_model=MessageResponse)
async def delete_user(
    record_id: str,
    store: RecordStore = Depends(get_store),
    _admin: AdminContext = Depends(get_current_admin),
) -> MessageResponse:
    await delete_whitelist_user(store, record_id)
    return MessageResponse(message=f"Whitelist user '{record_id}' deleted")
