"""
Single-record whitelist operations and dashboard statistics.

``userId`` uniqueness is checked here before every add; the insert-only
write on the derived document id closes the remaining race between two
concurrent adds. ``userId`` never changes after the record is created.
"""

from __future__ import annotations

import logging
from typing import Any

from app.core.config import settings
from app.core.exceptions import (
    DuplicateRecordError,
    RecordExistsError,
    RecordNotFoundError,
    RecordValidationError,
)
from app.core.timeutils import now_ms
from app.db.store import WHITELIST_USERS, RecordStore
from app.models.whitelist_user import WhitelistUser
from app.services.bulk_import import whitelist_row
from app.services.validation import Accepted, validate_candidate, whitelist_doc_id

logger = logging.getLogger(__name__)

RECENT_USERS_LIMIT = 6


async def list_whitelist_users(
    store: RecordStore,
    admin_email: str,
    is_super_admin: bool,
) -> list[WhitelistUser]:
    """Super admins see every record; other admins only the ones they added."""
    if is_super_admin:
        return await store.get_all(WHITELIST_USERS, order_by="created_at", descending=True)
    return await store.query_by_field(
        WHITELIST_USERS, "added_by", admin_email, order_by="created_at", descending=True
    )


async def _ensure_user_id_free(store: RecordStore, user_id: str) -> None:
    holders = await store.query_by_field(WHITELIST_USERS, "user_id", user_id)
    if holders:
        raise DuplicateRecordError(f'User with ID "{user_id}" already exists')


async def add_whitelist_user(store: RecordStore, record: dict[str, Any], added_by: str) -> str:
    """Create one whitelist record and return its document id."""
    verdict = validate_candidate(record, 1)
    if not isinstance(verdict, Accepted):
        raise RecordValidationError(verdict.reason)
    candidate = verdict.record

    await _ensure_user_id_free(store, candidate.user_id)

    doc_id = whitelist_doc_id(candidate.user_id)
    try:
        await store.write_one(WHITELIST_USERS, doc_id, whitelist_row(candidate, added_by, now_ms()))
    except RecordExistsError as exc:
        raise DuplicateRecordError(f'User with ID "{candidate.user_id}" already exists') from exc

    logger.info("Whitelisted %s (userId %s) by %s", candidate.name, candidate.user_id, added_by)
    return doc_id


async def update_whitelist_user(
    store: RecordStore,
    record_id: str,
    changes: dict[str, Any],
) -> WhitelistUser:
    """Apply a partial update (field edits or an ``is_active`` toggle).

    ``user_id`` is immutable: the document id is derived from it, so a
    renamed record would keep blocking its old ``userId``.
    """
    nulls = sorted(field for field, value in changes.items() if value is None)
    if nulls:
        raise RecordValidationError(f"Fields must not be null: {', '.join(nulls)}")

    changes = dict(changes)
    new_user_id = changes.pop("user_id", None)
    if new_user_id is not None:
        current = await store.get_by_id(WHITELIST_USERS, record_id)
        if current is None:
            raise RecordNotFoundError(f'Record "{record_id}" not found')
        if new_user_id != current.user_id:
            raise RecordValidationError("User ID cannot be changed")
    user = await store.update_one(WHITELIST_USERS, record_id, changes)
    logger.info("Updated whitelist user %s: %s", record_id, sorted(changes))
    return user


async def delete_whitelist_user(store: RecordStore, record_id: str) -> None:
    await store.delete_one(WHITELIST_USERS, record_id)
    logger.info("Deleted whitelist user %s", record_id)


async def whitelist_stats(
    store: RecordStore,
    admin_email: str,
    is_super_admin: bool,
    now: int | None = None,
) -> dict[str, Any]:
    users = await list_whitelist_users(store, admin_email, is_super_admin)
    now = now if now is not None else now_ms()
    window_ms = settings.RECENT_LOGIN_WINDOW_HOURS * 60 * 60 * 1000

    active = sum(1 for u in users if u.is_active)
    recent = sum(1 for u in users if u.last_login and now - u.last_login < window_ms)
    by_login = sorted(users, key=lambda u: u.last_login or 0, reverse=True)
    return {
        "total": len(users),
        "active": active,
        "inactive": len(users) - active,
        "recent": recent,
        "recent_users": by_login[:RECENT_USERS_LIMIT],
    }
