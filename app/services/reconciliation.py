"""
Duplicate reconciliation — enforce one whitelist record per ``userId``.

Scans the whole collection, groups records by ``userId`` and keeps the
oldest of each group (lowest ``created_at``, ties broken by lowest id), then
deletes the rest in paced chunks. Progress counts removed and failed ids
alike, out of the number of duplicates found.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field

from app.core.config import settings
from app.core.exceptions import AuthorizationError
from app.db.store import WHITELIST_USERS, RecordStore
from app.models.whitelist_user import WhitelistUser
from app.services.bulk_delete import delete_in_chunks
from app.services.progress import ProgressCallback

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    total_scanned: int = 0
    duplicates_found: int = 0
    duplicates_removed: int = 0
    errors: list[str] = field(default_factory=list)


def _keep_order(record: WhitelistUser) -> tuple[int, str]:
    return (record.created_at or 0, record.id)


def find_duplicates(records: list[WhitelistUser]) -> list[str]:
    """Ids of every record that is not the one kept for its ``userId``."""
    groups: dict[str, list[WhitelistUser]] = defaultdict(list)
    for record in records:
        groups[record.user_id].append(record)

    duplicates: list[str] = []
    for group in groups.values():
        if len(group) > 1:
            ordered = sorted(group, key=_keep_order)
            duplicates.extend(r.id for r in ordered[1:])
    return duplicates


class DuplicateReconciler:
    def __init__(
        self,
        store: RecordStore,
        *,
        chunk_size: int = 500,
        pause_seconds: float = 0.5,
    ) -> None:
        self.store = store
        self.chunk_size = chunk_size
        self.pause_seconds = pause_seconds

    async def run(
        self,
        is_super_admin: bool,
        on_progress: ProgressCallback | None = None,
    ) -> ReconcileResult:
        if not is_super_admin:
            raise AuthorizationError("Only super admin can remove duplicates")

        records = await self.store.get_all(WHITELIST_USERS)
        duplicates = find_duplicates(records)
        result = ReconcileResult(total_scanned=len(records), duplicates_found=len(duplicates))

        deleted = await delete_in_chunks(
            self.store,
            WHITELIST_USERS,
            duplicates,
            chunk_size=self.chunk_size,
            pause_seconds=self.pause_seconds,
            on_progress=on_progress,
        )
        result.duplicates_removed = deleted.success
        result.errors = deleted.errors

        logger.info(
            "Duplicate scan: %d records, %d duplicates, %d removed",
            result.total_scanned,
            result.duplicates_found,
            result.duplicates_removed,
        )
        return result


async def remove_duplicate_users(
    store: RecordStore,
    is_super_admin: bool,
    on_progress: ProgressCallback | None = None,
) -> ReconcileResult:
    reconciler = DuplicateReconciler(
        store,
        chunk_size=settings.DELETE_CHUNK_SIZE,
        pause_seconds=settings.DELETE_CHUNK_DELAY_SECONDS,
    )
    return await reconciler.run(is_super_admin, on_progress)
