"""
Whole-collection wipe of the whitelist (super admin only).

Records are deleted in chunks, one atomic delete per chunk, with a pause
between chunks. A failed chunk is counted as failed in full and the loop
moves on; there is no per-record retry because deletes are idempotent and
the caller can simply re-run the operation.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from app.core.config import settings
from app.core.exceptions import AuthorizationError, BackendError
from app.db.store import WHITELIST_USERS, RecordStore
from app.services.progress import ProgressCallback, report

logger = logging.getLogger(__name__)


@dataclass
class DeleteResult:
    success: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)


async def delete_in_chunks(
    store: RecordStore,
    collection: str,
    record_ids: Sequence[str],
    *,
    chunk_size: int,
    pause_seconds: float,
    on_progress: ProgressCallback | None = None,
) -> DeleteResult:
    """Delete *record_ids* chunk by chunk; progress after every chunk."""
    result = DeleteResult()
    total = len(record_ids)
    for start in range(0, total, chunk_size):
        batch = record_ids[start:start + chunk_size]
        batch_number = start // chunk_size + 1
        try:
            await store.delete_many(collection, batch)
            result.success += len(batch)
        except BackendError as exc:
            logger.error("Delete batch %d (%d ids) failed: %s", batch_number, len(batch), exc)
            result.failed += len(batch)
            result.errors.append(f"Batch {batch_number}: {exc}")
        report(on_progress, result.success + result.failed, total)
        if start + chunk_size < total:
            await asyncio.sleep(pause_seconds)
    return result


class BulkDeleter:
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
    ) -> DeleteResult:
        if not is_super_admin:
            raise AuthorizationError("Only super admin can delete all users")

        records = await self.store.get_all(WHITELIST_USERS)
        record_ids = [r.id for r in records]
        result = await delete_in_chunks(
            self.store,
            WHITELIST_USERS,
            record_ids,
            chunk_size=self.chunk_size,
            pause_seconds=self.pause_seconds,
            on_progress=on_progress,
        )
        logger.warning(
            "Deleted %d whitelist users (%d failed)", result.success, result.failed
        )
        return result


async def delete_all_whitelist_users(
    store: RecordStore,
    is_super_admin: bool,
    on_progress: ProgressCallback | None = None,
) -> DeleteResult:
    deleter = BulkDeleter(
        store,
        chunk_size=settings.DELETE_CHUNK_SIZE,
        pause_seconds=settings.DELETE_CHUNK_DELAY_SECONDS,
    )
    return await deleter.run(is_super_admin, on_progress)
