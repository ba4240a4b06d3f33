"""
Bulk import of whitelist records.

Pipeline: validate every row locally → look up already-stored ``userId``s in
groups (one ``in`` query per group) → drop rows that already exist → write
the rest in chunks, one atomic batch per chunk, pausing between chunks to
stay under backend write-rate limits. A rejected batch falls back to
per-record writes so one bad record does not sink its siblings.

Row numbers in error strings are 1-based positions in the original input.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from app.core.config import settings
from app.core.exceptions import BackendError, ImportFormatError
from app.core.timeutils import now_ms
from app.db.store import WHITELIST_USERS, RecordStore
from app.services.progress import ProgressCallback, report
from app.services.validation import (
    Accepted,
    CandidateRecord,
    Rejected,
    Skipped,
    validate_candidate,
    whitelist_doc_id,
)

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    success: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.success + self.failed + self.skipped


def whitelist_row(record: CandidateRecord, added_by: str, timestamp: int) -> dict[str, Any]:
    """Column values for a new whitelist record (id excluded)."""
    return {
        "name": record.name,
        "email": record.email,
        "user_id": record.user_id,
        "device_id": record.device_id,
        "is_active": record.is_active,
        "created_at": timestamp,
        "added_at": timestamp,
        "added_by": added_by,
        "last_login": 0,
    }


def _chunks(items: Sequence[Any], size: int):
    for start in range(0, len(items), size):
        yield start, items[start:start + size]


class BulkImporter:
    def __init__(
        self,
        store: RecordStore,
        *,
        chunk_size: int = 50,
        lookup_size: int = 30,
        pause_seconds: float = 1.0,
    ) -> None:
        self.store = store
        self.chunk_size = chunk_size
        self.lookup_size = lookup_size
        self.pause_seconds = pause_seconds

    async def run(
        self,
        records: Sequence[Any],
        added_by: str,
        on_progress: ProgressCallback | None = None,
    ) -> ImportResult:
        result = ImportResult()
        total = len(records)

        accepted = self._validate(records, result)
        if not accepted:
            return result

        existing = await self._existing_user_ids(accepted)
        pending: list[CandidateRecord] = []
        for record in accepted:
            if record.user_id in existing:
                result.skipped += 1
                result.errors.append(
                    f'Row {record.row_number}: User "{record.user_id}" already exists in database'
                )
            else:
                pending.append(record)

        for start, chunk in _chunks(pending, self.chunk_size):
            await self._write_chunk(chunk, added_by, result, total, on_progress)
            if start + self.chunk_size < len(pending):
                await self._pause()

        logger.info(
            "Whitelist import by %s: %d imported, %d failed, %d skipped (of %d rows)",
            added_by,
            result.success,
            result.failed,
            result.skipped,
            total,
        )
        return result

    async def _pause(self) -> None:
        await asyncio.sleep(self.pause_seconds)

    def _validate(self, records: Sequence[Any], result: ImportResult) -> list[CandidateRecord]:
        accepted: list[CandidateRecord] = []
        seen: set[str] = set()
        for index, raw in enumerate(records):
            row_number = index + 1
            verdict = validate_candidate(raw, row_number, seen)
            if isinstance(verdict, Accepted):
                seen.add(verdict.record.user_id)
                accepted.append(verdict.record)
            elif isinstance(verdict, Skipped):
                result.skipped += 1
                result.errors.append(f"Row {row_number}: {verdict.reason}")
            elif isinstance(verdict, Rejected):
                result.failed += 1
                result.errors.append(f"Row {row_number}: {verdict.reason}")
        return accepted

    async def _existing_user_ids(self, records: list[CandidateRecord]) -> set[str]:
        existing: set[str] = set()
        for _start, group in _chunks(records, self.lookup_size):
            user_ids = [r.user_id for r in group]
            try:
                found = await self.store.query_by_field_in(WHITELIST_USERS, "user_id", user_ids)
            except BackendError as exc:
                # Treated as "none found"; insert-only writes still reject taken ids.
                logger.warning("Existence check failed for %d ids: %s", len(user_ids), exc)
                continue
            existing.update(doc.user_id for doc in found)
        return existing

    async def _write_chunk(
        self,
        chunk: Sequence[CandidateRecord],
        added_by: str,
        result: ImportResult,
        total: int,
        on_progress: ProgressCallback | None,
    ) -> None:
        timestamp = now_ms()
        items = [
            (whitelist_doc_id(r.user_id), whitelist_row(r, added_by, timestamp))
            for r in chunk
        ]
        try:
            await self.store.write_many(WHITELIST_USERS, items)
        except BackendError as exc:
            logger.warning(
                "Batch of %d rejected (%s), retrying records individually", len(chunk), exc
            )
        else:
            result.success += len(chunk)
            report(on_progress, result.processed, total)
            return

        for record, (doc_id, row) in zip(chunk, items):
            try:
                await self.store.write_one(WHITELIST_USERS, doc_id, row)
                result.success += 1
            except BackendError as exc:
                result.failed += 1
                result.errors.append(f"Row {record.row_number}: {exc}")
            report(on_progress, result.processed, total)


async def bulk_import_whitelist_users(
    store: RecordStore,
    records: Sequence[Any],
    added_by: str,
    on_progress: ProgressCallback | None = None,
) -> ImportResult:
    importer = BulkImporter(
        store,
        chunk_size=settings.IMPORT_CHUNK_SIZE,
        lookup_size=settings.IMPORT_LOOKUP_SIZE,
        pause_seconds=settings.IMPORT_CHUNK_DELAY_SECONDS,
    )
    return await importer.run(records, added_by, on_progress)


async def import_whitelist_from_json(
    store: RecordStore,
    json_data: str,
    added_by: str,
    on_progress: ProgressCallback | None = None,
) -> ImportResult:
    """Parse a JSON array of user objects and bulk-import it."""
    try:
        records = json.loads(json_data)
    except json.JSONDecodeError as exc:
        raise ImportFormatError(f"JSON Import Error: {exc.msg}") from exc
    if not isinstance(records, list):
        raise ImportFormatError(
            "JSON Import Error: Invalid JSON format. Must be an array of user objects."
        )
    return await bulk_import_whitelist_users(store, records, added_by, on_progress)
