"""Tests for the bulk import engine and the import endpoints."""

import pytest

from app.core.exceptions import BackendError, ImportFormatError
from app.db.store import WHITELIST_USERS, RecordStore
from app.services.bulk_import import BulkImporter, import_whitelist_from_json
from conftest import SUPER_ADMIN_EMAIL, seed_whitelist, whitelist_row


def candidate(user_id, **overrides):
    row = {"name": f"User {user_id}", "userId": user_id, "deviceId": f"dev-{user_id}"}
    row.update(overrides)
    return row


class CountingImporter(BulkImporter):
    """Importer that records pauses instead of sleeping."""

    def __init__(self, store, **kwargs):
        super().__init__(store, **kwargs)
        self.pauses = 0

    async def _pause(self) -> None:
        self.pauses += 1


class BatchRejectingStore(RecordStore):
    """Batch writes always fail; single writes fail for selected user ids."""

    def __init__(self, session, failing_user_ids=()):
        super().__init__(session)
        self.failing_user_ids = set(failing_user_ids)
        self.batch_calls = 0

    async def write_many(self, collection, items):
        self.batch_calls += 1
        raise BackendError("batch quota exceeded")

    async def write_one(self, collection, record_id, record):
        if record["user_id"] in self.failing_user_ids:
            raise BackendError(f'write rejected for "{record["user_id"]}"')
        await super().write_one(collection, record_id, record)


class LookupFailingStore(RecordStore):
    async def query_by_field_in(self, collection, field, values):
        raise BackendError("lookup unavailable")


# ── Engine ───────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_clean_import(store):
    importer = CountingImporter(store)
    records = [candidate("u1"), candidate("u2", email="Two@Example.com")]

    result = await importer.run(records, SUPER_ADMIN_EMAIL)

    assert (result.success, result.failed, result.skipped) == (2, 0, 0)
    assert result.errors == []
    stored = await store.get_by_id(WHITELIST_USERS, "u2")
    assert stored.email == "two@example.com"
    assert stored.added_by == SUPER_ADMIN_EMAIL
    assert stored.is_active is True
    assert stored.last_login == 0
    assert stored.created_at == stored.added_at


@pytest.mark.asyncio
async def test_in_file_duplicate_is_skipped(store):
    importer = CountingImporter(store)
    records = [candidate("u1"), candidate("u1", name="Again")]

    result = await importer.run(records, SUPER_ADMIN_EMAIL)

    assert (result.success, result.failed, result.skipped) == (1, 0, 1)
    assert result.errors == ['Row 2: Duplicate userId "u1" in import file']
    stored = await store.get_by_id(WHITELIST_USERS, "u1")
    assert stored.name == "User u1"


@pytest.mark.asyncio
async def test_invalid_row_is_reported_with_its_position(store):
    importer = CountingImporter(store)
    records = [candidate("u1"), candidate("u2"), candidate("u3", name=""), candidate("u4")]

    result = await importer.run(records, SUPER_ADMIN_EMAIL)

    assert (result.success, result.failed, result.skipped) == (3, 1, 0)
    assert result.errors == ["Row 3: Name is required"]
    assert await store.get_by_id(WHITELIST_USERS, "u3") is None


@pytest.mark.asyncio
async def test_reimport_skips_existing_users(store):
    records = [candidate("u1"), candidate("u2")]
    await CountingImporter(store).run(records, SUPER_ADMIN_EMAIL)

    result = await CountingImporter(store).run(records, SUPER_ADMIN_EMAIL)

    assert (result.success, result.failed, result.skipped) == (0, 0, 2)
    assert result.errors == [
        'Row 1: User "u1" already exists in database',
        'Row 2: User "u2" already exists in database',
    ]
    assert len(await store.get_all(WHITELIST_USERS)) == 2


@pytest.mark.asyncio
async def test_empty_input(store):
    calls = []
    result = await CountingImporter(store).run([], SUPER_ADMIN_EMAIL, lambda c, t: calls.append((c, t)))
    assert (result.success, result.failed, result.skipped) == (0, 0, 0)
    assert result.errors == []
    assert calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("count, chunks", [(50, 1), (51, 2), (120, 3)])
async def test_chunk_boundaries(store, count, chunks):
    importer = CountingImporter(store, chunk_size=50)
    calls = []

    result = await importer.run(
        [candidate(f"u{i}") for i in range(count)],
        SUPER_ADMIN_EMAIL,
        lambda current, total: calls.append((current, total)),
    )

    assert result.success == count
    assert importer.pauses == chunks - 1
    assert len(calls) == chunks
    assert calls[-1] == (count, count)


@pytest.mark.asyncio
async def test_lookup_groups_cover_every_candidate(store):
    await seed_whitelist(store, ("u0", whitelist_row("u0")), ("u44", whitelist_row("u44")))
    importer = CountingImporter(store, lookup_size=30)

    result = await importer.run([candidate(f"u{i}") for i in range(45)], SUPER_ADMIN_EMAIL)

    assert (result.success, result.skipped) == (43, 2)


@pytest.mark.asyncio
async def test_failed_batch_falls_back_to_single_writes(db_session):
    store = BatchRejectingStore(db_session, failing_user_ids={"u17"})
    importer = CountingImporter(store)
    calls = []

    result = await importer.run(
        [candidate(f"u{i}") for i in range(50)],
        SUPER_ADMIN_EMAIL,
        lambda current, total: calls.append((current, total)),
    )

    assert store.batch_calls == 1
    assert (result.success, result.failed, result.skipped) == (49, 1, 0)
    assert result.errors == ['Row 18: write rejected for "u17"']
    assert len(await store.get_all(WHITELIST_USERS)) == 49
    # Progress is reported after every single write during the fallback.
    assert len(calls) == 50
    assert calls[-1] == (50, 50)


@pytest.mark.asyncio
async def test_existence_check_failure_still_blocks_duplicates(db_session):
    store = LookupFailingStore(db_session)
    await seed_whitelist(store, ("u1", whitelist_row("u1", name="Original")))

    result = await CountingImporter(store).run(
        [candidate("u1", name="Replacement"), candidate("u2")], SUPER_ADMIN_EMAIL
    )

    assert (result.success, result.failed, result.skipped) == (1, 1, 0)
    assert result.errors == ['Row 1: Record "u1" already exists in whitelist_users']
    stored = await store.get_by_id(WHITELIST_USERS, "u1")
    assert stored.name == "Original"
    assert await store.get_by_id(WHITELIST_USERS, "u2") is not None


@pytest.mark.asyncio
async def test_counts_add_up(store):
    await seed_whitelist(store, ("u5", whitelist_row("u5")))
    records = [
        candidate("u1"),
        candidate("u1"),
        candidate("u2", deviceId=""),
        "not a record",
        candidate("u5"),
        candidate("u6"),
    ]

    result = await CountingImporter(store).run(records, SUPER_ADMIN_EMAIL)

    assert result.processed == len(records)
    assert (result.success, result.failed, result.skipped) == (2, 2, 2)


# ── JSON import ──────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_json_import(store):
    result = await import_whitelist_from_json(
        store, '[{"name": "Ann", "userId": "a1", "deviceId": "d1"}]', SUPER_ADMIN_EMAIL
    )
    assert result.success == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", ["{not json", '{"userId": "a1"}', '"text"'])
async def test_json_import_rejects_bad_payloads(store, payload):
    with pytest.raises(ImportFormatError) as exc_info:
        await import_whitelist_from_json(store, payload, SUPER_ADMIN_EMAIL)
    assert exc_info.value.message.startswith("JSON Import Error:")


# ── Endpoints ────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_import_endpoint(async_client):
    response = await async_client.post(
        "/api/v1/whitelist/import",
        json={"records": [candidate("u1"), candidate("u1"), candidate("u2", name="")]},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] == 1
    assert body["skipped"] == 1
    assert body["failed"] == 1
    assert body["errors"] == [
        'Row 2: Duplicate userId "u1" in import file',
        "Row 3: Name is required",
    ]


@pytest.mark.asyncio
async def test_import_json_endpoint_rejects_non_array(async_client):
    response = await async_client.post(
        "/api/v1/whitelist/import/json", json={"jsonData": '{"userId": "u1"}'}
    )
    assert response.status_code == 400
    assert response.json()["detail"].startswith("JSON Import Error:")
