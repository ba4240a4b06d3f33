"""
Whitelist export — pretty-printed JSON or a fixed nine-column CSV.
"""

from __future__ import annotations

import csv
import io
import json

from app.core.timeutils import ms_to_iso
from app.db.store import WHITELIST_USERS, RecordStore
from app.schemas.whitelist import WhitelistUserRead

CSV_HEADERS = [
    "ID",
    "Name",
    "Email",
    "UserID",
    "DeviceID",
    "IsActive",
    "CreatedAt",
    "AddedBy",
    "AddedAt",
]


async def _all_users(store: RecordStore) -> list:
    return await store.get_all(WHITELIST_USERS, order_by="created_at")


async def export_whitelist_as_json(store: RecordStore) -> str:
    users = await _all_users(store)
    payload = [
        WhitelistUserRead.model_validate(u).model_dump(by_alias=True, exclude_none=True)
        for u in users
    ]
    return json.dumps(payload, indent=2, ensure_ascii=False)


async def export_whitelist_as_csv(store: RecordStore) -> str:
    users = await _all_users(store)
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for u in users:
        writer.writerow(
            [
                u.id,
                u.name or "",
                u.email or "",
                u.user_id or "",
                u.device_id or "",
                "true" if u.is_active else "false",
                ms_to_iso(u.created_at),
                u.added_by or "",
                ms_to_iso(u.added_at),
            ]
        )
    return buf.getvalue().rstrip("\n")
