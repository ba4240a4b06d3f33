"""Millisecond-epoch helpers (all stored timestamps use this unit)."""

from __future__ import annotations

import time
from datetime import datetime, timezone


def now_ms() -> int:
    return int(time.time() * 1000)


def ms_to_iso(ms: int | None) -> str:
    """Render epoch milliseconds as ``2024-01-31T12:00:00.000Z``."""
    dt = datetime.fromtimestamp((ms or 0) / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")
