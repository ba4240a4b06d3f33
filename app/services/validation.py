"""
Whitelist record validation — pure functions, no store access.

``validate_candidate`` classifies one raw import row as accepted, skipped
(duplicate inside the same batch) or rejected (fails a field rule), and
normalises accepted rows into a ``CandidateRecord``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import AbstractSet, Any, Union

_DOC_ID_UNSAFE = re.compile(r"[^a-zA-Z0-9_-]")
_FALSY_STRINGS = {"", "false", "0", "no", "off", "n"}

PLACEHOLDER_EMAIL_DOMAIN = "placeholder.local"


def whitelist_doc_id(user_id: str) -> str:
    """Derive the document id for a whitelist record from its ``userId``."""
    return _DOC_ID_UNSAFE.sub("_", user_id)


def placeholder_email(user_id: str) -> str:
    return f"no-email-{user_id}@{PLACEHOLDER_EMAIL_DOMAIN}"


def coerce_bool(value: Any, default: bool = True) -> bool:
    """Coerce JSON / CSV truthy-falsy values (``"false"``, ``0``, ...) to bool."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() not in _FALSY_STRINGS
    return bool(value)


@dataclass(frozen=True)
class CandidateRecord:
    name: str
    email: str
    user_id: str
    device_id: str
    is_active: bool
    row_number: int


@dataclass(frozen=True)
class Accepted:
    record: CandidateRecord


@dataclass(frozen=True)
class Skipped:
    reason: str


@dataclass(frozen=True)
class Rejected:
    reason: str


Verdict = Union[Accepted, Skipped, Rejected]


def _text(raw: Mapping[str, Any], *keys: str) -> str:
    """First present key among *keys*, stringified and trimmed ("" if absent)."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return str(value).strip()
    return ""


def validate_candidate(
    raw: Mapping[str, Any],
    row_number: int,
    seen_user_ids: AbstractSet[str] = frozenset(),
) -> Verdict:
    """Classify one candidate row.

    *row_number* is 1-based and is carried on the accepted record so callers
    can map later failures back to the source file. *seen_user_ids* holds the
    ``userId``s accepted earlier in the same batch; it is not modified.
    """
    if not isinstance(raw, Mapping):
        return Rejected("Record must be an object")

    name = _text(raw, "name")
    if not name:
        return Rejected("Name is required")

    email = _text(raw, "email").lower()
    if email and "@" not in email:
        return Rejected("Valid email is required")

    user_id = _text(raw, "userId", "user_id")
    if not user_id:
        return Rejected("User ID is required")

    device_id = _text(raw, "deviceId", "device_id")
    if not device_id:
        return Rejected("Device ID is required")

    if user_id in seen_user_ids:
        return Skipped(f'Duplicate userId "{user_id}" in import file')

    is_active = raw.get("isActive", raw.get("is_active"))
    return Accepted(
        CandidateRecord(
            name=name,
            email=email or placeholder_email(user_id),
            user_id=user_id,
            device_id=device_id,
            is_active=coerce_bool(is_active),
            row_number=row_number,
        )
    )
