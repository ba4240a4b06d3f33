"""Pydantic schemas for whitelist users, bulk operations and stats."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from app.schemas.common import CamelModel, PartialUpdate


# ── Single record ───────────────────────────────────────────────────
class WhitelistUserCreate(CamelModel):
    name: str
    email: str | None = None
    user_id: str
    device_id: str
    is_active: bool = True


class WhitelistUserUpdate(PartialUpdate):
    name: str | None = None
    email: str | None = None
    user_id: str | None = None
    device_id: str | None = None
    is_active: bool | None = None

    @field_validator("name", "user_id", "device_id")
    @classmethod
    def _not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Valid email is required")
        return v


class WhitelistUserRead(CamelModel):
    id: str
    name: str
    email: str
    user_id: str
    device_id: str
    is_active: bool
    created_at: int
    added_at: int
    added_by: str
    last_login: int
    fcm_token: str | None = None
    fcm_token_updated_at: int | None = None


class WhitelistUserCreated(CamelModel):
    success: bool = True
    id: str


# ── Bulk operations ─────────────────────────────────────────────────
class ImportRequest(CamelModel):
    # Raw rows: validated one by one so a bad row never rejects the batch
    records: list[Any]


class ImportJsonRequest(CamelModel):
    json_data: str


class ImportResultRead(CamelModel):
    success: int
    failed: int
    skipped: int
    errors: list[str]


class DeleteResultRead(CamelModel):
    success: int
    failed: int
    errors: list[str]


class ReconcileResultRead(CamelModel):
    total_scanned: int
    duplicates_found: int
    duplicates_removed: int
    errors: list[str]


# ── Dashboard ───────────────────────────────────────────────────────
class WhitelistStats(CamelModel):
    total: int
    active: int
    inactive: int
    recent: int
    recent_users: list[WhitelistUserRead]
