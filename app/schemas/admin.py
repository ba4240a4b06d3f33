"""Pydantic schemas for admin accounts."""

from __future__ import annotations

from typing import Literal

from pydantic import field_validator

from app.schemas.common import CamelModel, PartialUpdate

AdminRole = Literal["admin", "super_admin"]


def _email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v:
        raise ValueError("Invalid email address")
    return v


class AdminUserCreate(CamelModel):
    email: str
    name: str
    user_id: str = ""
    role: AdminRole = "admin"

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        return _email(v)

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        return v


class AdminUserUpdate(PartialUpdate):
    email: str | None = None
    name: str | None = None
    user_id: str | None = None
    role: AdminRole | None = None
    is_active: bool | None = None

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str | None) -> str | None:
        return _email(v) if v is not None else v


class AdminUserRead(CamelModel):
    id: str
    email: str
    name: str
    user_id: str
    role: str
    is_active: bool
    created_at: int
    created_by: str
    last_login: int


class AdminUserCreated(CamelModel):
    success: bool = True
    id: str
