"""Pydantic schemas for identity tokens and console sessions."""

from __future__ import annotations

from app.schemas.common import CamelModel


class SessionRequest(CamelModel):
    id_token: str


class SessionRead(CamelModel):
    email: str
    user_id: str
    name: str | None = None
    is_admin: bool
    is_super_admin: bool
