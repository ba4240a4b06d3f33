"""Pydantic schemas for the registration config singleton."""

from __future__ import annotations

from pydantic import field_validator

from app.schemas.common import CamelModel, PartialUpdate


class RegistrationConfigRead(CamelModel):
    id: str
    registration_url: str
    whatsapp_help_url: str
    is_active: bool
    description: str
    created_at: int
    updated_at: int
    updated_by: str


class RegistrationConfigUpdate(PartialUpdate):
    registration_url: str | None = None
    whatsapp_help_url: str | None = None
    is_active: bool | None = None
    description: str | None = None

    @field_validator("registration_url", "whatsapp_help_url")
    @classmethod
    def _url(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v
