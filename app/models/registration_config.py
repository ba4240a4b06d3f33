"""
RegistrationConfig model — singleton document for the sign-up links.

Only one row should ever exist (id ``registration_config``). It is created
with defaults on first read and updated through the settings API.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, Column, String

from app.db.base import Base

REGISTRATION_CONFIG_ID = "registration_config"


class RegistrationConfig(Base):
    __tablename__ = "app_config"

    id: str = Column(String(64), primary_key=True, default=REGISTRATION_CONFIG_ID)  # type: ignore[assignment]
    registration_url: str = Column(String(1000), nullable=False)  # type: ignore[assignment]
    whatsapp_help_url: str = Column(String(1000), nullable=False)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, nullable=False, default=True, server_default="true")  # type: ignore[assignment]
    description: str = Column(String(500), nullable=False, default="")  # type: ignore[assignment]
    created_at: int = Column(BigInteger, nullable=False, default=0)  # type: ignore[assignment]
    updated_at: int = Column(BigInteger, nullable=False, default=0)  # type: ignore[assignment]
    updated_by: str = Column(String(320), nullable=False, default="")  # type: ignore[assignment]
