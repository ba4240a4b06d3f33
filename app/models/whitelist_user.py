"""
WhitelistUser model — one approved end user of the trading platform.

The primary key is derived from ``user_id`` (see
``app.services.validation.whitelist_doc_id``). ``user_id`` itself carries no
unique constraint: uniqueness is enforced by the add / import services.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, Column, Index, String

from app.db.base import Base


class WhitelistUser(Base):
    __tablename__ = "whitelist_users"
    __table_args__ = (Index("ix_whitelist_added_by_created", "added_by", "created_at"),)

    id: str = Column(String(128), primary_key=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    email: str = Column(String(320), nullable=False)  # type: ignore[assignment]
    user_id: str = Column(String(128), nullable=False, index=True)  # type: ignore[assignment]
    device_id: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, nullable=False, default=True, server_default="true")  # type: ignore[assignment]
    # Timestamps are milliseconds since epoch
    created_at: int = Column(BigInteger, nullable=False, default=0)  # type: ignore[assignment]
    added_at: int = Column(BigInteger, nullable=False, default=0)  # type: ignore[assignment]
    added_by: str = Column(String(320), nullable=False, default="")  # type: ignore[assignment]
    last_login: int = Column(BigInteger, nullable=False, default=0)  # type: ignore[assignment]  # 0 = never
    # Written by the mobile client only
    fcm_token: str | None = Column(String(512), nullable=True)  # type: ignore[assignment]
    fcm_token_updated_at: int | None = Column(BigInteger, nullable=True)  # type: ignore[assignment]
