"""
AdminUser model — people allowed to operate the console.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, Column, String

from app.db.base import Base


class AdminUser(Base):
    __tablename__ = "admin_users"

    id: str = Column(String(64), primary_key=True)  # type: ignore[assignment]
    email: str = Column(String(320), nullable=False, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    user_id: str = Column(String(128), nullable=False, default="")  # type: ignore[assignment]
    role: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="admin",
        server_default="admin",
    )  # admin | super_admin
    is_active: bool = Column(Boolean, nullable=False, default=True, server_default="true")  # type: ignore[assignment]
    created_at: int = Column(BigInteger, nullable=False, default=0)  # type: ignore[assignment]
    created_by: str = Column(String(320), nullable=False, default="")  # type: ignore[assignment]
    last_login: int = Column(BigInteger, nullable=False, default=0)  # type: ignore[assignment]
    fcm_token: str | None = Column(String(512), nullable=True)  # type: ignore[assignment]
    fcm_token_updated_at: int | None = Column(BigInteger, nullable=True)  # type: ignore[assignment]
