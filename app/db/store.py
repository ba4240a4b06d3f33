"""
Record store adapter — the only code that talks to the database.

Exposes a small document-style surface (get / query / write / delete by
collection name) over an ``AsyncSession``. Every method is one round-trip
and one transaction; multi-record writes and deletes are atomic per call.
Any SQLAlchemy failure is rolled back and re-raised as ``BackendError``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BackendError, RecordExistsError, RecordNotFoundError
from app.db.base import Base
from app.models.admin_user import AdminUser
from app.models.registration_config import RegistrationConfig
from app.models.whitelist_user import WhitelistUser

WHITELIST_USERS = WhitelistUser.__tablename__
ADMIN_USERS = AdminUser.__tablename__
APP_CONFIG = RegistrationConfig.__tablename__

COLLECTION_MODELS: dict[str, type[Base]] = {
    WHITELIST_USERS: WhitelistUser,
    ADMIN_USERS: AdminUser,
    APP_CONFIG: RegistrationConfig,
}


class RecordStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # ── Helpers ─────────────────────────────────────────────────────
    @staticmethod
    def _model(collection: str) -> type[Base]:
        try:
            return COLLECTION_MODELS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    @staticmethod
    def _column(model: type[Base], field: str) -> Any:
        if field not in model.__table__.columns:
            raise ValueError(f"Unknown field {field!r} on {model.__tablename__}")
        return getattr(model, field)

    def _ordered(self, stmt, model: type[Base], order_by: str | None, descending: bool):
        if order_by is None:
            return stmt
        column = self._column(model, order_by)
        if descending:
            return stmt.order_by(column.desc(), model.id.desc())  # type: ignore[attr-defined]
        return stmt.order_by(column.asc(), model.id.asc())  # type: ignore[attr-defined]

    async def _fetch(self, stmt, collection: str) -> list[Any]:
        try:
            result = await self.session.execute(
                stmt.execution_options(populate_existing=True)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise BackendError(f"Read from {collection} failed: {exc}") from exc

    # ── Reads ───────────────────────────────────────────────────────
    async def get_by_id(self, collection: str, record_id: str) -> Any | None:
        model = self._model(collection)
        try:
            return await self.session.get(model, record_id, populate_existing=True)
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise BackendError(f"Read from {collection} failed: {exc}") from exc

    async def get_all(
        self,
        collection: str,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Any]:
        model = self._model(collection)
        stmt = self._ordered(select(model), model, order_by, descending)
        return await self._fetch(stmt, collection)

    async def query_by_field(
        self,
        collection: str,
        field: str,
        value: Any,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Any]:
        model = self._model(collection)
        stmt = select(model).where(self._column(model, field) == value)
        stmt = self._ordered(stmt, model, order_by, descending)
        return await self._fetch(stmt, collection)

    async def query_by_field_in(
        self,
        collection: str,
        field: str,
        values: Iterable[Any],
    ) -> list[Any]:
        values = list(values)
        if not values:
            return []
        model = self._model(collection)
        stmt = select(model).where(self._column(model, field).in_(values))
        return await self._fetch(stmt, collection)

    # ── Writes ──────────────────────────────────────────────────────
    async def write_one(self, collection: str, record_id: str, record: dict[str, Any]) -> None:
        """Insert one record; ``RecordExistsError`` if *record_id* is taken."""
        model = self._model(collection)
        try:
            await self.session.execute(insert(model), [{**record, "id": record_id}])
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise RecordExistsError(
                f'Record "{record_id}" already exists in {collection}'
            ) from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise BackendError(f"Write to {collection} failed: {exc}") from exc

    async def write_many(
        self,
        collection: str,
        items: Sequence[tuple[str, dict[str, Any]]],
    ) -> None:
        """Insert all records in one transaction: all or nothing."""
        if not items:
            return
        model = self._model(collection)
        rows = [{**record, "id": record_id} for record_id, record in items]
        try:
            await self.session.execute(insert(model), rows)
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise RecordExistsError(
                f"Batch write to {collection} rejected: a record id already exists"
            ) from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise BackendError(f"Batch write to {collection} failed: {exc}") from exc

    async def update_one(self, collection: str, record_id: str, changes: dict[str, Any]) -> Any:
        model = self._model(collection)
        for field in changes:
            self._column(model, field)
        obj = await self.get_by_id(collection, record_id)
        if obj is None:
            raise RecordNotFoundError(f'Record "{record_id}" not found')
        for field, value in changes.items():
            setattr(obj, field, value)
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise BackendError(f"Update of {collection}/{record_id} failed: {exc}") from exc
        return obj

    # ── Deletes ─────────────────────────────────────────────────────
    async def delete_one(self, collection: str, record_id: str) -> None:
        model = self._model(collection)
        try:
            result = await self.session.execute(
                delete(model).where(model.id == record_id)  # type: ignore[attr-defined]
            )
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise BackendError(f"Delete from {collection} failed: {exc}") from exc
        if not result.rowcount:
            raise RecordNotFoundError(f'Record "{record_id}" not found')

    async def delete_many(self, collection: str, record_ids: Sequence[str]) -> None:
        """Delete every id in one transaction: all or nothing."""
        if not record_ids:
            return
        model = self._model(collection)
        try:
            await self.session.execute(
                delete(model).where(model.id.in_(list(record_ids)))  # type: ignore[attr-defined]
            )
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise BackendError(f"Batch delete from {collection} failed: {exc}") from exc
