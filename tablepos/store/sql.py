from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select, text
from sqlalchemy.orm import Session

from tablepos.db import Base, make_engine, make_session_factory
from tablepos.errors import NotFoundError
from tablepos.models.core import (
    AppSettingsRow, BusinessProfileRow, DiningTableRow, MenuItemRow, OrderRow,
)
from tablepos.schemas.menu import MenuItem
from tablepos.schemas.orders import Order, OrderItem
from tablepos.schemas.settings import AppSettings, BusinessProfile
from tablepos.schemas.tables import Table
from tablepos.store.base import DataStore, Entity, WriteBatch

SINGLETON_ID = "default"

ROWS = {
    Entity.MENU: MenuItemRow,
    Entity.TABLES: DiningTableRow,
    Entity.ORDERS: OrderRow,
    Entity.SETTINGS: AppSettingsRow,
    Entity.PROFILE: BusinessProfileRow,
}
RECORDS = {
    Entity.MENU: MenuItem,
    Entity.TABLES: Table,
    Entity.ORDERS: Order,
    Entity.SETTINGS: AppSettings,
    Entity.PROFILE: BusinessProfile,
}


def _utc(dt: datetime | None) -> datetime | None:
    # sqlite drops tzinfo on the way back; everything is written as UTC
    if dt is None or dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=timezone.utc)


def _record_from_row(entity: Entity, row) -> Any:
    model = RECORDS[entity]
    data = {name: getattr(row, name) for name in model.model_fields}
    if entity is Entity.TABLES:
        data["session_start_time"] = _utc(data["session_start_time"])
    elif entity is Entity.ORDERS:
        data["created_at"] = _utc(data["created_at"])
        data["items"] = [OrderItem.model_validate(i) for i in (row.items or [])]
    return model.model_validate(data)


def _row_values(entity: Entity, record) -> dict:
    values = record.model_dump(exclude={"id"} if hasattr(record, "id") else None)
    for k, v in values.items():
        if isinstance(v, datetime) and v.tzinfo is not None:
            values[k] = v.astimezone(timezone.utc)
    return values


class SqlStore(DataStore):
    """SQLAlchemy-backed store; one row per record, one transaction per commit."""

    def __init__(self, url: str) -> None:
        super().__init__()
        self.url = url
        self.engine = make_engine(url)
        self.SessionLocal = make_session_factory(self.engine)

    def bootstrap_schema(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def close(self) -> None:
        self.engine.dispose()

    def _snapshot(self, entity: Entity) -> Any:
        row_cls = ROWS[entity]
        with self.SessionLocal() as db:
            if entity in (Entity.SETTINGS, Entity.PROFILE):
                row = db.get(row_cls, SINGLETON_ID)
                return _record_from_row(entity, row) if row else None
            q = select(row_cls).where(row_cls.deleted_at.is_(None))
            if entity is Entity.ORDERS:
                q = q.order_by(OrderRow.created_at.desc(), OrderRow.id.desc())
            else:
                q = q.order_by(row_cls.position.asc(), row_cls.id.asc())
            return [_record_from_row(entity, r) for r in db.scalars(q)]

    def _apply(self, batch: WriteBatch) -> None:
        with self.SessionLocal() as db:
            try:
                for entity, records in batch.changes.items():
                    for record in records:
                        self._upsert(db, entity, record)
                db.commit()
            except Exception:
                db.rollback()
                raise

    def _upsert(self, db: Session, entity: Entity, record) -> None:
        row_cls = ROWS[entity]
        record_id = getattr(record, "id", SINGLETON_ID)
        values = _row_values(entity, record)
        row = db.get(row_cls, record_id)
        if row is None:
            row = row_cls(id=record_id, **values)
            if hasattr(row_cls, "position"):
                top = db.scalar(select(func.coalesce(func.max(row_cls.position), -1)))
                row.position = int(top) + 1
            db.add(row)
            db.flush()
            return
        for k, v in values.items():
            setattr(row, k, v)
        # upserting a soft-deleted id brings it back
        row.deleted_at = None
        row.version = (row.version or 0) + 1
        db.flush()

    def _delete(self, entity: Entity, record_id: str) -> None:
        row_cls = ROWS[entity]
        with self.SessionLocal() as db:
            row = db.get(row_cls, record_id)
            if not row or row.deleted_at is not None:
                raise NotFoundError(f"{entity.value} record {record_id} not found")
            row.deleted_at = datetime.now(timezone.utc)
            db.commit()

    def _ping(self) -> bool:
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1
