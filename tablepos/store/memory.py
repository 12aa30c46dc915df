from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from tablepos.errors import NotFoundError
from tablepos.store.base import DataStore, Entity, SINGLETONS, WriteBatch


class MemoryStore(DataStore):
    """Process-local store. Records are frozen pydantic models, so snapshots share them safely."""

    def __init__(self) -> None:
        super().__init__()
        self._collections: dict[Entity, dict[str, BaseModel]] = {
            e: {} for e in Entity if e not in SINGLETONS
        }
        self._singletons: dict[Entity, BaseModel | None] = {e: None for e in SINGLETONS}

    def _snapshot(self, entity: Entity) -> Any:
        if entity in SINGLETONS:
            return self._singletons[entity]
        records = list(self._collections[entity].values())
        if entity is Entity.ORDERS:
            records.sort(key=lambda o: o.created_at, reverse=True)
        return records

    def _apply(self, batch: WriteBatch) -> None:
        # stage first so a bad batch leaves nothing half-applied
        staged = {e: dict(self._collections[e]) for e in batch.entities() if e not in SINGLETONS}
        for entity, records in batch.changes.items():
            if entity in SINGLETONS:
                continue
            for record in records:
                staged[entity][record.id] = record
        self._collections.update(staged)
        for entity in batch.entities():
            if entity in SINGLETONS:
                self._singletons[entity] = batch.changes[entity][0]

    def _delete(self, entity: Entity, record_id: str) -> None:
        if record_id not in self._collections[entity]:
            raise NotFoundError(f"{entity.value} record {record_id} not found")
        del self._collections[entity][record_id]

    def _ping(self) -> bool:
        return True
