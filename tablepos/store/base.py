from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass, field
from enum import Enum as PyEnum
from typing import Any, Callable, DefaultDict, Iterable, List

from pydantic import BaseModel

from tablepos.errors import PersistenceError, PosError, ValidationError


class Entity(PyEnum):
    MENU = "menu"
    TABLES = "tables"
    ORDERS = "orders"
    SETTINGS = "settings"
    PROFILE = "profile"


# settings/profile hold one record; the rest are collections keyed by id
SINGLETONS = {Entity.SETTINGS, Entity.PROFILE}
DELETABLE = {Entity.MENU, Entity.TABLES}

Listener = Callable[[Any], None]
Unsubscribe = Callable[[], None]


class ListenerRegistry:
    """Per-entity listener lists. Delivery is in registration order."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[Entity, List[Listener]] = defaultdict(list)
        self._logger = logging.getLogger(__name__)

    def add(self, entity: Entity, listener: Listener) -> Unsubscribe:
        self._handlers[entity].append(listener)

        def unsubscribe() -> None:
            handlers = self._handlers[entity]
            if listener in handlers:
                handlers.remove(listener)

        return unsubscribe

    def count(self, entity: Entity) -> int:
        return len(self._handlers.get(entity, []))

    def emit(self, entity: Entity, payload: Any) -> None:
        for handler in list(self._handlers.get(entity, [])):
            try:
                handler(payload)
            except Exception:
                self._logger.exception("store listener failed for %s", entity.value)


@dataclass
class WriteBatch:
    """Records upserted together as one logical write."""
    changes: dict[Entity, list[BaseModel]] = field(default_factory=dict)

    def put(self, entity: Entity, *records: BaseModel) -> "WriteBatch":
        self.changes.setdefault(entity, []).extend(records)
        return self

    def entities(self) -> list[Entity]:
        return list(self.changes)


class DataStore(ABC):
    """Subscribe / read / write contract the core consumes.

    Subclasses implement the storage primitives (`_snapshot`, `_apply`,
    `_delete`, `_ping`); this base handles listener bookkeeping, ordering and
    error translation so every backend behaves the same to its callers.
    """

    def __init__(self) -> None:
        self._listeners = ListenerRegistry()
        # re-entrant: a listener may write back into the store from its callback
        self._lock = threading.RLock()
        self._logger = logging.getLogger(type(self).__module__)

    # ── public contract ────────────────────────────────────────────────────
    def subscribe(self, entity: Entity, listener: Listener) -> Unsubscribe:
        with self._lock:
            unsubscribe = self._listeners.add(entity, listener)
            try:
                listener(self.read(entity))
            except Exception:
                unsubscribe()
                raise
        return unsubscribe

    def read(self, entity: Entity) -> Any:
        try:
            return self._snapshot(entity)
        except PosError:
            raise
        except Exception as exc:
            self._logger.exception("store read failed for %s", entity.value)
            raise PersistenceError(f"could not read {entity.value}") from exc

    def write(self, entity: Entity, records: BaseModel | Iterable[BaseModel]) -> None:
        if isinstance(records, BaseModel):
            records = [records]
        self.commit(WriteBatch().put(entity, *records))

    def commit(self, batch: WriteBatch) -> None:
        for entity, records in batch.changes.items():
            if entity in SINGLETONS and len(records) != 1:
                raise ValidationError(f"{entity.value} takes exactly one record")
        with self._lock:
            try:
                self._apply(batch)
            except PosError:
                raise
            except Exception as exc:
                self._logger.exception("store write failed for %s", [e.value for e in batch.entities()])
                raise PersistenceError("could not save changes") from exc
            for entity in batch.entities():
                self._notify(entity)

    def delete(self, entity: Entity, record_id: str) -> None:
        if entity not in DELETABLE:
            raise ValidationError(f"{entity.value} records cannot be deleted")
        with self._lock:
            try:
                self._delete(entity, record_id)
            except PosError:
                raise
            except Exception as exc:
                self._logger.exception("store delete failed for %s/%s", entity.value, record_id)
                raise PersistenceError(f"could not delete {record_id}") from exc
            self._notify(entity)

    def _notify(self, entity: Entity) -> None:
        # the write already landed; a failed re-read only delays listeners until the next change
        try:
            snapshot = self._snapshot(entity)
        except Exception:
            self._logger.exception("could not re-read %s after write", entity.value)
            return
        self._listeners.emit(entity, snapshot)

    def probe(self, timeout: float) -> bool:
        """One-shot connectivity test; a store that does not answer in time counts as down."""
        pool = ThreadPoolExecutor(max_workers=1)
        try:
            future = pool.submit(self._ping)
            return bool(future.result(timeout=timeout))
        except FutureTimeout:
            self._logger.warning("store probe timed out after %.1fs", timeout)
            return False
        except Exception:
            self._logger.exception("store probe failed")
            return False
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

    def listener_count(self, entity: Entity) -> int:
        return self._listeners.count(entity)

    def close(self) -> None:
        pass

    # ── backend primitives ─────────────────────────────────────────────────
    @abstractmethod
    def _snapshot(self, entity: Entity) -> Any: ...

    @abstractmethod
    def _apply(self, batch: WriteBatch) -> None: ...

    @abstractmethod
    def _delete(self, entity: Entity, record_id: str) -> None: ...

    @abstractmethod
    def _ping(self) -> bool: ...
