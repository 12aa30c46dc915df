import itertools
import threading
import uuid
from datetime import datetime, timezone
from typing import Callable, Protocol

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IdAllocator(Protocol):
    def new_order_id(self) -> str: ...
    def new_record_id(self) -> str: ...


class UuidAllocator:
    def new_order_id(self) -> str:
        return str(uuid.uuid4())

    def new_record_id(self) -> str:
        return str(uuid.uuid4())


class SequentialAllocator:
    """Deterministic ids ("ORD-0001", "REC-0001", ...)."""

    def __init__(self, start: int = 1):
        self._orders = itertools.count(start)
        self._records = itertools.count(start)
        self._lock = threading.Lock()

    def new_order_id(self) -> str:
        with self._lock:
            return f"ORD-{next(self._orders):04d}"

    def new_record_id(self) -> str:
        with self._lock:
            return f"REC-{next(self._records):04d}"
