# conftest.py
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from tablepos.main import create_app
from tablepos.services.ids import SequentialAllocator
from tablepos.services.runtime import PosRuntime
from tablepos.store import MemoryStore, SqlStore, seed_defaults

START = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kw) -> datetime:
        self.now = self.now + timedelta(**kw)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    s = MemoryStore()
    seed_defaults(s)
    return s


@pytest.fixture
def sql_store(tmp_path):
    s = SqlStore(f"sqlite:///{tmp_path / 'pos.db'}")
    s.bootstrap_schema()
    yield s
    s.close()


@pytest.fixture
def runtime(store, clock):
    rt = PosRuntime(store, ids=SequentialAllocator(), clock=clock, misc_rate_per_minute=2.5).connect()
    yield rt
    rt.close()


@pytest.fixture
def client(store, clock):
    rt = PosRuntime(store, ids=SequentialAllocator(), clock=clock)
    with TestClient(create_app(runtime=rt)) as c:
        yield c
