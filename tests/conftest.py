from datetime import datetime

import httpx
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from watchlist.core.config import Settings
from watchlist.crud.watchlist import SqlWatchlistStore
from watchlist.db.session import _enable_sqlite_foreign_keys
from watchlist.models import Base
from watchlist.services.call_budget import CallBudget
from watchlist.services.settings_store import MemoryKeyValueStore


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def engine():
    # In-memory SQLite so tests run without external services.
    eng = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(eng, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def store(session_factory):
    return SqlWatchlistStore(session_factory)


@pytest.fixture()
def clock():
    return FakeClock(datetime(2025, 2, 17, 9, 30))


@pytest.fixture()
def budget(clock):
    return CallBudget(MemoryKeyValueStore(), max_calls_per_day=50, now=clock)


@pytest.fixture()
def unogs_settings():
    return Settings(
        API_KEY="test-key",
        API_HOST="unogs-unogs-v1.p.rapidapi.com",
        UNOGS_BASE_URL="https://unogs.test",
    )


@pytest.fixture()
def make_client():
    def _make(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url="https://unogs.test",
            transport=httpx.MockTransport(handler),
        )

    return _make


@pytest.fixture()
def fresh_database(tmp_path, monkeypatch):
    """Point the default engine and session factory at an empty file-backed DB."""
    from watchlist.db import session as db_session

    eng = db_session.make_engine(f"sqlite+pysqlite:///{tmp_path / 'fresh.db'}")
    monkeypatch.setattr(db_session, "engine", eng)
    monkeypatch.setattr(
        db_session, "SessionLocal", sessionmaker(autocommit=False, autoflush=False, bind=eng)
    )
    yield eng
    eng.dispose()
