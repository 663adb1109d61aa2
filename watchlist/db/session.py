from __future__ import annotations

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import sessionmaker

from watchlist.core.config import settings
from watchlist.models import Base


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str, **kwargs) -> Engine:
    eng = create_engine(url, pool_pre_ping=True, **kwargs)
    if eng.dialect.name == "sqlite":
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
    return eng


engine = make_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine | None = None) -> None:
    """Create tables. Schema migrations are handled outside this package."""
    Base.metadata.create_all(bind=bind or engine)

