from __future__ import annotations

from typing import Any, Callable

from sqlalchemy.orm import Session

from watchlist.models.app_setting import AppSetting


def get_setting(db: Session, *, key: str) -> Any | None:
    row = db.get(AppSetting, key)
    return row.value if row is not None else None


def set_setting(db: Session, *, key: str, value: Any) -> AppSetting:
    existing = db.get(AppSetting, key)
    if existing:
        existing.value = value
        return existing

    row = AppSetting(key=key, value=value)
    db.add(row)
    return row


def increment_setting(db: Session, *, key: str) -> int:
    """Add one to an integer setting; missing or non-integer values count as 0."""
    # Row lock where the dialect supports it (no-op on SQLite)
    existing = db.get(AppSetting, key, with_for_update=True)
    current = existing.value if existing is not None else None
    try:
        new_value = int(current) + 1 if current is not None else 1
    except (TypeError, ValueError):
        new_value = 1
    set_setting(db, key=key, value=new_value)
    return new_value


class SqlKeyValueStore:
    """Key-value settings persisted in the `app_settings` table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def get(self, key: str) -> Any | None:
        with self._session_factory() as db:
            return get_setting(db, key=key)

    def set(self, key: str, value: Any) -> None:
        with self._session_factory() as db:
            try:
                set_setting(db, key=key, value=value)
                db.commit()
            except Exception:
                db.rollback()
                raise

    def incr(self, key: str) -> int:
        with self._session_factory() as db:
            try:
                new_value = increment_setting(db, key=key)
                db.commit()
            except Exception:
                db.rollback()
                raise
        return new_value
