"""SQLite engine, session management and the persistent key-value store."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from medicart.db.models import Base, StorageEntryORM

logger = logging.getLogger(__name__)


def create_store_engine(store_path: Path) -> Engine:
    """Return a SQLAlchemy engine for ``store_path`` with the schema in place."""

    store_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(
        f"sqlite:///{store_path}",
        future=True,
        echo=False,
    )
    try:
        Base.metadata.create_all(engine)
    except OperationalError as exc:
        # another process may create the table between our check and CREATE
        if "already exists" in str(exc).lower():
            logger.debug("Store schema already initialized: %s", exc)
        else:
            raise
    return engine


class SqliteKeyValueStore:
    """Key-value store persisted in SQLite and shared by every process opening the file."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autoflush=False, autocommit=False, future=True
        )

    @classmethod
    def open(cls, store_path: Path) -> "SqliteKeyValueStore":
        return cls(create_store_engine(store_path))

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Context manager yielding a session with automatic commit/rollback."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_item(self, key: str) -> Optional[str]:
        with self.session_scope() as session:
            return session.execute(
                select(StorageEntryORM.value).where(StorageEntryORM.key == key)
            ).scalar_one_or_none()

    def set_item(self, key: str, value: str) -> None:
        with self.session_scope() as session:
            row = session.get(StorageEntryORM, key)
            if row is None:
                session.add(StorageEntryORM(key=key, value=value, revision=1))
            else:
                row.value = value
                row.revision = row.revision + 1

    def remove_item(self, key: str) -> None:
        with self.session_scope() as session:
            row = session.get(StorageEntryORM, key)
            if row is None or row.value is None:
                return
            row.value = None
            row.revision = row.revision + 1

    def revision(self, key: str) -> int:
        with self.session_scope() as session:
            current = session.execute(
                select(StorageEntryORM.revision).where(StorageEntryORM.key == key)
            ).scalar_one_or_none()
            return current or 0

    def close(self) -> None:
        self._engine.dispose()


__all__ = ["create_store_engine", "SqliteKeyValueStore"]
