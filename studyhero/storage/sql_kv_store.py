"""SQLAlchemy-backed key/value store (SQLite file or any SQLAlchemy URL)."""

from __future__ import annotations

import logging

from sqlalchemy import String, Text, create_engine, delete
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
  pass


class KeyValueEntry(Base):
  __tablename__ = "kv_entries"

  key: Mapped[str] = mapped_column(String(512), primary_key=True)
  value: Mapped[str] = mapped_column(Text, nullable=False)


class SqlKeyValueStore:
  """Persist cache entries in a single `kv_entries` table."""

  def __init__(self, url: str | None = None, *, engine: Engine | None = None, echo: bool = False) -> None:
    if engine is None:
      if not url:
        raise ValueError("SqlKeyValueStore requires a database URL or an engine.")
      engine = create_engine(url, echo=echo, future=True)
    self._engine = engine
    self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Base.metadata.create_all(engine)
    logger.debug("Key/value store ready at %s", engine.url.render_as_string(hide_password=True))

  @property
  def engine(self) -> Engine:
    return self._engine

  def get(self, key: str) -> str | None:
    with self._session_factory() as session:
      entry = session.get(KeyValueEntry, key)
      return entry.value if entry is not None else None

  def set(self, key: str, value: str) -> None:
    """Insert or update a value."""
    with self._session_factory() as session:
      entry = session.get(KeyValueEntry, key)
      if entry is None:
        session.add(KeyValueEntry(key=key, value=value))
      else:
        entry.value = value
      session.commit()

  def delete(self, key: str) -> None:
    with self._session_factory() as session:
      session.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))
      session.commit()

  def clear(self) -> None:
    with self._session_factory() as session:
      session.execute(delete(KeyValueEntry))
      session.commit()

  def dispose(self) -> None:
    """Close pooled connections."""
    self._engine.dispose()
