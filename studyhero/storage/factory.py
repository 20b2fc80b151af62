"""Key/value store selection from settings."""

from __future__ import annotations

import logging

from studyhero.config import Settings
from studyhero.storage.kv_store import InMemoryKeyValueStore, KeyValueStore
from studyhero.storage.sql_kv_store import SqlKeyValueStore

logger = logging.getLogger(__name__)


def get_kv_store(settings: Settings) -> KeyValueStore:
  """Return a SQL store when a cache URL is configured, otherwise an in-memory one."""
  if settings.cache_url:
    return SqlKeyValueStore(settings.cache_url, echo=settings.debug)

  logger.info("STUDYHERO_CACHE_URL is not set; cached content lives only for this process")
  return InMemoryKeyValueStore()
