"""Read-through JSON cache for generated content."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from studyhero.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
_STORE_ERRORS = (SQLAlchemyError, OSError)


def _cache_key(*parts: str) -> str:
  return _WHITESPACE_RE.sub("_", "_".join(parts))


def lesson_cache_key(subject: str, topic: str) -> str:
  """`lesson_<subject>_<topic>`; identical keys mean identical cached lessons."""
  return _cache_key("lesson", subject, topic)


def quiz_cache_key(subject: str, topic: str) -> str:
  return _cache_key("quiz", subject, topic)


def deep_search_cache_key(board: str, subject: str, topic: str | None) -> str:
  return _cache_key("deep_search", board, subject, topic or "general")


def study_plan_cache_key(subject: str, board: str, class_name: str) -> str:
  return _cache_key("studyPlan", subject, board, class_name)


class ContentCache:
  """JSON values over a `KeyValueStore`. Unreadable entries and store failures count as misses."""

  def __init__(self, store: KeyValueStore) -> None:
    self._store = store

  def get(self, key: str) -> Any | None:
    try:
      raw = self._store.get(key)
    except _STORE_ERRORS as exc:
      logger.warning("Cache read failed for %s: %s", key, exc)
      return None
    if raw is None:
      logger.debug("Cache miss for %s", key)
      return None

    try:
      value = json.loads(raw)
    except json.JSONDecodeError:
      logger.warning("Discarding corrupt cache entry %s", key)
      self.invalidate(key)
      return None

    logger.info("Cache hit for %s", key)
    return value

  def set(self, key: str, value: Any) -> None:
    """Serialise and store a value; the last writer wins. A failed write is logged and skipped."""
    try:
      self._store.set(key, json.dumps(value, ensure_ascii=False))
    except _STORE_ERRORS as exc:
      logger.warning("Could not cache %s: %s", key, exc)

  def invalidate(self, key: str) -> None:
    try:
      self._store.delete(key)
    except _STORE_ERRORS as exc:
      logger.warning("Could not invalidate cache entry %s: %s", key, exc)
