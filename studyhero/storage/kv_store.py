"""Storage interface for the host-local key/value cache."""

from __future__ import annotations

from typing import Protocol


class KeyValueStore(Protocol):
  """String keys to JSON strings. No expiry, no size bound."""

  def get(self, key: str) -> str | None:
    """Return the stored value, or None when the key is absent."""

  def set(self, key: str, value: str) -> None:
    """Insert or overwrite a value."""

  def delete(self, key: str) -> None:
    """Remove a key; missing keys are ignored."""

  def clear(self) -> None:
    """Remove every entry."""


class InMemoryKeyValueStore:
  """Process-local store used when no cache URL is configured."""

  def __init__(self) -> None:
    self._entries: dict[str, str] = {}

  def get(self, key: str) -> str | None:
    return self._entries.get(key)

  def set(self, key: str, value: str) -> None:
    self._entries[key] = value

  def delete(self, key: str) -> None:
    self._entries.pop(key, None)

  def clear(self) -> None:
    self._entries.clear()

  def __len__(self) -> int:
    return len(self._entries)

  def __contains__(self, key: object) -> bool:
    return key in self._entries
