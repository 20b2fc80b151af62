"""Lightweight .env loader so vendor keys stay out of source code."""

from __future__ import annotations

import os
from pathlib import Path


def default_env_path() -> Path:
  """Return the default .env path at the repo root."""

  return Path(__file__).resolve().parents[2] / ".env"


def _parse_line(raw_line: str) -> tuple[str, str] | None:
  line = raw_line.strip()
  if not line or line.startswith("#"):
    return None
  line = line.removeprefix("export ").lstrip()
  key, sep, value = line.partition("=")
  key = key.strip()
  if not sep or not key:
    return None

  value = value.strip()
  if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
    return key, value[1:-1]

  # Unquoted values may carry a trailing comment.
  value, _, _ = value.partition(" #")
  return key, value.rstrip()


def read_env_file(path: Path) -> dict[str, str]:
  """Return the key/value pairs declared in a .env file (empty when missing)."""

  if not path.is_file():
    return {}

  pairs: dict[str, str] = {}
  for raw_line in path.read_text(encoding="utf-8").splitlines():
    parsed = _parse_line(raw_line)
    if parsed is not None:
      pairs[parsed[0]] = parsed[1]
  return pairs


def load_env_file(path: Path, *, override: bool = False) -> None:
  """Load a .env file into the process environment."""

  for key, value in read_env_file(path).items():
    if not override and key in os.environ:
      continue
    os.environ[key] = value
