"""Identifier utilities."""

from __future__ import annotations

import uuid


def generate_item_id() -> str:
  """Return a new study item identifier."""
  return str(uuid.uuid4())
