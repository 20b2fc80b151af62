from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AIStatus:
  """Progress snapshot pushed to the UI while content is generated."""

  stage: str
  progress: int
  provider: str

  def __post_init__(self) -> None:
    object.__setattr__(self, "progress", max(0, min(100, int(self.progress))))


StatusCallback = Callable[[AIStatus], Awaitable[None] | None]


async def emit_status(callback: StatusCallback | None, stage: str, progress: int, provider: str) -> None:
  """Deliver a status update to sync or async callbacks; a failing sink never aborts generation."""
  if callback is None:
    return

  status = AIStatus(stage=stage, progress=progress, provider=provider)
  try:
    result = callback(status)
    if inspect.isawaitable(result):
      await result
  except Exception:  # noqa: BLE001
    logger.exception("Status callback failed for stage '%s'", stage)


def relabel(callback: StatusCallback | None, provider: str) -> StatusCallback | None:
  """Wrap a callback so nested updates are reported under another provider label."""
  if callback is None:
    return None

  async def _relabelled(status: AIStatus) -> None:
    await emit_status(callback, status.stage, status.progress, provider)

  return _relabelled
