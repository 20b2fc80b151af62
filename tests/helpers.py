"""Fake adapters and status sinks shared by the unit tests."""

from __future__ import annotations

from typing import Any

from studyhero.ai.errors import ProviderError
from studyhero.ai.providers.base import ContentAdapter
from studyhero.ai.status import AIStatus


class ScriptedAdapter(ContentAdapter):
  """Adapter that returns a fixed answer or raises a fixed error and counts its calls."""

  def __init__(self, name: str, *, result: Any = None, error: Exception | None = None) -> None:
    self.name = name
    self._result = result
    self._error = error
    self.calls: list[tuple[str, Any]] = []

  async def generate(self, prompt, on_status=None, context=None):
    self.calls.append((prompt, context))
    await self.report(on_status, f"Connecting to {self.name} API", 10)
    if self._error is not None:
      raise self._error
    return self._result


def failing(name: str, message: str = "API error: 500") -> ScriptedAdapter:
  return ScriptedAdapter(name, error=ProviderError(name, message, status_code=500))


def succeeding(name: str, result: Any) -> ScriptedAdapter:
  return ScriptedAdapter(name, result=result)


class StatusRecorder:
  """Collects status updates pushed during generation."""

  def __init__(self) -> None:
    self.updates: list[AIStatus] = []

  def __call__(self, status: AIStatus) -> None:
    self.updates.append(status)

  @property
  def stages(self) -> list[str]:
    return [status.stage for status in self.updates]
