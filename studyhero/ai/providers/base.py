"""Base interface for content adapters (one per AI vendor plus the local fallback)."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from studyhero.ai.errors import ProviderNotConfiguredError, ProviderResponseError
from studyhero.ai.status import StatusCallback, emit_status
from studyhero.schema.requests import GenerationContext

EDUCATIONAL_SYSTEM_PROMPT = "You are a helpful educational assistant."

# Synthetic checkpoints; they do not reflect real network progress.
CONNECTING_PROGRESS = 10
PROCESSING_PROGRESS = 60
RECEIVED_PROGRESS = 90


class ContentAdapter(ABC):
  """A single step of the generation chain."""

  name: str

  @abstractmethod
  async def generate(self, prompt: str, on_status: StatusCallback | None = None, context: GenerationContext | None = None) -> Any:
    """Return raw text (or an already-structured payload) for the prompt."""

  @staticmethod
  def with_context_header(prompt: str, context: GenerationContext | None) -> str:
    """Prefix the prompt with the curriculum annotation when a subject is known."""
    header = context.header() if context is not None else None
    if header is None:
      return prompt
    return f"{header}\n\n{prompt}"

  async def report(self, on_status: StatusCallback | None, stage: str, progress: int) -> None:
    await emit_status(on_status, stage, progress, self.name)


class RemoteAdapter(ContentAdapter):
  """Adapter that performs exactly one vendor request per call and never retries."""

  key_variable: str

  def __init__(self, *, api_key: str | None, model: str, timeout: float | None = None) -> None:
    self._api_key = api_key
    self.model = model
    self._timeout = timeout
    self._logger = logging.getLogger(type(self).__module__)

  @property
  def is_configured(self) -> bool:
    return bool(self._api_key)

  def _require_key(self) -> str:
    if not self._api_key:
      raise ProviderNotConfiguredError(self.name, f"{self.key_variable} is not configured")
    return self._api_key

  async def generate(self, prompt: str, on_status: StatusCallback | None = None, context: GenerationContext | None = None) -> str:
    api_key = self._require_key()
    full_prompt = self.with_context_header(prompt, context)

    await self.report(on_status, f"Connecting to {self.name} API", CONNECTING_PROGRESS)
    text = await self._request(full_prompt, api_key)
    await self.report(on_status, f"Processing content from {self.name}", PROCESSING_PROGRESS)

    if not text or not text.strip():
      raise ProviderResponseError(self.name, "empty response content")

    self._logger.debug("%s response (%s):\n%s", self.name, self.model, text)
    await self.report(on_status, f"Content received from {self.name}", RECEIVED_PROGRESS)
    return text

  @abstractmethod
  async def _request(self, prompt: str, api_key: str) -> str | None:
    """Send the vendor request and unwrap the answer text."""
