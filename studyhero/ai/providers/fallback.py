"""Terminal adapter that synthesizes content locally without any network call."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from studyhero.ai.fallback import generate_fallback_lesson, topic_from_prompt
from studyhero.ai.providers.base import ContentAdapter
from studyhero.ai.status import StatusCallback
from studyhero.schema.requests import GenerationContext

FallbackGenerator = Callable[[str, GenerationContext | None], Any]


def lesson_fallback(prompt: str, context: GenerationContext | None) -> dict[str, Any]:
  """Build the deterministic lesson payload for a prompt and its optional context."""
  if context is not None:
    return generate_fallback_lesson(context.subject, context.topic).to_payload()

  # Without context the subject is unknown; derive a topic from the prompt keywords.
  keywords = topic_from_prompt(prompt, limit=3)
  return generate_fallback_lesson("", " ".join(keywords)).to_payload()


class FallbackAdapter(ContentAdapter):
  """Always succeeds with deterministic content from the wrapped generator."""

  name = "Fallback"

  def __init__(self, generator: FallbackGenerator = lesson_fallback) -> None:
    self._generator = generator

  async def generate(self, prompt: str, on_status: StatusCallback | None = None, context: GenerationContext | None = None) -> Any:
    await self.report(on_status, "Using education resource database", 30)
    await self.report(on_status, "Generating curriculum-aligned content", 70)
    return self._generator(prompt, context)
