"""Ordered fallback across AI vendors, ending in deterministic local content."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from studyhero.ai.errors import classify_error
from studyhero.ai.json_parser import looks_like_json, safe_parse
from studyhero.ai.providers.base import ContentAdapter
from studyhero.ai.providers.fallback import FallbackAdapter, lesson_fallback
from studyhero.ai.router import build_adapters
from studyhero.ai.status import StatusCallback, emit_status
from studyhero.config import Settings, get_settings
from studyhero.schema.requests import GenerationContext

logger = logging.getLogger(__name__)

ResponseCheck = Callable[[Any], None]
ContextInput = GenerationContext | Mapping[str, Any] | None

INITIALIZING_PROGRESS = 5
COMPLETE_PROGRESS = 100


@dataclass(frozen=True)
class ProviderAttempt:
  """One adapter invocation and how it ended."""

  provider: str
  succeeded: bool
  category: str | None = None
  error: str | None = None


@dataclass(frozen=True)
class OrchestrationOutcome:
  """Content produced by a run plus the trail of attempts behind it."""

  content: Any
  provider: str
  attempts: list[ProviderAttempt] = field(default_factory=list)
  configuration_errors: list[str] = field(default_factory=list)

  @property
  def used_fallback(self) -> bool:
    return self.provider == FallbackAdapter.name


@dataclass
class _OrchestrationRun:
  """Mutable state for a single run; never shared between calls."""

  failures: int = 0
  attempts: list[ProviderAttempt] = field(default_factory=list)
  configuration_errors: list[str] = field(default_factory=list)

  def record_success(self, provider: str) -> None:
    self.attempts.append(ProviderAttempt(provider=provider, succeeded=True))

  def record_failure(self, provider: str, exc: Exception) -> str:
    self.failures += 1
    category = classify_error(exc)
    self.attempts.append(ProviderAttempt(provider=provider, succeeded=False, category=category, error=str(exc)))
    if category == "configuration":
      self.configuration_errors.append(str(exc))
    return category

  def outcome(self, content: Any, provider: str) -> OrchestrationOutcome:
    return OrchestrationOutcome(content=content, provider=provider, attempts=list(self.attempts), configuration_errors=list(self.configuration_errors))


def coerce_context(context: ContextInput) -> GenerationContext | None:
  """Accept a model or a plain mapping; unusable mappings are dropped."""
  if context is None or isinstance(context, GenerationContext):
    return context
  try:
    return GenerationContext.model_validate(dict(context))
  except ValidationError as exc:
    logger.warning("Ignoring invalid generation context: %s", exc.errors(include_input=False))
    return None


def decode_result(raw: Any) -> Any:
  """Parse JSON-looking text; anything else is returned untouched."""
  if isinstance(raw, str) and looks_like_json(raw):
    parsed = safe_parse(raw)
    if parsed is not None:
      return parsed
    logger.info("Provider returned JSON-like text that could not be parsed; returning raw text")
  return raw


class ContentOrchestrator:
  """Tries each adapter in order and finishes with the local fallback."""

  def __init__(self, adapters: Sequence[ContentAdapter] | None = None, *, fallback: ContentAdapter | None = None, max_failures: int | None = None, settings: Settings | None = None) -> None:
    if adapters is None or max_failures is None:
      settings = settings or get_settings()
    self._adapters: list[ContentAdapter] = list(adapters) if adapters is not None else list(build_adapters(settings))
    self._fallback = fallback or FallbackAdapter()
    self._max_failures = max_failures if max_failures is not None else settings.max_provider_failures

  @property
  def chain(self) -> list[ContentAdapter]:
    """Adapters in the order they are tried, fallback last."""
    return [*self._adapters, self._fallback]

  async def run(self, prompt: str, on_status: StatusCallback | None = None, context: ContextInput = None, *, response_check: ResponseCheck | None = None) -> OrchestrationOutcome:
    """Return content from the first adapter that succeeds. Never raises."""
    resolved_context = coerce_context(context)
    state = _OrchestrationRun()

    for adapter in self.chain:
      is_terminal = adapter is self._fallback
      # Too many failures: stop hammering vendors and go straight to local content.
      if not is_terminal and state.failures >= self._max_failures:
        logger.info("Skipping %s after %d provider failures", adapter.name, state.failures)
        continue

      await emit_status(on_status, f"Initializing {adapter.name} service", INITIALIZING_PROGRESS, adapter.name)
      try:
        content = decode_result(await adapter.generate(prompt, on_status, resolved_context))
        if response_check is not None and not is_terminal:
          response_check(content)
      except Exception as exc:  # noqa: BLE001
        category = state.record_failure(adapter.name, exc)
        logger.warning("%s provider failed (%s): %s", adapter.name, category, exc)
        if is_terminal:
          break
        stage = f"{adapter.name} is not configured correctly, trying alternative source" if category == "configuration" else f"{adapter.name} unavailable, trying alternative source"
        await emit_status(on_status, stage, INITIALIZING_PROGRESS, adapter.name)
        continue

      state.record_success(adapter.name)
      await emit_status(on_status, f"Content successfully generated with {adapter.name}", COMPLETE_PROGRESS, adapter.name)
      return state.outcome(content, adapter.name)

    # The fallback adapter itself failed; the lesson templates cannot.
    logger.error("Fallback adapter failed; serving the default lesson template")
    content = lesson_fallback(prompt, resolved_context)
    await emit_status(on_status, "Content generated from local templates", COMPLETE_PROGRESS, FallbackAdapter.name)
    return state.outcome(content, FallbackAdapter.name)


async def generate_ai_content(
  prompt: str,
  on_status: StatusCallback | None = None,
  context: ContextInput = None,
  *,
  adapters: Sequence[ContentAdapter] | None = None,
  fallback: ContentAdapter | None = None,
  response_check: ResponseCheck | None = None,
  settings: Settings | None = None,
) -> Any:
  """Generate content for a prompt; resolves to parsed JSON, raw text or fallback content."""
  outcome = await orchestrate(prompt, on_status, context, adapters=adapters, fallback=fallback, response_check=response_check, settings=settings)
  return outcome.content


async def orchestrate(
  prompt: str,
  on_status: StatusCallback | None = None,
  context: ContextInput = None,
  *,
  adapters: Sequence[ContentAdapter] | None = None,
  fallback: ContentAdapter | None = None,
  response_check: ResponseCheck | None = None,
  settings: Settings | None = None,
) -> OrchestrationOutcome:
  """Like `generate_ai_content` but returns the full outcome, including configuration errors."""
  try:
    orchestrator = ContentOrchestrator(adapters, fallback=fallback, settings=settings)
  except ValueError:
    # Broken environment configuration must not take content down with it.
    logger.exception("Invalid provider configuration; using local content only")
    orchestrator = ContentOrchestrator([], fallback=fallback, max_failures=1)
  return await orchestrator.run(prompt, on_status, context, response_check=response_check)
