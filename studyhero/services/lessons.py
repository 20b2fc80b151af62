"""Lesson generation with caching, payload normalisation and local fallback."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from studyhero.ai.errors import OutputValidationError
from studyhero.ai.fallback import generate_fallback_lesson, generate_fallback_lesson_with_sources
from studyhero.ai.json_parser import safe_parse
from studyhero.ai.orchestrator import ContextInput, coerce_context, orchestrate
from studyhero.ai.providers.base import ContentAdapter
from studyhero.ai.providers.fallback import FallbackAdapter
from studyhero.ai.status import StatusCallback, emit_status, relabel
from studyhero.config import Settings, get_settings
from studyhero.schema.content import LessonContent, LessonWithSources
from studyhero.schema.requests import GenerationContext, LessonSearchParams
from studyhero.services.content_cache import ContentCache, deep_search_cache_key, lesson_cache_key
from studyhero.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

CACHE_PROVIDER = "Cache"
RESEARCH_PROVIDER = "AI Research"
SYSTEM_FALLBACK_PROVIDER = "System Fallback"

LESSON_PROMPT_TEMPLATE = """Create a comprehensive educational lesson on "{topic}" for the subject "{subject}" for students in class {class_name}.

The lesson should include:
1. Key learning points (5-7 points)
2. Detailed explanation (3-5 paragraphs)
3. Practical examples (2-3)
4. Visual learning aids (3-4 descriptions)
5. Hands-on activities (2-3)
6. A concise summary
7. References to textbook chapters and pages
8. Interesting facts to engage students

Format the response as a well-structured JSON object following this schema:
{{
  "title": "full topic title",
  "keyPoints": ["point 1", "point 2"],
  "explanation": ["paragraph 1", "paragraph 2"],
  "examples": [{{"title": "Example 1", "content": "..."}}],
  "visualAids": [{{"title": "Visual 1", "description": "...", "visualType": "diagram"}}],
  "activities": [{{"title": "Activity 1", "instructions": "...", "learningOutcome": "..."}}],
  "summary": "summary text",
  "textbookReferences": [{{"chapter": "1", "pageNumbers": "10-15", "description": "..."}}],
  "interestingFacts": ["fact 1", "fact 2"]
}}

Ensure the content is accurate, age-appropriate, and aligned with standard curriculum for {subject}."""

DEEP_SEARCH_PROMPT_TEMPLATE = """You are an expert educational researcher. Compile accurate, high-quality content on "{focus}" aligned with {board} curriculum standards for class {class_name}.

Provide your response in the following JSON format:
{{
  "title": "The main topic title",
  "explanation": ["detailed paragraph 1", "detailed paragraph 2", "detailed paragraph 3"],
  "keyPoints": ["key concept 1", "key concept 2", "key concept 3", "key concept 4", "key concept 5"],
  "examples": [{{"title": "Example 1", "content": "Detailed example with explanation"}}],
  "visualAids": [{{"title": "Visual Aid Title", "description": "Detailed description", "visualType": "diagram"}}],
  "activities": [{{"title": "Activity Title", "instructions": "Step-by-step instructions", "learningOutcome": "What students will learn"}}],
  "interestingFacts": ["interesting fact 1", "interesting fact 2", "interesting fact 3"],
  "summary": "A concise summary of the lesson",
  "sources": [{{"url": "https://example.com/resource", "title": "Resource Title", "relevance": 95, "snippet": "Brief excerpt from source"}}]
}}

Make sure to:
1. Include 3-5 high-quality sources with real URLs where this information can be found
2. Ensure content is age-appropriate for the specified class
3. Follow {board} curriculum guidelines
4. Include practical examples that clarify complex concepts"""


@dataclass(frozen=True)
class LessonResult:
  """A lesson plus where it came from."""

  lesson: LessonContent
  provider: str
  from_cache: bool = False
  configuration_errors: list[str] = field(default_factory=list)


def build_lesson_prompt(context: GenerationContext, default_class_name: str) -> str:
  return LESSON_PROMPT_TEMPLATE.format(topic=context.topic, subject=context.subject, class_name=context.class_name or default_class_name)


def _as_object(content: Any) -> dict[str, Any] | None:
  if isinstance(content, str):
    content = safe_parse(content)
  return content if isinstance(content, dict) else None


def check_lesson_payload(content: Any) -> None:
  """Reject output that cannot be turned into a lesson so the next provider is tried."""
  payload = _as_object(content)
  if payload is None:
    raise OutputValidationError("Invalid JSON: lesson payload is not an object")

  missing = []
  if not payload.get("keyPoints"):
    missing.append("keyPoints")
  if not (payload.get("explanation") or payload.get("summary")):
    missing.append("explanation")
  if missing:
    raise OutputValidationError(f"Lesson payload is missing required fields: {', '.join(missing)}", missing_fields=missing)


def _normalize_examples(payload: Mapping[str, Any]) -> list[Any]:
  examples = payload.get("examples")
  if isinstance(examples, list):
    return examples

  problems = payload.get("exampleProblems")
  if isinstance(problems, list):
    return [{"title": "Example", "content": f"Problem: {item.get('problem', '')}\nSolution: {item.get('solution', '')}"} for item in problems if isinstance(item, dict)]
  return []


def _normalize_explanation(payload: Mapping[str, Any]) -> list[Any]:
  explanation = payload.get("explanation")
  if isinstance(explanation, list):
    return explanation
  if isinstance(explanation, str):
    return [explanation]

  summary = payload.get("summary")
  return [summary] if isinstance(summary, str) and summary else []


def normalize_lesson_payload(content: Any, topic: str) -> dict[str, Any] | None:
  """Coerce loosely shaped model output into the lesson payload shape; None when unusable."""
  payload = _as_object(content)
  if payload is None:
    return None

  return {
    **payload,
    "title": payload.get("title") or topic,
    "keyPoints": payload.get("keyPoints") or [],
    "explanation": _normalize_explanation(payload),
    "examples": _normalize_examples(payload),
    "summary": payload.get("summary") or "",
    "visualAids": payload.get("visualAids") or [],
    "activities": payload.get("activities") or [],
    "textbookReferences": payload.get("textbookReferences") or [],
    "interestingFacts": payload.get("interestingFacts") or [],
  }


def parse_lesson(content: Any, topic: str, model: type[LessonContent] = LessonContent) -> LessonContent | None:
  """Validate normalised output into a lesson model."""
  payload = normalize_lesson_payload(content, topic)
  if payload is None:
    return None

  try:
    lesson = model.model_validate(payload)
  except ValidationError as exc:
    logger.warning("Lesson payload failed validation: %s", exc.errors(include_input=False))
    return None

  if not lesson.key_points and not lesson.explanation:
    return None
  return lesson


def _require_context(context: ContextInput) -> GenerationContext:
  resolved = coerce_context(context)
  if resolved is None:
    raise ValueError("A lesson needs a generation context with a subject.")
  return resolved


async def generate_lesson_content(
  context: ContextInput,
  on_status: StatusCallback | None = None,
  *,
  store: KeyValueStore,
  refresh: bool = False,
  adapters: Sequence[ContentAdapter] | None = None,
  settings: Settings | None = None,
) -> LessonResult:
  """Return a lesson for the context, serving the cached copy unless `refresh` is set.

  Provider failures never surface here: the result is a remote lesson, a
  cached lesson, or the deterministic template for the subject.
  """
  resolved = _require_context(context)
  settings = settings or get_settings()
  cache = ContentCache(store)
  key = lesson_cache_key(resolved.subject, resolved.topic)

  if not refresh:
    cached = cache.get(key)
    if cached is not None:
      lesson = parse_lesson(cached, resolved.topic)
      if lesson is not None:
        await emit_status(on_status, "Retrieved from cache", 100, CACHE_PROVIDER)
        return LessonResult(lesson=lesson, provider=CACHE_PROVIDER, from_cache=True)
      cache.invalidate(key)

  prompt = build_lesson_prompt(resolved, settings.default_class_name)
  outcome = await orchestrate(prompt, on_status, resolved, adapters=adapters, response_check=check_lesson_payload, settings=settings)

  lesson = parse_lesson(outcome.content, resolved.topic)
  provider = outcome.provider
  if lesson is None:
    logger.warning("Unusable lesson payload from %s; using the %s template", provider, resolved.subject)
    lesson = generate_fallback_lesson(resolved.subject, resolved.topic)
    provider = FallbackAdapter.name

  # Only remote content is cached so a later call can still reach the providers.
  if provider != FallbackAdapter.name:
    cache.set(key, lesson.to_payload())
  return LessonResult(lesson=lesson, provider=provider, configuration_errors=outcome.configuration_errors)


def refresh_lesson(context: ContextInput, store: KeyValueStore) -> None:
  """Drop the cached lesson so the next request regenerates it."""
  resolved = _require_context(context)
  ContentCache(store).invalidate(lesson_cache_key(resolved.subject, resolved.topic))


def _sources_fallback(params: LessonSearchParams) -> FallbackAdapter:
  def _generate(prompt: str, context: GenerationContext | None) -> dict[str, Any]:
    return generate_fallback_lesson_with_sources(params.subject, params.topic, params.board).to_payload()

  return FallbackAdapter(generator=_generate)


async def deep_search_lesson_content(
  params: LessonSearchParams,
  on_status: StatusCallback | None = None,
  *,
  store: KeyValueStore,
  adapters: Sequence[ContentAdapter] | None = None,
  settings: Settings | None = None,
) -> LessonWithSources:
  """Research a lesson with sources; `params.deep_search` bypasses the cached copy."""
  settings = settings or get_settings()
  cache = ContentCache(store)
  key = deep_search_cache_key(params.board, params.subject, params.topic)
  focus = params.topic or params.subject

  await emit_status(on_status, "Initiating deep web search", 5, RESEARCH_PROVIDER)
  if not params.deep_search:
    cached = cache.get(key)
    if cached is not None:
      lesson = parse_lesson(cached, focus, LessonWithSources)
      if lesson is not None:
        await emit_status(on_status, "Retrieved from cache", 100, CACHE_PROVIDER)
        return lesson
      cache.invalidate(key)

  prompt = DEEP_SEARCH_PROMPT_TEMPLATE.format(focus=focus, board=params.board, class_name=params.class_name or settings.default_class_name)
  await emit_status(on_status, "Searching educational websites", 20, RESEARCH_PROVIDER)
  outcome = await orchestrate(prompt, relabel(on_status, "Web Search"), params.to_context(), adapters=adapters, fallback=_sources_fallback(params), response_check=check_lesson_payload, settings=settings)

  await emit_status(on_status, "Processing search results", 70, RESEARCH_PROVIDER)
  lesson = parse_lesson(outcome.content, focus, LessonWithSources)
  if lesson is None or outcome.used_fallback:
    await emit_status(on_status, "Error in deep search, creating fallback content", 50, SYSTEM_FALLBACK_PROVIDER)
    lesson = generate_fallback_lesson_with_sources(params.subject, params.topic, params.board)
    await emit_status(on_status, "Fallback content ready", 100, SYSTEM_FALLBACK_PROVIDER)
    return lesson

  cache.set(key, lesson.to_payload())
  await emit_status(on_status, "Deep search completed successfully", 100, RESEARCH_PROVIDER)
  return lesson
