"""Study plans, board subject lists and weekly schedules."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import date, datetime, timezone
from typing import Any

from pydantic import ValidationError

from studyhero.ai.errors import OutputValidationError
from studyhero.ai.fallback import build_weekly_schedule, default_subjects_for_board, generate_fallback_study_plan
from studyhero.ai.fallback.curriculum import plan_stage_description
from studyhero.ai.json_parser import safe_parse
from studyhero.ai.orchestrator import orchestrate
from studyhero.ai.providers.base import ContentAdapter
from studyhero.ai.providers.fallback import FallbackAdapter, FallbackGenerator
from studyhero.ai.status import StatusCallback, emit_status
from studyhero.config import Settings
from studyhero.schema.requests import GenerationContext
from studyhero.schema.study_plans import BoardSubjects, StudyChapter, StudyItem, StudyPlan, WeeklyPlan
from studyhero.services.content_cache import ContentCache, study_plan_cache_key
from studyhero.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

STUDY_PLAN_PROMPT = "Create a detailed study plan for {subject} for class {class_name} following the {board} curriculum. Format as JSON with a chapters array containing title and lessons fields. Each lesson has a title and a type of lesson, quiz or practice."
SUBJECTS_PROMPT = "List the compulsory and optional subjects for {board} curriculum in class {class_name}. Format as JSON with compulsorySubjects and optionalSubjects arrays."


class CurriculumFallbackAdapter(FallbackAdapter):
  """Local fallback that reports the curriculum assembly stages while it builds a plan."""

  def __init__(self, subject: str, generator: FallbackGenerator) -> None:
    super().__init__(generator=generator)
    self._subject = subject

  async def generate(self, prompt: str, on_status: StatusCallback | None = None, context: GenerationContext | None = None) -> Any:
    for step in range(1, 6):
      await self.report(on_status, plan_stage_description(step, self._subject), 15 * step)
    return self._generator(prompt, context)


def _as_object(content: Any) -> dict[str, Any] | None:
  if isinstance(content, str):
    content = safe_parse(content)
  return content if isinstance(content, dict) else None


def _normalize_chapter(chapter: Any) -> dict[str, Any] | None:
  if not isinstance(chapter, Mapping) or not chapter.get("title"):
    return None
  lessons = []
  for lesson in chapter.get("lessons") or []:
    # Models often answer with bare lesson titles.
    if isinstance(lesson, str):
      lessons.append({"title": lesson})
    elif isinstance(lesson, Mapping) and lesson.get("title"):
      lessons.append({"title": lesson["title"], "type": lesson.get("type") if lesson.get("type") in {"lesson", "quiz", "practice"} else "lesson"})
  return {"title": chapter["title"], "lessons": lessons}


def parse_chapters(content: Any) -> list[StudyChapter] | None:
  """Return the chapters of a plan payload, or None when there are none to use."""
  payload = _as_object(content)
  if payload is None or not isinstance(payload.get("chapters"), list):
    return None

  normalized = [chapter for chapter in map(_normalize_chapter, payload["chapters"]) if chapter is not None]
  if not normalized:
    return None
  try:
    return [StudyChapter.model_validate(chapter) for chapter in normalized]
  except ValidationError as exc:
    logger.warning("Study plan chapters failed validation: %s", exc.errors(include_input=False))
    return None


def check_study_plan_payload(content: Any) -> None:
  if parse_chapters(content) is None:
    raise OutputValidationError("Study plan payload is missing required fields: chapters", missing_fields=["chapters"])


async def generate_study_plan(
  subject: str,
  board: str,
  class_name: str,
  on_status: StatusCallback | None = None,
  *,
  store: KeyValueStore,
  adapters: Sequence[ContentAdapter] | None = None,
  settings: Settings | None = None,
) -> StudyPlan:
  """Return the chapter outline for a subject, cached per subject, board and class."""
  cache = ContentCache(store)
  key = study_plan_cache_key(subject, board, class_name)

  cached = cache.get(key)
  if cached is not None:
    try:
      plan = StudyPlan.model_validate(cached)
    except ValidationError:
      cache.invalidate(key)
    else:
      await emit_status(on_status, "Retrieved from cache", 100, "Cache")
      return plan

  def _fallback(prompt: str, context: GenerationContext | None) -> dict[str, Any]:
    return generate_fallback_study_plan(subject, board, class_name).to_payload()

  context = GenerationContext(subject=subject, class_name=class_name, board=board)
  prompt = STUDY_PLAN_PROMPT.format(subject=subject, class_name=class_name, board=board)
  outcome = await orchestrate(prompt, on_status, context, adapters=adapters, fallback=CurriculumFallbackAdapter(subject, _fallback), response_check=check_study_plan_payload, settings=settings)

  chapters = parse_chapters(outcome.content)
  if outcome.used_fallback or chapters is None:
    return generate_fallback_study_plan(subject, board, class_name)

  plan = StudyPlan(subject=subject, board=board, class_name=class_name, chapters=chapters, last_updated=datetime.now(timezone.utc).isoformat())
  cache.set(key, plan.to_payload())
  return plan


def _check_subjects(content: Any) -> None:
  payload = _as_object(content)
  if payload is None or not isinstance(payload.get("compulsorySubjects"), list):
    raise OutputValidationError("Subject list is missing required fields: compulsorySubjects", missing_fields=["compulsorySubjects"])


async def get_subjects_for_board(
  board: str,
  class_name: str,
  on_status: StatusCallback | None = None,
  *,
  adapters: Sequence[ContentAdapter] | None = None,
  settings: Settings | None = None,
) -> BoardSubjects:
  """Return compulsory and optional subjects for a board, falling back to the standard lists."""

  def _fallback(prompt: str, context: GenerationContext | None) -> dict[str, Any]:
    return default_subjects_for_board(board).to_payload()

  prompt = SUBJECTS_PROMPT.format(board=board, class_name=class_name)
  outcome = await orchestrate(prompt, on_status, None, adapters=adapters, fallback=FallbackAdapter(generator=_fallback), response_check=_check_subjects, settings=settings)
  try:
    return BoardSubjects.model_validate({"optionalSubjects": [], **_as_object(outcome.content)})
  except (TypeError, ValidationError):
    logger.warning("Unusable subject list from %s; using the standard %s subjects", outcome.provider, board)
    return default_subjects_for_board(board)


def build_weekly_plans(items: Sequence[StudyItem | Mapping[str, Any]] | None = None, *, start: date | None = None, weeks: int = 4) -> list[WeeklyPlan]:
  """Spread study items over five study days per week, counted from `start` (today by default)."""
  parsed = [item if isinstance(item, StudyItem) else StudyItem.model_validate(item) for item in items or []]
  return build_weekly_schedule(start or date.today(), weeks=weeks, items=parsed or None)
