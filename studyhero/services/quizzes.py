"""Quiz generation backed by the provider chain and the quiz templates."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from studyhero.ai.errors import OutputValidationError
from studyhero.ai.fallback import generate_fallback_quiz
from studyhero.ai.json_parser import safe_parse
from studyhero.ai.orchestrator import ContextInput, coerce_context, orchestrate
from studyhero.ai.providers.base import ContentAdapter
from studyhero.ai.providers.fallback import FallbackAdapter
from studyhero.ai.status import StatusCallback, emit_status
from studyhero.config import Settings, get_settings
from studyhero.schema.content import QuizContent
from studyhero.schema.requests import GenerationContext
from studyhero.services.content_cache import ContentCache, quiz_cache_key
from studyhero.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

QUIZ_PROMPT_TEMPLATE = """Create a quiz with {count} questions to test understanding of "{topic}" for {subject} at class {class_name} level.

Each question should be multiple choice with 4 options.

Format the response as a JSON object with this structure:
{{
  "questions": [
    {{
      "id": "q1",
      "question": "Question text",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctAnswer": "Option that's correct (exact text match to one of the options)",
      "explanation": "Explanation of why the answer is correct"
    }}
  ]
}}

Ensure questions are:
1. Clear and unambiguous
2. Appropriate difficulty for class {class_name}
3. Focused on core concepts from the topic
4. A mix of recall and application questions
5. Paired with helpful explanations that reinforce learning"""


def parse_quiz(content: Any) -> QuizContent | None:
  """Validate a quiz payload, numbering questions that arrive without ids."""
  if isinstance(content, str):
    content = safe_parse(content)
  if not isinstance(content, dict) or not isinstance(content.get("questions"), list):
    return None

  questions = []
  for index, question in enumerate(content["questions"], start=1):
    if isinstance(question, dict):
      questions.append({**question, "id": str(question.get("id") or f"q{index}")})
  try:
    quiz = QuizContent.model_validate({"questions": questions})
  except ValidationError as exc:
    logger.warning("Quiz payload failed validation: %s", exc.errors(include_input=False))
    return None
  return quiz if quiz.questions else None


def check_quiz_payload(content: Any) -> None:
  if parse_quiz(content) is None:
    raise OutputValidationError("Quiz payload is missing required fields: questions", missing_fields=["questions"])


async def generate_quiz_content(
  context: ContextInput,
  question_count: int = 5,
  on_status: StatusCallback | None = None,
  *,
  store: KeyValueStore,
  adapters: Sequence[ContentAdapter] | None = None,
  settings: Settings | None = None,
) -> QuizContent:
  """Return a multiple-choice quiz for the context; cached per subject and topic."""
  resolved = coerce_context(context)
  if resolved is None:
    raise ValueError("A quiz needs a generation context with a subject.")
  settings = settings or get_settings()
  cache = ContentCache(store)
  key = quiz_cache_key(resolved.subject, resolved.topic)

  cached = parse_quiz(cache.get(key))
  if cached is not None:
    await emit_status(on_status, "Retrieved from cache", 100, "Cache")
    return cached

  def _fallback(prompt: str, ctx: GenerationContext | None) -> dict[str, Any]:
    return generate_fallback_quiz(resolved.subject, resolved.topic, question_count).to_payload()

  prompt = QUIZ_PROMPT_TEMPLATE.format(count=question_count, topic=resolved.topic, subject=resolved.subject, class_name=resolved.class_name or settings.default_class_name)
  outcome = await orchestrate(prompt, on_status, resolved, adapters=adapters, fallback=FallbackAdapter(generator=_fallback), response_check=check_quiz_payload, settings=settings)

  quiz = parse_quiz(outcome.content)
  if quiz is None or outcome.used_fallback:
    return quiz or generate_fallback_quiz(resolved.subject, resolved.topic, question_count)

  cache.set(key, quiz.to_payload())
  return quiz
