from __future__ import annotations

import json

import pytest
from helpers import ScriptedAdapter, failing, succeeding
from sqlalchemy.exc import OperationalError

from studyhero.ai.errors import ProviderAuthError
from studyhero.ai.fallback import generate_fallback_lesson
from studyhero.schema.requests import GenerationContext, LessonSearchParams
from studyhero.services.content_cache import deep_search_cache_key, lesson_cache_key
from studyhero.services.lessons import check_lesson_payload, deep_search_lesson_content, generate_lesson_content, normalize_lesson_payload, refresh_lesson
from studyhero.storage.kv_store import InMemoryKeyValueStore

CONTEXT = GenerationContext(subject="Physics", topic="Optics", class_name="10")

REMOTE_LESSON = {
  "title": "Optics and Light",
  "keyPoints": ["Light travels in straight lines", "Mirrors reflect light"],
  "explanation": ["Optics studies light.", "Lenses refract light."],
  "examples": [{"title": "Periscope", "content": "Two mirrors at 45 degrees."}],
  "visualAids": [{"title": "Ray diagram", "description": "Rays through a lens", "visualType": "diagram"}],
  "activities": [{"title": "Pinhole camera", "instructions": "Build one", "learningOutcome": "Rectilinear propagation"}],
  "summary": "Light can be reflected and refracted.",
}


@pytest.mark.anyio
async def test_second_call_is_served_from_cache(store, settings, status_recorder):
  adapter = succeeding("OpenAI", json.dumps(REMOTE_LESSON))

  first = await generate_lesson_content(CONTEXT, store=store, adapters=[adapter], settings=settings)
  stored = store.get(lesson_cache_key("Physics", "Optics"))
  second = await generate_lesson_content(CONTEXT, status_recorder, store=store, adapters=[adapter], settings=settings)

  assert first.provider == "OpenAI" and not first.from_cache
  assert second.from_cache and second.provider == "Cache"
  assert len(adapter.calls) == 1
  assert json.dumps(second.lesson.to_payload(), ensure_ascii=False) == stored
  assert second.lesson == first.lesson
  assert [(status.stage, status.progress, status.provider) for status in status_recorder.updates] == [("Retrieved from cache", 100, "Cache")]


@pytest.mark.anyio
async def test_prompt_carries_topic_subject_and_default_class(store, settings):
  adapter = succeeding("OpenAI", json.dumps(REMOTE_LESSON))

  await generate_lesson_content({"subject": "Physics", "topic": "Optics"}, store=store, adapters=[adapter], settings=settings)

  prompt, context = adapter.calls[0]
  assert 'lesson on "Optics" for the subject "Physics" for students in class 10' in prompt
  assert context.subject == "Physics"


@pytest.mark.anyio
async def test_refresh_bypasses_cache(store, settings):
  adapter = succeeding("OpenAI", json.dumps(REMOTE_LESSON))

  await generate_lesson_content(CONTEXT, store=store, adapters=[adapter], settings=settings)
  result = await generate_lesson_content(CONTEXT, store=store, adapters=[adapter], settings=settings, refresh=True)

  assert not result.from_cache
  assert len(adapter.calls) == 2


@pytest.mark.anyio
async def test_refresh_lesson_drops_cached_entry(store, settings):
  await generate_lesson_content(CONTEXT, store=store, adapters=[succeeding("OpenAI", json.dumps(REMOTE_LESSON))], settings=settings)

  refresh_lesson(CONTEXT, store)

  assert store.get(lesson_cache_key("Physics", "Optics")) is None


@pytest.mark.anyio
async def test_loose_payload_is_normalised(store, settings):
  loose = {
    "keyPoints": ["Focal length"],
    "explanation": "A single paragraph about lenses.",
    "exampleProblems": [{"problem": "f = 10 cm, u = 20 cm", "solution": "v = 20 cm"}],
  }
  adapter = succeeding("Claude", "Here you go:\n```json\n" + json.dumps(loose) + "\n```")

  result = await generate_lesson_content(CONTEXT, store=store, adapters=[adapter], settings=settings)

  assert result.provider == "Claude"
  assert result.lesson.title == "Optics"
  assert result.lesson.explanation == ["A single paragraph about lenses."]
  assert result.lesson.examples[0].title == "Example"
  assert result.lesson.examples[0].content == "Problem: f = 10 cm, u = 20 cm\nSolution: v = 20 cm"


@pytest.mark.anyio
async def test_incomplete_lesson_moves_to_next_provider(store, settings):
  incomplete = succeeding("OpenAI", '{"title": "Only a title"}')
  complete = succeeding("Claude", json.dumps(REMOTE_LESSON))

  result = await generate_lesson_content(CONTEXT, store=store, adapters=[incomplete, complete], settings=settings)

  assert result.provider == "Claude"
  assert result.lesson.title == "Optics and Light"


@pytest.mark.anyio
async def test_all_failures_return_template_without_caching(store, settings):
  adapters = [failing(name) for name in ("OpenAI", "Claude", "Gemini", "DeepSeek")]
  context = GenerationContext(subject="Biology", topic="Photosynthesis")

  result = await generate_lesson_content(context, store=store, adapters=adapters, settings=settings)

  assert result.provider == "Fallback"
  assert result.lesson == generate_fallback_lesson("Biology", "Photosynthesis")
  assert store.get(lesson_cache_key("Biology", "Photosynthesis")) is None


@pytest.mark.anyio
async def test_configuration_errors_are_surfaced(store, settings):
  rejected = ScriptedAdapter("OpenAI", error=ProviderAuthError("OpenAI", "API key rejected (401)", status_code=401))

  result = await generate_lesson_content(CONTEXT, store=store, adapters=[rejected, succeeding("Claude", json.dumps(REMOTE_LESSON))], settings=settings)

  assert result.provider == "Claude"
  assert result.configuration_errors == ["OpenAI: API key rejected (401)"]


@pytest.mark.anyio
async def test_corrupt_cache_entry_is_regenerated(store, settings):
  store.set(lesson_cache_key("Physics", "Optics"), "{truncated")
  adapter = succeeding("OpenAI", json.dumps(REMOTE_LESSON))

  result = await generate_lesson_content(CONTEXT, store=store, adapters=[adapter], settings=settings)

  assert not result.from_cache
  assert len(adapter.calls) == 1
  assert json.loads(store.get(lesson_cache_key("Physics", "Optics")))["title"] == "Optics and Light"


@pytest.mark.anyio
async def test_missing_subject_is_rejected(store, settings):
  with pytest.raises(ValueError):
    await generate_lesson_content({"topic": "Optics"}, store=store, adapters=[], settings=settings)


def test_check_lesson_payload_reports_missing_fields():
  from studyhero.ai.errors import OutputValidationError

  with pytest.raises(OutputValidationError) as excinfo:
    check_lesson_payload({"title": "x"})
  assert excinfo.value.missing_fields == ["keyPoints", "explanation"]

  with pytest.raises(OutputValidationError):
    check_lesson_payload("prose without any json")

  check_lesson_payload({"keyPoints": ["a"], "summary": "s"})


def test_normalize_uses_summary_when_explanation_missing():
  payload = normalize_lesson_payload({"keyPoints": ["a"], "summary": "Short summary"}, "Topic")

  assert payload["explanation"] == ["Short summary"]
  assert payload["title"] == "Topic"
  assert payload["visualAids"] == []


SOURCED_LESSON = {
  **REMOTE_LESSON,
  "sources": [{"url": "https://ncert.nic.in/optics", "title": "NCERT Optics", "relevance": 97, "snippet": "Chapter 10"}],
}


@pytest.mark.anyio
async def test_deep_search_caches_sourced_lesson(store, settings, status_recorder):
  params = LessonSearchParams(subject="Physics", board="CBSE", topic="Optics", class_name="10")
  adapter = succeeding("OpenAI", json.dumps(SOURCED_LESSON))

  first = await deep_search_lesson_content(params, status_recorder, store=store, adapters=[adapter], settings=settings)
  second = await deep_search_lesson_content(params, store=store, adapters=[adapter], settings=settings)

  assert first.sources[0].url == "https://ncert.nic.in/optics"
  assert second == first
  assert len(adapter.calls) == 1
  assert store.get(deep_search_cache_key("CBSE", "Physics", "Optics")) is not None
  assert status_recorder.updates[0].stage == "Initiating deep web search"
  assert status_recorder.updates[-1].stage == "Deep search completed successfully"
  # Nested provider updates are relabelled.
  assert any(status.provider == "Web Search" for status in status_recorder.updates)


@pytest.mark.anyio
async def test_deep_search_flag_bypasses_cache(store, settings):
  params = LessonSearchParams(subject="Physics", board="CBSE", topic="Optics")
  adapter = succeeding("OpenAI", json.dumps(SOURCED_LESSON))

  await deep_search_lesson_content(params, store=store, adapters=[adapter], settings=settings)
  await deep_search_lesson_content(params.model_copy(update={"deep_search": True}), store=store, adapters=[adapter], settings=settings)

  assert len(adapter.calls) == 2


@pytest.mark.anyio
async def test_deep_search_falls_back_to_generic_sources(store, settings, status_recorder):
  params = LessonSearchParams(subject="Chemistry", board="ICSE", topic="Acids")

  lesson = await deep_search_lesson_content(params, status_recorder, store=store, adapters=[failing("OpenAI"), failing("Claude")], settings=settings)

  assert lesson.title == "Chemistry: Acids"
  assert len(lesson.sources) == 3
  assert status_recorder.updates[-1].stage == "Fallback content ready"
  assert store.get(deep_search_cache_key("ICSE", "Chemistry", "Acids")) is None


@pytest.mark.anyio
async def test_deep_search_accepts_fractional_relevance(store, settings):
  params = LessonSearchParams(subject="Physics", board="CBSE", topic="Optics")
  payload = {**REMOTE_LESSON, "sources": [{"url": "https://ncert.nic.in/optics", "title": "NCERT Optics", "relevance": 0.95}, {"url": "https://example.org/light", "title": "Light", "relevance": "80"}]}

  lesson = await deep_search_lesson_content(params, store=store, adapters=[succeeding("OpenAI", json.dumps(payload))], settings=settings)

  assert [(source.url, source.relevance) for source in lesson.sources] == [("https://ncert.nic.in/optics", 95), ("https://example.org/light", 80)]
  assert store.get(deep_search_cache_key("CBSE", "Physics", "Optics")) is not None


class BrokenStore(InMemoryKeyValueStore):
  def get(self, key: str) -> str | None:
    raise OperationalError("SELECT value FROM kv_entries", {}, Exception("database is locked"))

  def set(self, key: str, value: str) -> None:
    raise OSError("disk full")


@pytest.mark.anyio
async def test_store_failures_do_not_discard_provider_output(settings):
  adapter = succeeding("OpenAI", json.dumps(REMOTE_LESSON))

  result = await generate_lesson_content(CONTEXT, store=BrokenStore(), adapters=[adapter], settings=settings)

  assert result.provider == "OpenAI"
  assert result.lesson.title == "Optics and Light"
  assert len(adapter.calls) == 1
