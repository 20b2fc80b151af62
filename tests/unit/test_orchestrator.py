from __future__ import annotations

import pytest
from helpers import ScriptedAdapter, failing, succeeding

from studyhero.ai.errors import OutputValidationError, ProviderAuthError, ProviderNotConfiguredError
from studyhero.ai.fallback import generate_fallback_lesson
from studyhero.ai.orchestrator import ContentOrchestrator, decode_result, generate_ai_content, orchestrate
from studyhero.ai.providers.fallback import FallbackAdapter

REMOTE_NAMES = ("OpenAI", "Claude", "Gemini", "DeepSeek")


@pytest.mark.anyio
async def test_all_providers_failing_yields_subject_template(settings, status_recorder):
  adapters = [failing(name) for name in REMOTE_NAMES]

  content = await generate_ai_content("Explain photosynthesis", status_recorder, {"subject": "Biology", "topic": "Photosynthesis"}, adapters=adapters, settings=settings)

  assert content == generate_fallback_lesson("Biology", "Photosynthesis").to_payload()
  assert content["title"] == "Biology: Photosynthesis"
  assert status_recorder.updates[-1].progress == 100
  assert status_recorder.updates[-1].provider == "Fallback"


@pytest.mark.anyio
@pytest.mark.parametrize("prompt", ["", "   ", "Explain gravity"])
async def test_generate_never_raises_without_context(settings, prompt):
  adapters = [failing(name) for name in REMOTE_NAMES]

  content = await generate_ai_content(prompt, None, None, adapters=adapters, settings=settings)

  assert isinstance(content, dict)
  for field in ("title", "keyPoints", "explanation", "examples", "visualAids", "activities", "summary"):
    assert content[field]


@pytest.mark.anyio
@pytest.mark.parametrize("leading_failures", [0, 1, 2, 3])
async def test_attempt_count_is_failures_plus_one(leading_failures):
  adapters = [failing(name) for name in REMOTE_NAMES[:leading_failures]]
  winner = succeeding("Winner", "plain answer")
  spare = succeeding("Spare", "never used")
  orchestrator = ContentOrchestrator([*adapters, winner, spare], max_failures=10)

  outcome = await orchestrator.run("prompt")

  assert outcome.content == "plain answer"
  assert outcome.provider == "Winner"
  assert len(outcome.attempts) == leading_failures + 1
  assert all(len(adapter.calls) == 1 for adapter in adapters)
  assert len(winner.calls) == 1
  assert spare.calls == []


@pytest.mark.anyio
async def test_error_ceiling_skips_remaining_providers(status_recorder):
  first, second = failing("OpenAI"), failing("Claude")
  gemini = succeeding("Gemini", "unused")
  orchestrator = ContentOrchestrator([first, second, gemini], max_failures=2)

  outcome = await orchestrator.run("prompt", status_recorder)

  assert gemini.calls == []
  assert outcome.used_fallback
  assert "Initializing Gemini service" not in status_recorder.stages
  assert [attempt.provider for attempt in outcome.attempts] == ["OpenAI", "Claude", "Fallback"]


@pytest.mark.anyio
async def test_status_sequence_for_a_failover(status_recorder):
  orchestrator = ContentOrchestrator([failing("OpenAI"), succeeding("Claude", '{"answer": 42}')], max_failures=5)

  outcome = await orchestrator.run("prompt", status_recorder)

  assert outcome.content == {"answer": 42}
  assert status_recorder.stages == [
    "Initializing OpenAI service",
    "Connecting to OpenAI API",
    "OpenAI unavailable, trying alternative source",
    "Initializing Claude service",
    "Connecting to Claude API",
    "Content successfully generated with Claude",
  ]
  assert [status.progress for status in status_recorder.updates] == [5, 10, 5, 5, 10, 100]


@pytest.mark.anyio
async def test_auth_failures_are_reported_as_configuration_errors(status_recorder):
  rejected = ScriptedAdapter("OpenAI", error=ProviderAuthError("OpenAI", "API key rejected (401)", status_code=401))
  missing = ScriptedAdapter("Claude", error=ProviderNotConfiguredError("Claude", "ANTHROPIC_API_KEY is not configured"))
  orchestrator = ContentOrchestrator([rejected, missing, succeeding("Gemini", "ok")], max_failures=5)

  outcome = await orchestrator.run("prompt", status_recorder)

  assert outcome.provider == "Gemini"
  assert outcome.configuration_errors == ["OpenAI: API key rejected (401)", "Claude: ANTHROPIC_API_KEY is not configured"]
  assert [attempt.category for attempt in outcome.attempts] == ["configuration", "configuration", None]
  assert "OpenAI is not configured correctly, trying alternative source" in status_recorder.stages


@pytest.mark.anyio
async def test_response_check_moves_to_next_provider():
  incomplete = succeeding("OpenAI", '{"title": "Only a title"}')
  complete = succeeding("Claude", '{"title": "Full", "keyPoints": ["a"]}')

  def _check(content):
    if "keyPoints" not in content:
      raise OutputValidationError("missing required fields: keyPoints", missing_fields=["keyPoints"])

  outcome = await ContentOrchestrator([incomplete, complete], max_failures=5).run("prompt", response_check=_check)

  assert outcome.provider == "Claude"
  assert outcome.attempts[0].category == "output"


@pytest.mark.anyio
async def test_response_check_is_not_applied_to_fallback():
  def _reject(content):
    raise OutputValidationError("always invalid")

  outcome = await ContentOrchestrator([failing("OpenAI")], max_failures=5).run("prompt", response_check=_reject)

  assert outcome.used_fallback
  assert outcome.content["title"]


@pytest.mark.anyio
async def test_broken_fallback_still_returns_lesson_template(status_recorder):
  def _explode(prompt, context):
    raise RuntimeError("template store unavailable")

  orchestrator = ContentOrchestrator([], fallback=FallbackAdapter(generator=_explode), max_failures=2)

  outcome = await orchestrator.run("Explain osmosis", status_recorder, {"subject": "Biology", "topic": "Osmosis"})

  assert outcome.content == generate_fallback_lesson("Biology", "Osmosis").to_payload()
  assert outcome.provider == "Fallback"
  assert status_recorder.updates[-1].progress == 100


@pytest.mark.anyio
async def test_raising_status_callback_does_not_abort_generation():
  def _broken_sink(status):
    raise RuntimeError("ui went away")

  outcome = await ContentOrchestrator([succeeding("OpenAI", "text")], max_failures=2).run("prompt", _broken_sink)

  assert outcome.content == "text"


@pytest.mark.anyio
async def test_async_status_callbacks_are_awaited():
  seen = []

  async def _sink(status):
    seen.append(status.stage)

  await ContentOrchestrator([succeeding("OpenAI", "text")], max_failures=2).run("prompt", _sink)

  assert seen[0] == "Initializing OpenAI service"
  assert seen[-1] == "Content successfully generated with OpenAI"


@pytest.mark.anyio
async def test_context_header_reaches_adapters():
  adapter = succeeding("OpenAI", "text")

  await ContentOrchestrator([adapter], max_failures=2).run("prompt", None, {"subject": "Physics", "topic": "Optics", "className": "9"})

  _, context = adapter.calls[0]
  assert context.header() == "[Context: Subject: Physics, Topic: Optics, Class: 9]"


@pytest.mark.anyio
async def test_invalid_context_mapping_is_ignored():
  adapter = succeeding("OpenAI", "text")

  outcome = await ContentOrchestrator([adapter], max_failures=2).run("prompt", None, {"topic": "no subject"})

  assert outcome.content == "text"
  assert adapter.calls[0][1] is None


@pytest.mark.anyio
async def test_runs_do_not_share_failure_counters():
  orchestrator = ContentOrchestrator([failing("OpenAI"), failing("Claude"), succeeding("Gemini", "late")], max_failures=2)

  first = await orchestrator.run("prompt")
  second = await orchestrator.run("prompt")

  assert first.used_fallback and second.used_fallback
  assert len(second.attempts) == 3


@pytest.mark.anyio
async def test_invalid_environment_falls_back_to_local_content(monkeypatch):
  from studyhero.config import get_settings

  get_settings.cache_clear()
  monkeypatch.setenv("STUDYHERO_MAX_PROVIDER_FAILURES", "0")
  try:
    outcome = await orchestrate("Explain fractions", None, {"subject": "Mathematics", "topic": "Fractions"})
  finally:
    get_settings.cache_clear()

  assert outcome.used_fallback
  assert outcome.content["title"] == "Mathematics: Fractions"


def test_decode_result_handles_text_shapes():
  assert decode_result('  {"a": 1}') == {"a": 1}
  assert decode_result("[1, 2]") == [1, 2]
  assert decode_result("Plain prose answer") == "Plain prose answer"
  assert decode_result("{not json at all") == "{not json at all"
  assert decode_result({"already": "parsed"}) == {"already": "parsed"}
