"""Shared fixtures: settings, an in-memory store and a status recorder."""

from __future__ import annotations

import pytest
from helpers import StatusRecorder

from studyhero.config import Settings
from studyhero.storage.kv_store import InMemoryKeyValueStore


@pytest.fixture
def anyio_backend():
  return "asyncio"


@pytest.fixture
def status_recorder() -> StatusRecorder:
  return StatusRecorder()


@pytest.fixture
def settings(tmp_path) -> Settings:
  return Settings(
    environment="test",
    debug=False,
    log_dir=str(tmp_path / "logs"),
    log_max_bytes=1024 * 1024,
    log_backup_count=2,
    openai_api_key=None,
    anthropic_api_key=None,
    gemini_api_key=None,
    deepseek_api_key=None,
    openai_model="gpt-4",
    claude_model="claude-3-opus-20240229",
    gemini_model="gemini-1.0-pro",
    deepseek_model="deepseek-chat",
    deepseek_base_url="https://api.deepseek.com/v1",
    enabled_providers=("openai", "claude", "gemini", "deepseek"),
    max_provider_failures=2,
    request_timeout_seconds=None,
    cache_url=None,
    default_class_name="10",
  )


@pytest.fixture
def store() -> InMemoryKeyValueStore:
  return InMemoryKeyValueStore()
