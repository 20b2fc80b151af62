"""Construction of the fixed provider chain."""

from __future__ import annotations

import logging
from enum import Enum

from studyhero.ai.providers.base import RemoteAdapter
from studyhero.ai.providers.claude import ClaudeAdapter
from studyhero.ai.providers.deepseek import DeepSeekAdapter
from studyhero.ai.providers.gemini import GeminiAdapter
from studyhero.ai.providers.openai import OpenAIAdapter
from studyhero.config import Settings, get_settings

logger = logging.getLogger(__name__)


class ProviderMode(str, Enum):
  """Remote providers in chain order."""

  OPENAI = "openai"
  CLAUDE = "claude"
  GEMINI = "gemini"
  DEEPSEEK = "deepseek"


def get_adapter_for_mode(mode: str | ProviderMode, settings: Settings) -> RemoteAdapter:
  """Return a configured adapter for a provider name."""
  key = mode.value if isinstance(mode, ProviderMode) else mode.lower()
  timeout = settings.request_timeout_seconds
  api_key = settings.api_key_for(key)
  if key == ProviderMode.OPENAI.value:
    return OpenAIAdapter(api_key=api_key, model=settings.openai_model, timeout=timeout)
  if key == ProviderMode.CLAUDE.value:
    return ClaudeAdapter(api_key=api_key, model=settings.claude_model, timeout=timeout)
  if key == ProviderMode.GEMINI.value:
    return GeminiAdapter(api_key=api_key, model=settings.gemini_model, timeout=timeout)
  if key == ProviderMode.DEEPSEEK.value:
    return DeepSeekAdapter(api_key=api_key, model=settings.deepseek_model, timeout=timeout, base_url=settings.deepseek_base_url)
  raise ValueError(f"Unsupported provider mode '{mode}'.")


def build_adapters(settings: Settings | None = None, *, include_unconfigured: bool = False) -> list[RemoteAdapter]:
  """Return the enabled remote adapters in the fixed order OpenAI, Claude, Gemini, DeepSeek.

  Providers without credentials are left out unless `include_unconfigured` is set,
  in which case they fail fast with a configuration error when tried.
  """
  resolved = settings or get_settings()
  adapters: list[RemoteAdapter] = []
  for mode in ProviderMode:
    if mode.value not in resolved.enabled_providers:
      continue
    adapter = get_adapter_for_mode(mode, resolved)
    if not adapter.is_configured and not include_unconfigured:
      logger.debug("Skipping %s: %s is not set", adapter.name, adapter.key_variable)
      continue
    adapters.append(adapter)
  return adapters
