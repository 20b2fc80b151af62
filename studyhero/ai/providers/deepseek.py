"""DeepSeek adapter; DeepSeek serves an OpenAI-compatible chat API."""

from __future__ import annotations

from typing import Any, Final

from openai import AsyncOpenAI

from studyhero.ai.providers.openai import OpenAIAdapter

DEEPSEEK_BASE_URL: Final[str] = "https://api.deepseek.com/v1"


class DeepSeekAdapter(OpenAIAdapter):
  """Calls the DeepSeek chat-completions endpoint."""

  name = "DeepSeek"
  key_variable = "DEEPSEEK_API_KEY"
  _DEFAULT_MODEL: Final[str] = "deepseek-chat"

  def __init__(self, *, api_key: str | None, model: str | None = None, timeout: float | None = None, base_url: str | None = None, client: AsyncOpenAI | None = None) -> None:
    super().__init__(api_key=api_key, model=model or self._DEFAULT_MODEL, timeout=timeout, base_url=base_url or DEEPSEEK_BASE_URL, client=client)

  def _messages(self, prompt: str) -> list[dict[str, str]]:
    return [{"role": "system", "content": "You are an expert educational curriculum designer."}, {"role": "user", "content": prompt}]

  def _completion_options(self) -> dict[str, Any]:
    return {"max_tokens": self._MAX_TOKENS, "temperature": 0.5}
