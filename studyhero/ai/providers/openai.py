"""OpenAI chat-completions adapter using the openai SDK."""

from __future__ import annotations

from typing import Any, Final

import httpx
import openai
from openai import AsyncOpenAI

from studyhero.ai.errors import ProviderAuthError, ProviderError
from studyhero.ai.providers.base import EDUCATIONAL_SYSTEM_PROMPT, RemoteAdapter


class OpenAIAdapter(RemoteAdapter):
  """Calls an OpenAI-compatible chat-completions endpoint."""

  name = "OpenAI"
  key_variable = "OPENAI_API_KEY"
  _DEFAULT_MODEL: Final[str] = "gpt-4"
  _MAX_TOKENS: Final[int] = 2000

  def __init__(self, *, api_key: str | None, model: str | None = None, timeout: float | None = None, base_url: str | None = None, client: AsyncOpenAI | None = None) -> None:
    super().__init__(api_key=api_key, model=model or self._DEFAULT_MODEL, timeout=timeout)
    self._base_url = base_url
    self._client = client

  def _get_client(self, api_key: str) -> AsyncOpenAI:
    if self._client is None:
      # Retries belong to the orchestrator, so the SDK must not retry on its own.
      kwargs: dict[str, Any] = {"api_key": api_key, "max_retries": 0}
      if self._base_url:
        kwargs["base_url"] = self._base_url
      if self._timeout is not None:
        kwargs["timeout"] = httpx.Timeout(self._timeout)
      self._client = AsyncOpenAI(**kwargs)
    return self._client

  def _messages(self, prompt: str) -> list[dict[str, str]]:
    return [{"role": "system", "content": EDUCATIONAL_SYSTEM_PROMPT}, {"role": "user", "content": prompt}]

  def _completion_options(self) -> dict[str, Any]:
    return {"max_tokens": self._MAX_TOKENS}

  async def _request(self, prompt: str, api_key: str) -> str | None:
    client = self._get_client(api_key)
    try:
      response = await client.chat.completions.create(model=self.model, messages=self._messages(prompt), **self._completion_options())
    except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
      raise ProviderAuthError(self.name, f"API key rejected ({exc.status_code})", status_code=exc.status_code) from exc
    except openai.APIStatusError as exc:
      raise ProviderError(self.name, f"API error: {exc.status_code}", status_code=exc.status_code) from exc
    except openai.APIError as exc:
      raise ProviderError(self.name, f"request failed: {exc}") from exc

    if not response.choices:
      return None
    return response.choices[0].message.content
