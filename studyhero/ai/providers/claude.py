"""Claude adapter using the anthropic SDK (messages API)."""

from __future__ import annotations

from typing import Any, Final

import anthropic
import httpx
from anthropic import AsyncAnthropic

from studyhero.ai.errors import ProviderAuthError, ProviderError
from studyhero.ai.providers.base import RemoteAdapter


class ClaudeAdapter(RemoteAdapter):
  """Calls the Anthropic messages endpoint."""

  name = "Claude"
  key_variable = "ANTHROPIC_API_KEY"
  _DEFAULT_MODEL: Final[str] = "claude-3-opus-20240229"
  _MAX_TOKENS: Final[int] = 4000

  def __init__(self, *, api_key: str | None, model: str | None = None, timeout: float | None = None, client: AsyncAnthropic | None = None) -> None:
    super().__init__(api_key=api_key, model=model or self._DEFAULT_MODEL, timeout=timeout)
    self._client = client

  def _get_client(self, api_key: str) -> AsyncAnthropic:
    if self._client is None:
      kwargs: dict[str, Any] = {"api_key": api_key, "max_retries": 0}
      if self._timeout is not None:
        kwargs["timeout"] = httpx.Timeout(self._timeout)
      self._client = AsyncAnthropic(**kwargs)
    return self._client

  async def _request(self, prompt: str, api_key: str) -> str | None:
    client = self._get_client(api_key)
    try:
      response = await client.messages.create(model=self.model, max_tokens=self._MAX_TOKENS, messages=[{"role": "user", "content": prompt}])
    except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as exc:
      raise ProviderAuthError(self.name, f"API key rejected ({exc.status_code})", status_code=exc.status_code) from exc
    except anthropic.APIStatusError as exc:
      raise ProviderError(self.name, f"API error: {exc.status_code}", status_code=exc.status_code) from exc
    except anthropic.APIError as exc:
      raise ProviderError(self.name, f"request failed: {exc}") from exc

    # The answer is the first text block; tool-use blocks carry no text.
    for block in response.content:
      text = getattr(block, "text", None)
      if text:
        return text
    return None
