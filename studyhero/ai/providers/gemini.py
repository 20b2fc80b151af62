"""Gemini adapter using the google-genai SDK."""

from __future__ import annotations

import warnings
from typing import Any, Final

import httpx
from pydantic.warnings import ArbitraryTypeWarning

with warnings.catch_warnings():
  warnings.filterwarnings("ignore", message=r"<built-in function any> is not a Python type.*", category=ArbitraryTypeWarning)
  from google import genai
  from google.genai import errors as genai_errors
  from google.genai import types

from studyhero.ai.errors import ProviderAuthError, ProviderError
from studyhero.ai.providers.base import RemoteAdapter

_AUTH_CODES: Final[frozenset[int]] = frozenset({401, 403})


class GeminiAdapter(RemoteAdapter):
  """Calls the Gemini generateContent endpoint."""

  name = "Gemini"
  key_variable = "GEMINI_API_KEY"
  _DEFAULT_MODEL: Final[str] = "gemini-1.0-pro"

  def __init__(self, *, api_key: str | None, model: str | None = None, timeout: float | None = None, client: genai.Client | None = None) -> None:
    super().__init__(api_key=api_key, model=model or self._DEFAULT_MODEL, timeout=timeout)
    self._client = client

  def _get_client(self, api_key: str) -> genai.Client:
    if self._client is None:
      kwargs: dict[str, Any] = {"api_key": api_key}
      if self._timeout is not None:
        # google-genai expects the timeout in milliseconds.
        kwargs["http_options"] = types.HttpOptions(timeout=int(self._timeout * 1000))
      self._client = genai.Client(**kwargs)
    return self._client

  async def _request(self, prompt: str, api_key: str) -> str | None:
    client = self._get_client(api_key)
    config = types.GenerateContentConfig(temperature=0.7, max_output_tokens=2048)
    try:
      # Use the async client to avoid blocking the asyncio event loop.
      response = await client.aio.models.generate_content(model=self.model, contents=prompt, config=config)
    except genai_errors.APIError as exc:
      # Gemini reports a bad key as 400 INVALID_ARGUMENT with an "API key not valid" message.
      message = str(exc.message or "")
      if exc.code in _AUTH_CODES or "api key" in message.lower():
        raise ProviderAuthError(self.name, f"API key rejected ({exc.code})", status_code=exc.code) from exc
      raise ProviderError(self.name, f"API error: {exc.code} {message}".rstrip(), status_code=exc.code) from exc
    except httpx.HTTPError as exc:
      raise ProviderError(self.name, f"request failed: {exc}") from exc

    return response.text
