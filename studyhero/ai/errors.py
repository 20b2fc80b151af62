"""Provider exceptions and error classification helpers."""

from __future__ import annotations

from typing import Iterable


class ProviderError(RuntimeError):
  """Raised when a vendor call fails (transport error or non-2xx status)."""

  def __init__(self, provider: str, message: str, *, status_code: int | None = None) -> None:
    super().__init__(f"{provider}: {message}")
    self.provider = provider
    self.status_code = status_code


class ProviderAuthError(ProviderError):
  """Raised when a vendor rejects the configured credentials."""


class ProviderNotConfiguredError(ProviderError):
  """Raised when a vendor has no credentials configured."""


class ProviderResponseError(ProviderError):
  """Raised when a vendor answers 2xx without usable content."""


class OutputValidationError(ValueError):
  """Raised when model output is valid JSON but misses required fields."""

  def __init__(self, message: str, *, missing_fields: list[str] | None = None) -> None:
    super().__init__(message)
    self.missing_fields = missing_fields or []


_AUTH_STATUS_CODES: frozenset[int] = frozenset({401, 403})

_AUTH_HINTS: tuple[str, ...] = (
  "invalid api key",
  "invalid x-api-key",
  "incorrect api key",
  "api key not valid",
  "authentication",
  "unauthorized",
  "permission denied",
)

_PROVIDER_HINTS: tuple[str, ...] = (
  "model not found",
  "no such model",
  "model is not available",
  "rate limit",
  "quota",
  "overloaded",
  "timeout",
  "timed out",
  "connection",
  "network",
  "api key",
  "service unavailable",
  "bad gateway",
  "gateway",
)

_OUTPUT_HINTS: tuple[str, ...] = (
  "invalid json",
  "failed to parse",
  "parse json",
  "missing required fields",
  "validation",
)


def _match_hint(message: str, hints: Iterable[str]) -> bool:
  """Return True when any hint appears in the message."""
  return any(hint in message for hint in hints)


def is_auth_error(exc: BaseException) -> bool:
  """Return True when retrying with the same credentials is pointless."""
  if isinstance(exc, ProviderNotConfiguredError | ProviderAuthError):
    return True

  status_code = getattr(exc, "status_code", None)
  if status_code in _AUTH_STATUS_CODES:
    return True

  return _match_hint(str(exc).lower(), _AUTH_HINTS)


def is_provider_error(exc: BaseException) -> bool:
  """Return True when an exception indicates a vendor or transport failure."""
  if isinstance(exc, ProviderError):
    return True

  return _match_hint(str(exc).lower(), _PROVIDER_HINTS)


def is_output_error(exc: BaseException) -> bool:
  """Return True when an exception indicates malformed or incomplete model output."""
  if isinstance(exc, OutputValidationError | ProviderResponseError):
    return True

  return _match_hint(str(exc).lower(), _OUTPUT_HINTS)


def classify_error(exc: BaseException) -> str:
  """Return a coarse category label used for logs and attempt records."""
  # Auth first: a 401 is also a provider error but needs a configuration fix.
  if is_auth_error(exc):
    return "configuration"
  if is_output_error(exc):
    return "output"
  if is_provider_error(exc):
    return "provider"
  return "unknown"
