"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from studyhero.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

KNOWN_PROVIDERS: tuple[str, ...] = ("openai", "claude", "gemini", "deepseek")


@dataclass(frozen=True)
class Settings:
  """Typed settings for the StudyHero content engine."""

  environment: str
  debug: bool
  log_dir: str
  log_max_bytes: int
  log_backup_count: int
  openai_api_key: str | None
  anthropic_api_key: str | None
  gemini_api_key: str | None
  deepseek_api_key: str | None
  openai_model: str
  claude_model: str
  gemini_model: str
  deepseek_model: str
  deepseek_base_url: str
  enabled_providers: tuple[str, ...]
  max_provider_failures: int
  request_timeout_seconds: float | None
  cache_url: str | None
  default_class_name: str

  def api_key_for(self, provider: str) -> str | None:
    """Return the configured credential for a provider name."""
    keys = {"openai": self.openai_api_key, "claude": self.anthropic_api_key, "gemini": self.gemini_api_key, "deepseek": self.deepseek_api_key}
    return keys.get(provider)


def _parse_bool(raw: str | None) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None:
    return False

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  if value == "":
    return None
  return value


def _parse_providers(raw: str | None) -> tuple[str, ...]:
  """Filter the fixed provider chain; the canonical order always wins."""
  if not raw:
    return KNOWN_PROVIDERS

  requested = {name.strip().lower() for name in raw.split(",") if name.strip()}
  unknown = requested.difference(KNOWN_PROVIDERS)
  if unknown:
    raise ValueError(f"STUDYHERO_PROVIDERS contains unknown providers: {', '.join(sorted(unknown))}.")

  return tuple(name for name in KNOWN_PROVIDERS if name in requested)


def _parse_int(name: str, default: str) -> int:
  raw = os.getenv(name, default)
  try:
    return int(raw)
  except ValueError as exc:
    raise ValueError(f"{name} must be an integer.") from exc


def _parse_optional_timeout(raw: str | None) -> float | None:
  if raw is None or raw.strip() == "":
    return None

  try:
    value = float(raw)
  except ValueError as exc:
    raise ValueError("STUDYHERO_REQUEST_TIMEOUT_SECONDS must be a number.") from exc
  if value <= 0:
    raise ValueError("STUDYHERO_REQUEST_TIMEOUT_SECONDS must be positive when provided.")

  return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("STUDYHERO_ENV", "development").lower()
  debug = _parse_bool(os.getenv("STUDYHERO_DEBUG"))

  log_max_bytes = _parse_int("STUDYHERO_LOG_MAX_BYTES", "5242880")  # 5MB default
  if log_max_bytes <= 0:
    raise ValueError("STUDYHERO_LOG_MAX_BYTES must be a positive integer.")

  log_backup_count = _parse_int("STUDYHERO_LOG_BACKUP_COUNT", "10")
  if log_backup_count < 0:
    raise ValueError("STUDYHERO_LOG_BACKUP_COUNT must be zero or a positive integer.")

  # Failures tolerated before the remaining vendors are skipped in favour of the local generator.
  max_provider_failures = _parse_int("STUDYHERO_MAX_PROVIDER_FAILURES", "2")
  if max_provider_failures <= 0:
    raise ValueError("STUDYHERO_MAX_PROVIDER_FAILURES must be a positive integer.")

  return Settings(
    environment=environment,
    debug=debug,
    log_dir=(os.getenv("STUDYHERO_LOG_DIR") or "./logs").strip(),
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
    openai_api_key=_optional_str(os.getenv("OPENAI_API_KEY")),
    anthropic_api_key=_optional_str(os.getenv("ANTHROPIC_API_KEY")),
    gemini_api_key=_optional_str(os.getenv("GEMINI_API_KEY")),
    deepseek_api_key=_optional_str(os.getenv("DEEPSEEK_API_KEY")),
    openai_model=os.getenv("STUDYHERO_OPENAI_MODEL", "gpt-4"),
    claude_model=os.getenv("STUDYHERO_CLAUDE_MODEL", "claude-3-opus-20240229"),
    gemini_model=os.getenv("STUDYHERO_GEMINI_MODEL", "gemini-1.0-pro"),
    deepseek_model=os.getenv("STUDYHERO_DEEPSEEK_MODEL", "deepseek-chat"),
    deepseek_base_url=(os.getenv("STUDYHERO_DEEPSEEK_BASE_URL") or "https://api.deepseek.com/v1").strip(),
    enabled_providers=_parse_providers(os.getenv("STUDYHERO_PROVIDERS")),
    max_provider_failures=max_provider_failures,
    request_timeout_seconds=_parse_optional_timeout(os.getenv("STUDYHERO_REQUEST_TIMEOUT_SECONDS")),
    cache_url=_optional_str(os.getenv("STUDYHERO_CACHE_URL")),
    default_class_name=(os.getenv("STUDYHERO_DEFAULT_CLASS") or "10").strip(),
  )
