"""Provider adapters."""

from studyhero.ai.providers.base import ContentAdapter, RemoteAdapter
from studyhero.ai.providers.claude import ClaudeAdapter
from studyhero.ai.providers.deepseek import DeepSeekAdapter
from studyhero.ai.providers.fallback import FallbackAdapter
from studyhero.ai.providers.gemini import GeminiAdapter
from studyhero.ai.providers.openai import OpenAIAdapter

__all__ = ["ContentAdapter", "RemoteAdapter", "ClaudeAdapter", "DeepSeekAdapter", "FallbackAdapter", "GeminiAdapter", "OpenAIAdapter"]
