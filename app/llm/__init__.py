"""LLM abstraction layer."""

from app.llm.client import LLMClient, LLMError
from app.llm.gemini_client import GeminiClient

__all__ = ["LLMClient", "LLMError", "GeminiClient"]
