"""LLM client interface."""

from abc import ABC, abstractmethod


class LLMError(Exception):
    """Raised when the LLM provider fails to produce a response."""


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def generate(self, prompt: str, context: dict | None = None) -> str:
        """Generate a response from the LLM.

        Args:
            prompt: The prompt to send to the LLM
            context: Optional parameters (temperature, max_tokens, json_output)

        Returns:
            The generated response text

        Raises:
            LLMError: If the provider call fails
        """
        pass

    async def aclose(self) -> None:
        """Release provider resources. No-op by default."""
        return None
