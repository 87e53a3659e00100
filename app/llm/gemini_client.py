"""Gemini client implementation."""

from typing import Any

from google import genai
from google.genai import types

from app.llm.client import LLMClient, LLMError


class GeminiClient(LLMClient):
    """Gemini client using the google-genai SDK's async surface."""

    def __init__(self, api_key: str, model_name: str) -> None:
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(api_version="v1beta"),
        )
        self.model_name = model_name

    async def generate(self, prompt: str, context: dict | None = None) -> str:
        """Generate a response using Gemini.

        Args:
            prompt: The prompt to send to the LLM
            context: Optional context dictionary (temperature, max_tokens, json_output)

        Returns:
            The generated response text

        Raises:
            LLMError: If generation fails
        """
        generation_config: dict[str, Any] = {
            "temperature": 0.2,
            "max_output_tokens": 500,
        }
        if context:
            if "temperature" in context:
                generation_config["temperature"] = context["temperature"]
            if "max_tokens" in context:
                generation_config["max_output_tokens"] = context["max_tokens"]
            if context.get("json_output"):
                generation_config["response_mime_type"] = "application/json"

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(**generation_config),
            )
        except Exception as e:
            raise LLMError(f"Gemini generation failed: {e}") from e

        return response.text or ""
