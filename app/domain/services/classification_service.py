"""Classification engine: AI judgment of inbound messages with a safe fallback."""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod

from pydantic import ValidationError

from app.domain.models.classification import (
    SOURCE_FALLBACK,
    ClassificationResult,
    Intent,
    Priority,
    RouteTo,
)
from app.domain.prompts.classification import BuildingPromptContext, build_classification_prompt
from app.llm.client import LLMClient

logger = logging.getLogger(__name__)

FALLBACK_RESPONSES = {
    "es": "Hemos recibido tu mensaje. Un administrador te responderá pronto.",
    "en": "We received your message. An administrator will respond soon.",
}

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class ClassificationError(Exception):
    """Raised when the model output can't be turned into a ClassificationResult."""


def fallback_classification(language: str) -> ClassificationResult:
    """Deterministic result used whenever AI classification fails."""
    return ClassificationResult(
        intent=Intent.OTHER,
        priority=Priority.MEDIUM,
        route_to=RouteTo.ADMIN,
        suggested_response=FALLBACK_RESPONSES.get(language, FALLBACK_RESPONSES["es"]),
        requires_human_review=True,
        extracted_data={},
        source=SOURCE_FALLBACK,
    )


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence (``` or ```json) wrapped around the payload."""
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        if lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines).strip()
    return text


def parse_classification(raw: str) -> ClassificationResult:
    """Parse and validate the model's JSON answer.

    Raises:
        ClassificationError: If the text isn't a JSON object matching the contract
    """
    text = strip_code_fences(raw or "")
    if not text:
        raise ClassificationError("Empty classification response")

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        # Tolerate stray prose around the object
        match = _JSON_OBJECT.search(text)
        if not match:
            raise ClassificationError("Classification response is not JSON")
        try:
            data = json.loads(match.group())
        except json.JSONDecodeError as e:
            raise ClassificationError(f"Classification response is not JSON: {e}") from e

    if not isinstance(data, dict):
        raise ClassificationError("Classification response is not a JSON object")

    try:
        return ClassificationResult.model_validate(data)
    except ValidationError as e:
        raise ClassificationError(f"Invalid classification: {e.error_count()} errors") from e


class Classifier(ABC):
    """Classifies a resident's message. Implementations never raise."""

    @abstractmethod
    async def classify(
        self,
        message_body: str,
        resident_role: str,
        language: str,
        building_context: BuildingPromptContext | None = None,
    ) -> ClassificationResult:
        pass


class LLMClassifier(Classifier):
    """Classifier backed by an LLM client.

    Built once at process start and injected where needed. Any failure,
    including a timeout, returns the fallback immediately without retrying.
    """

    def __init__(self, llm_client: LLMClient, timeout_seconds: float = 8.0) -> None:
        self.llm_client = llm_client
        self.timeout_seconds = timeout_seconds

    async def classify(
        self,
        message_body: str,
        resident_role: str,
        language: str,
        building_context: BuildingPromptContext | None = None,
    ) -> ClassificationResult:
        prompt = build_classification_prompt(message_body, resident_role, language, building_context)

        try:
            raw = await asyncio.wait_for(
                self.llm_client.generate(
                    prompt,
                    context={"temperature": 0.2, "max_tokens": 800, "json_output": True},
                ),
                timeout=self.timeout_seconds,
            )
            result = parse_classification(raw)
        except asyncio.TimeoutError:
            logger.warning(f"Classification timed out after {self.timeout_seconds}s, using fallback")
            return fallback_classification(language)
        except ClassificationError as e:
            logger.warning(f"Classification output rejected, using fallback: {e}")
            return fallback_classification(language)
        except Exception as e:
            logger.error(
                f"Classification call failed, using fallback: {type(e).__name__}: {e}",
                exc_info=True,
            )
            return fallback_classification(language)

        logger.info(
            "Message classified",
            extra={
                "intent": result.intent,
                "priority": result.priority.value,
                "route_to": result.route_to.value,
                "requires_human_review": result.requires_human_review,
            },
        )
        return result
