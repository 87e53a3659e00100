"""Tests for message classification."""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from app.domain.models.classification import SOURCE_AI, SOURCE_FALLBACK, Priority, RouteTo
from app.domain.prompts.classification import (
    BuildingPromptContext,
    KnowledgeSnippet,
    build_classification_prompt,
)
from app.domain.services.classification_service import (
    FALLBACK_RESPONSES,
    ClassificationError,
    LLMClassifier,
    fallback_classification,
    parse_classification,
    strip_code_fences,
)
from app.llm.client import LLMClient, LLMError

VALID = {
    "intent": "maintenance_request",
    "priority": "high",
    "routeTo": "admin",
    "suggestedResponse": "Enviaremos un plomero.",
    "requiresHumanReview": False,
    "extractedData": {"category": "plumber", "location": "cocina"},
}


def _llm(response=None, side_effect=None):
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(return_value=response, side_effect=side_effect)
    return client


class TestParseClassification:
    def test_plain_json(self):
        result = parse_classification(json.dumps(VALID))

        assert result.intent == "maintenance_request"
        assert result.priority == Priority.HIGH
        assert result.route_to == RouteTo.ADMIN
        assert result.extracted_data["category"] == "plumber"
        assert result.source == SOURCE_AI

    def test_code_fenced_json(self):
        raw = "```json\n" + json.dumps(VALID) + "\n```"

        assert parse_classification(raw).intent == "maintenance_request"

    def test_json_wrapped_in_prose(self):
        raw = "Here is the result:\n" + json.dumps(VALID) + "\nThanks"

        assert parse_classification(raw).priority == Priority.HIGH

    def test_enum_values_are_case_insensitive(self):
        result = parse_classification(json.dumps({**VALID, "priority": "HIGH", "routeTo": "Both"}))

        assert result.priority == Priority.HIGH
        assert result.route_to == RouteTo.BOTH

    def test_blank_intent_becomes_other(self):
        assert parse_classification(json.dumps({**VALID, "intent": "  "})).intent == "other"

    def test_unknown_intent_passes_through(self):
        assert parse_classification(json.dumps({**VALID, "intent": "parking"})).intent == "parking"

    def test_invalid_priority_rejected(self):
        with pytest.raises(ClassificationError):
            parse_classification(json.dumps({**VALID, "priority": "critical"}))

    def test_missing_required_field_rejected(self):
        data = dict(VALID)
        del data["requiresHumanReview"]

        with pytest.raises(ClassificationError):
            parse_classification(json.dumps(data))

    @pytest.mark.parametrize("raw", ["", "not json at all", "[1, 2, 3]", "{broken"])
    def test_unparseable_rejected(self, raw):
        with pytest.raises(ClassificationError):
            parse_classification(raw)

    def test_strip_code_fences_leaves_plain_text(self):
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'


class TestFallback:
    def test_fallback_shape(self):
        result = fallback_classification("es")

        assert result.intent == "other"
        assert result.priority == Priority.MEDIUM
        assert result.route_to == RouteTo.ADMIN
        assert result.requires_human_review is True
        assert result.suggested_response == FALLBACK_RESPONSES["es"]
        assert result.source == SOURCE_FALLBACK

    def test_fallback_language(self):
        assert fallback_classification("en").suggested_response == FALLBACK_RESPONSES["en"]
        assert fallback_classification("pt").suggested_response == FALLBACK_RESPONSES["es"]


class TestLLMClassifier:
    async def test_valid_response(self):
        llm = _llm(response=json.dumps(VALID))
        classifier = LLMClassifier(llm)

        result = await classifier.classify("Se rompió la tubería", "renter", "es")

        assert result.intent == "maintenance_request"
        assert result.source == SOURCE_AI
        _, kwargs = llm.generate.call_args
        assert kwargs["context"]["json_output"] is True

    async def test_invalid_output_falls_back(self):
        classifier = LLMClassifier(_llm(response="I cannot help with that"))

        result = await classifier.classify("hola", "owner", "es")

        assert result.source == SOURCE_FALLBACK

    async def test_llm_error_falls_back(self):
        classifier = LLMClassifier(_llm(side_effect=LLMError("quota exceeded")))

        result = await classifier.classify("hola", "owner", "en")

        assert result.source == SOURCE_FALLBACK
        assert result.suggested_response == FALLBACK_RESPONSES["en"]

    async def test_timeout_falls_back_without_retry(self):
        async def slow(*args, **kwargs):
            await asyncio.sleep(1)
            return json.dumps(VALID)

        llm = _llm(side_effect=slow)
        classifier = LLMClassifier(llm, timeout_seconds=0.01)

        result = await classifier.classify("hola", "owner", "es")

        assert result.source == SOURCE_FALLBACK
        assert llm.generate.await_count == 1


class TestPrompt:
    def test_prompt_includes_message_role_and_language(self):
        prompt = build_classification_prompt("Hay ruido en el 3A", "renter", "es")

        assert "Hay ruido en el 3A" in prompt
        assert "renter" in prompt
        assert "routeTo" in prompt

    def test_prompt_includes_building_knowledge(self):
        context = BuildingPromptContext(
            building_name="Condominio Vista Mar",
            knowledge=(KnowledgeSnippet(question="Horario piscina?", answer="8am a 10pm", category="amenities"),),
        )

        prompt = build_classification_prompt("A qué hora abre la piscina?", "owner", "es", context)

        assert "Condominio Vista Mar" in prompt
        assert "8am a 10pm" in prompt
