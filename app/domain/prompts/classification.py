"""Prompt for classifying inbound resident messages."""

from collections.abc import Sequence
from dataclasses import dataclass

from app.domain.models.classification import MAINTENANCE_CATEGORIES


@dataclass(frozen=True)
class KnowledgeSnippet:
    question: str
    answer: str
    category: str | None = None


@dataclass(frozen=True)
class BuildingPromptContext:
    """Building details embedded into the classification prompt."""

    building_name: str
    knowledge: Sequence[KnowledgeSnippet] = ()


_INTENT_LINES = """\
   - maintenance_request (repairs, issues in the unit or common areas)
   - general_question (rules, amenities, hours)
   - noise_complaint
   - visitor_access (guest parking, entrance codes)
   - hoa_fee_question
   - amenity_reservation (pool, gym, party room)
   - document_request (bylaws, financial statements)
   - status_inquiry (asking about the status of their own maintenance requests)
   - emergency (fire, flood, security threat)
   - other"""

_EXAMPLE = """\
{
  "intent": "maintenance_request",
  "priority": "high",
  "routeTo": "admin",
  "suggestedResponse": "Hemos recibido tu solicitud de mantenimiento. Un miembro del equipo la revisará dentro de 24 horas.",
  "requiresHumanReview": true,
  "extractedData": {"category": "plumber", "location": "kitchen", "urgency": "high"}
}"""


def _knowledge_section(knowledge: Sequence[KnowledgeSnippet]) -> str:
    if not knowledge:
        return ""
    lines = [
        f"BUILDING KNOWLEDGE BASE ({len(knowledge)} entries, use ONLY the relevant ones):",
    ]
    for idx, entry in enumerate(knowledge, start=1):
        lines.append(f"{idx}. Q: {entry.question}")
        lines.append(f"   A: {entry.answer}")
        if entry.category:
            lines.append(f"   Category: {entry.category}")
    return "\n".join(lines) + "\n"


def build_classification_prompt(
    message_body: str,
    resident_role: str,
    language: str,
    context: BuildingPromptContext | None = None,
) -> str:
    """Build the single-turn classification prompt.

    The model must answer with one bare JSON object matching
    ClassificationResult's aliases.
    """
    reply_language = "Spanish" if language == "es" else "English"
    building_name = context.building_name if context else "N/A"
    knowledge = _knowledge_section(context.knowledge) if context else ""
    categories = ", ".join(f'"{c}"' for c in MAINTENANCE_CATEGORIES)

    return f"""You are the assistant of a condominium management system.

CONTEXT:
- Resident type: {resident_role}
- Language: {language}
- Building: {building_name}
{knowledge}
MESSAGE FROM RESIDENT:
"{message_body}"

TASK: Classify this message and answer with a JSON object with these fields:

1. intent: one of
{_INTENT_LINES}

2. priority: low | medium | high | emergency
   - low/medium: general questions answered by the knowledge base
   - high: maintenance issues, urgent requests
   - emergency: fire, flood, security threats

3. routeTo: who should handle it
   - "admin": the building administration must respond
   - "owner": forward to the unit owner (sender is a renter)
   - "renter": forward to the renter (sender is an owner)
   - "both": administration and the other party of the unit

4. suggestedResponse: a short, warm reply in {reply_language} (2-3 sentences).
   If the knowledge base answers the question, answer it directly.
   For maintenance requests acknowledge and say the administration will review it.

5. requiresHumanReview: false for questions you can fully answer,
   true for maintenance, emergencies, complaints or anything needing the administration.

6. extractedData: relevant details. For maintenance requests include
   "category" (one of {categories}) and "location" when mentioned.

Respond with JSON only, no markdown, no prose. Example:
{_EXAMPLE}
"""
