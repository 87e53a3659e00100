"""Classification result models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Priority(str, Enum):
    """Message urgency, ordered low to emergency."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EMERGENCY = "emergency"


class RouteTo(str, Enum):
    """Who should handle a message."""

    OWNER = "owner"
    RENTER = "renter"
    ADMIN = "admin"
    BOTH = "both"


class Intent:
    """Known intents. Intent stays an open string; unknown values pass through."""

    MAINTENANCE_REQUEST = "maintenance_request"
    GENERAL_QUESTION = "general_question"
    NOISE_COMPLAINT = "noise_complaint"
    VISITOR_ACCESS = "visitor_access"
    HOA_FEE_QUESTION = "hoa_fee_question"
    AMENITY_RESERVATION = "amenity_reservation"
    DOCUMENT_REQUEST = "document_request"
    STATUS_INQUIRY = "status_inquiry"
    EMERGENCY = "emergency"
    OTHER = "other"


MAINTENANCE_CATEGORIES = (
    "plumber",
    "electrician",
    "handyman",
    "ac_technician",
    "washer_dryer_technician",
    "painter",
    "locksmith",
    "pest_control",
    "cleaning",
    "security",
    "landscaping",
    "elevator",
    "pool_maintenance",
    "other",
)

SOURCE_AI = "ai"
SOURCE_FALLBACK = "fallback"


class ClassificationResult(BaseModel):
    """Structured judgment for one inbound message.

    Field aliases follow the JSON contract the model is asked to produce
    (``routeTo``, ``suggestedResponse``, ...).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    intent: str
    priority: Priority
    route_to: RouteTo = Field(alias="routeTo")
    suggested_response: str = Field(default="", alias="suggestedResponse")
    requires_human_review: bool = Field(alias="requiresHumanReview")
    extracted_data: dict[str, Any] = Field(default_factory=dict, alias="extractedData")
    source: str = SOURCE_AI

    @field_validator("intent", mode="before")
    @classmethod
    def _normalize_intent(cls, value: Any) -> str:
        if value is None:
            return Intent.OTHER
        intent = str(value).strip().lower()
        return intent or Intent.OTHER

    @field_validator("priority", "route_to", mode="before")
    @classmethod
    def _normalize_enum(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("suggested_response", mode="before")
    @classmethod
    def _normalize_response(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("extracted_data", mode="before")
    @classmethod
    def _normalize_extracted(cls, value: Any) -> dict[str, Any]:
        return value if isinstance(value, dict) else {}

    def to_metadata(self) -> dict[str, Any]:
        """Serialize for Message.message_metadata."""
        return {
            "intent": self.intent,
            "priority": self.priority.value,
            "routeTo": self.route_to.value,
            "suggestedResponse": self.suggested_response,
            "requiresHumanReview": self.requires_human_review,
            "extractedData": self.extracted_data,
            "source": self.source,
        }
