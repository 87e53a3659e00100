"""Routing decision engine.

Pure mapping from a classification and the sender's role to the priority,
the set of recipients and the reply sent back to the resident. No I/O, no
hidden state: identical inputs always give identical decisions.
"""

from dataclasses import dataclass
from enum import Enum

from app.domain.models.classification import ClassificationResult, Intent, Priority, RouteTo

ROLE_OWNER = "owner"
ROLE_RENTER = "renter"


class Recipient(str, Enum):
    OWNER = "owner"
    RENTER = "renter"
    ADMIN = "admin"


_ACKNOWLEDGMENTS = {
    "es": (
        "Gracias por contactarnos. Tu {subject} ha sido recibida y enviada a nuestro equipo. "
        "Te responderemos lo antes posible."
    ),
    "en": (
        "Thank you for contacting us. Your {subject} has been received and forwarded to our team. "
        "We'll respond as soon as possible."
    ),
}

_SUBJECTS = {
    "es": {"maintenance": "solicitud de mantenimiento", "general": "mensaje"},
    "en": {"maintenance": "maintenance request", "general": "message"},
}


@dataclass(frozen=True)
class RoutingDecision:
    priority: Priority
    recipients: frozenset[Recipient]
    auto_reply_text: str
    requires_human_review: bool
    # True when auto_reply_text is the AI's own answer rather than the generic acknowledgment
    substantive_reply: bool
    # routeTo=both: the counterpart gets the message as an important notice
    shared_with_admin: bool = False

    @property
    def notify_admins(self) -> bool:
        return Recipient.ADMIN in self.recipients

    @property
    def forward_to(self) -> frozenset[Recipient]:
        """Resident roles the message should be forwarded to."""
        return self.recipients - {Recipient.ADMIN}


def acknowledgment_text(language: str, intent: str) -> str:
    """Generic acknowledgment sent instead of a substantive AI answer."""
    lang = language if language in _ACKNOWLEDGMENTS else "es"
    subject_key = "maintenance" if intent == Intent.MAINTENANCE_REQUEST else "general"
    return _ACKNOWLEDGMENTS[lang].format(subject=_SUBJECTS[lang][subject_key])


def _counterpart(resident_role: str) -> Recipient | None:
    if resident_role == ROLE_RENTER:
        return Recipient.OWNER
    if resident_role == ROLE_OWNER:
        return Recipient.RENTER
    return None


def decide(
    classification: ClassificationResult,
    resident_role: str,
    language: str = "es",
) -> RoutingDecision:
    """Map a classification and the sender's role to a routing decision.

    - routeTo=owner forwards only when the sender is a renter, and
      routeTo=renter only when the sender is an owner. Same-role targets
      are no-ops.
    - routeTo=both notifies the admin plus the sender's counterpart.
    - Human review or emergency priority always involves the admin and
      replaces the AI's answer with a generic acknowledgment.
    """
    route = classification.route_to
    priority = classification.priority
    review = classification.requires_human_review
    recipients: set[Recipient] = set()

    if route == RouteTo.OWNER and resident_role == ROLE_RENTER:
        recipients.add(Recipient.OWNER)
    elif route == RouteTo.RENTER and resident_role == ROLE_OWNER:
        recipients.add(Recipient.RENTER)
    elif route == RouteTo.BOTH:
        recipients.add(Recipient.ADMIN)
        counterpart = _counterpart(resident_role)
        if counterpart is not None:
            recipients.add(counterpart)
    elif route == RouteTo.ADMIN:
        recipients.add(Recipient.ADMIN)

    if review or priority == Priority.EMERGENCY:
        recipients.add(Recipient.ADMIN)

    substantive = (
        not review
        and priority != Priority.EMERGENCY
        and bool(classification.suggested_response)
    )
    if substantive:
        reply = classification.suggested_response
    else:
        reply = acknowledgment_text(language, classification.intent)

    return RoutingDecision(
        priority=priority,
        recipients=frozenset(recipients),
        auto_reply_text=reply,
        requires_human_review=review,
        substantive_reply=substantive,
        shared_with_admin=route == RouteTo.BOTH,
    )
