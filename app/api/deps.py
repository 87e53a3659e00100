"""FastAPI dependencies for the intake pipeline's collaborators.

The classifier and dispatcher are built once in the application lifespan
and kept on ``app.state``; tests swap them through dependency overrides.
"""

from fastapi import Request

from app.domain.services.classification_service import Classifier
from app.domain.services.outbound_dispatcher import OutboundDispatcher
from app.infrastructure.sendgrid_client import SendGridClient, get_sendgrid_client


def get_classifier(request: Request) -> Classifier:
    """Process-wide classifier."""
    return request.app.state.classifier


def get_dispatcher(request: Request) -> OutboundDispatcher:
    """Process-wide outbound dispatcher."""
    return request.app.state.dispatcher


def get_email_client() -> SendGridClient | None:
    """SendGrid client, or None when email isn't configured."""
    return get_sendgrid_client()
