"""Database models."""

from app.persistence.models.admin import AdminProfile, BuildingAdmin
from app.persistence.models.building import Building, Unit
from app.persistence.models.conversation import Conversation, Message
from app.persistence.models.knowledge_base import KnowledgeBaseEntry
from app.persistence.models.maintenance_request import MaintenanceRequest
from app.persistence.models.notification import Notification, NotificationType
from app.persistence.models.resident import Resident
from app.persistence.models.unknown_sender import UnknownSenderAttempt

__all__ = [
    "AdminProfile",
    "BuildingAdmin",
    "Building",
    "Unit",
    "Conversation",
    "Message",
    "KnowledgeBaseEntry",
    "MaintenanceRequest",
    "Notification",
    "NotificationType",
    "Resident",
    "UnknownSenderAttempt",
]
