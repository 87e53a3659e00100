"""Repository implementations."""

from app.persistence.repositories.admin_repository import AdminNotificationTarget, AdminRepository
from app.persistence.repositories.base import BaseRepository
from app.persistence.repositories.building_repository import BuildingRepository
from app.persistence.repositories.conversation_repository import ConversationRepository
from app.persistence.repositories.knowledge_base_repository import KnowledgeBaseRepository
from app.persistence.repositories.maintenance_request_repository import MaintenanceRequestRepository
from app.persistence.repositories.message_repository import MessageRepository
from app.persistence.repositories.notification_repository import NotificationRepository
from app.persistence.repositories.resident_repository import ResidentRepository
from app.persistence.repositories.unknown_sender_repository import UnknownSenderRepository

__all__ = [
    "AdminNotificationTarget",
    "AdminRepository",
    "BaseRepository",
    "BuildingRepository",
    "ConversationRepository",
    "KnowledgeBaseRepository",
    "MaintenanceRequestRepository",
    "MessageRepository",
    "NotificationRepository",
    "ResidentRepository",
    "UnknownSenderRepository",
]
