"""Knowledge base repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.persistence.models.knowledge_base import KnowledgeBaseEntry
from app.persistence.repositories.base import BaseRepository


class KnowledgeBaseRepository(BaseRepository[KnowledgeBaseEntry]):
    """Repository for KnowledgeBaseEntry entities."""

    def __init__(self, session: AsyncSession):
        """Initialize knowledge base repository."""
        super().__init__(KnowledgeBaseEntry, session)

    async def list_active(self, building_id: int, limit: int = 20) -> list[KnowledgeBaseEntry]:
        """Active entries, highest priority first."""
        stmt = (
            select(KnowledgeBaseEntry)
            .where(
                KnowledgeBaseEntry.building_id == building_id,
                KnowledgeBaseEntry.active.is_(True),
            )
            .order_by(KnowledgeBaseEntry.priority.desc(), KnowledgeBaseEntry.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
