"""Base repository with building-scoped queries."""

from typing import Generic, TypeVar, Type

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


def dialect_insert(session: AsyncSession, model: Type[Base]):
    """Build an INSERT supporting ON CONFLICT for the session's dialect.

    Postgres in production, SQLite in tests. Both expose the same
    ``on_conflict_do_nothing(index_elements=..., index_where=...)`` API.
    """
    if session.get_bind().dialect.name == "postgresql":
        return postgresql.insert(model)
    return sqlite.insert(model)


class BaseRepository(Generic[ModelType]):
    """Base repository with building-scoped query methods."""

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """Initialize repository with model and session."""
        self.model = model
        self.session = session

    async def get_by_id(self, building_id: int | None, id: int) -> ModelType | None:
        """Get entity by ID, scoped to building."""
        if building_id is None:
            stmt = select(self.model).where(self.model.id == id)
        else:
            stmt = select(self.model).where(
                self.model.id == id,
                self.model.building_id == building_id
            )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, building_id: int | None, **data) -> ModelType:
        """Create new entity with building_id."""
        if building_id is not None:
            data["building_id"] = building_id
        instance = self.model(**data)
        self.session.add(instance)
        await self.session.commit()
        await self.session.refresh(instance)
        return instance
