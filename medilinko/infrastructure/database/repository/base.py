"""
Base repository
Common database operations shared by all repositories
"""
from typing import Generic, TypeVar, Type, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from medilinko.infrastructure.database.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository"""

    def __init__(self, session: AsyncSession, model: Type[ModelType]):
        """
        Initialise the repository

        Args:
            session: database session
            model: ORM model class
        """
        self.session = session
        self.model = model

    async def get_by_id(self, id: str) -> Optional[ModelType]:
        """
        Fetch by ID

        Args:
            id: record ID

        Returns:
            model instance or None
        """
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def create(self, **kwargs) -> ModelType:
        """
        Create a record

        Args:
            **kwargs: model fields

        Returns:
            the created instance
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        return instance

    async def delete(self, id: str) -> bool:
        """
        Delete a record

        Args:
            id: record ID

        Returns:
            whether a record was deleted
        """
        instance = await self.get_by_id(id)
        if not instance:
            return False

        await self.session.delete(instance)
        await self.session.flush()
        return True
