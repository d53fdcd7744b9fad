"""Base repository for common CRUD operations."""

from __future__ import annotations

from typing import Any, Generic, Type, TypeVar
from uuid import UUID

from tortoise.models import Model

ModelType = TypeVar("ModelType", bound=Model)


class BaseRepository(Generic[ModelType]):
    """Generic repository with basic CRUD methods."""

    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, pk: UUID) -> ModelType | None:
        """Get a model instance by its primary key."""
        return await self.model.get_or_none(id=pk)

    async def all(self) -> list[ModelType]:
        return await self.model.all()

    async def filter(self, **kwargs: Any) -> list[ModelType]:
        return await self.model.filter(**kwargs)

    async def count(self, **kwargs: Any) -> int:
        return await self.model.filter(**kwargs).count()

    async def create(self, **kwargs: Any) -> ModelType:
        return await self.model.create(**kwargs)

    async def delete(self, pk: UUID) -> int:
        """Delete a model instance by its primary key."""
        return await self.model.filter(id=pk).delete()
