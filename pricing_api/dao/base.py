"""
Base Data Access Object (DAO) class.

WHY: The DAO pattern separates database operations from business logic,
making the codebase more testable and keeping SQLAlchemy out of the
calculators and routes.
"""

from typing import Generic, TypeVar, Type, Optional, Any
from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from pricing_api.models.base import Base

# Type variable for model class
ModelType = TypeVar("ModelType", bound=Base)


class BaseDAO(Generic[ModelType]):
    """
    Base Data Access Object providing CRUD operations for all models.

    WHY: Using generics allows type-safe reuse across the proposal, user,
    settings and price table models.

    Type Parameters:
        ModelType: The SQLAlchemy model class this DAO manages
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Initialize DAO with model class and database session.

        Args:
            model: The SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    def _filtered(self, query, filters: dict):
        for field, value in filters.items():
            if hasattr(self.model, field):
                query = query.where(getattr(self.model, field) == value)
        return query

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Create a new record.

        Args:
            **kwargs: Field values for the new record

        Returns:
            The created model instance with database-generated fields populated

        Raises:
            IntegrityError: If unique constraints are violated
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()  # Flush to get auto-generated fields
        await self.session.refresh(instance)
        return instance

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """
        Retrieve a single record by primary key.

        Returns:
            The model instance if found, None otherwise
        """
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_by_field(self, field_name: str, value: Any) -> Optional[ModelType]:
        """
        Retrieve a single record by any field.

        Raises:
            AttributeError: If field_name doesn't exist on the model
        """
        if not hasattr(self.model, field_name):
            raise AttributeError(f"{self.model.__name__} has no field '{field_name}'")

        result = await self.session.execute(
            select(self.model).where(getattr(self.model, field_name) == value)
        )
        return result.scalar_one_or_none()

    async def update(self, id: int, **kwargs: Any) -> Optional[ModelType]:
        """
        Update an existing record.

        WHY: Updating through the ORM instance keeps column defaults such as
        onupdate timestamps and JSON serialization in one place.

        Args:
            id: Primary key of the record to update
            **kwargs: Fields to update

        Returns:
            Updated model instance if found, None otherwise
        """
        instance = await self.get_by_id(id)
        if instance is None:
            return None

        for field, value in kwargs.items():
            setattr(instance, field, value)

        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, id: int) -> bool:
        """
        Delete a record by primary key.

        Returns:
            True if a record was deleted, False if not found
        """
        result = await self.session.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0

    async def count(self, **filters: Any) -> int:
        """Count records matching filters."""
        query = self._filtered(select(func.count()).select_from(self.model), filters)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def exists(self, **filters: Any) -> bool:
        """
        Check if any records matching filters exist.

        WHY: Stops at the first match instead of counting.
        """
        query = self._filtered(select(self.model.id), filters).limit(1)
        result = await self.session.execute(query)
        return result.scalar_one_or_none() is not None
