# File: localizable/repositories/base_repository.py

from typing import Generic, TypeVar, Dict, Any, Optional, List, Type
from sqlalchemy.orm import Session
from sqlalchemy import select, func

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base repository class providing common CRUD operations for all entities using
    modern SQLAlchemy select() syntax.

    Write methods commit by default. Pass ``commit=False`` to only flush, leaving
    the surrounding unit of work to the caller.

    Attributes:
        session (Session): The SQLAlchemy session for database operations
        model (Type[T]): The SQLAlchemy model class this repository manages
    """

    def __init__(self, session: Session, model: Type[T]):
        """
        Initialize the repository with a database session and the specific model.

        Args:
            session (Session): SQLAlchemy database session
            model (Type[T]): The SQLAlchemy model class this repository manages
        """
        self.session = session
        self.model = model

    def _finish(self, commit: bool) -> None:
        if commit:
            self.session.commit()
        else:
            self.session.flush()

    def get_by_id(self, id: int) -> Optional[T]:
        """
        Retrieve an entity by its primary key ID.

        Args:
            id (int): The primary key ID of the entity

        Returns:
            Optional[T]: The entity if found, None otherwise
        """
        stmt = select(self.model).where(getattr(self.model, "id") == id)
        return self.session.execute(stmt).scalar_one_or_none()

    def list(self, skip: int = 0, limit: int = 100, **filters) -> List[T]:
        """
        Retrieve a list of entities with pagination.

        Args:
            skip (int): Number of records to skip (for pagination)
            limit (int): Maximum number of records to return
            **filters: Additional filters to apply (field=value pairs)

        Returns:
            List[T]: List of entities matching the criteria
        """
        stmt = select(self.model)

        for key, value in filters.items():
            if hasattr(self.model, key):
                stmt = stmt.where(getattr(self.model, key) == value)

        stmt = stmt.order_by(getattr(self.model, "id")).offset(skip).limit(limit)
        return list(self.session.execute(stmt).scalars().all())

    def create(self, data: Dict[str, Any], commit: bool = True) -> T:
        """
        Create a new entity.

        Args:
            data (Dict[str, Any]): Dictionary containing entity field values
            commit (bool): Commit immediately, or only flush

        Returns:
            T: The created entity
        """
        # Ensure only columns present in the model are passed to constructor
        model_columns = {c.name for c in self.model.__table__.columns}
        filtered_data = {k: v for k, v in data.items() if k in model_columns}

        entity = self.model(**filtered_data)
        self.session.add(entity)
        self._finish(commit)
        self.session.refresh(entity)
        return entity

    def update(self, id: int, data: Dict[str, Any], commit: bool = True) -> Optional[T]:
        """
        Update an existing entity.

        Args:
            id (int): The primary key ID of the entity to update
            data (Dict[str, Any]): Dictionary containing the fields to update
            commit (bool): Commit immediately, or only flush

        Returns:
            Optional[T]: The updated entity if found, None otherwise
        """
        entity = self.get_by_id(id)
        if not entity:
            return None

        for key, value in data.items():
            if key in entity.__table__.columns.keys():
                setattr(entity, key, value)

        self._finish(commit)
        self.session.refresh(entity)
        return entity

    def delete(self, id: int, commit: bool = True) -> bool:
        """
        Delete an entity by ID.

        Returns:
            bool: True if entity was deleted, False if not found
        """
        entity = self.get_by_id(id)
        if not entity:
            return False

        self.session.delete(entity)
        self._finish(commit)
        return True

    def count(self, **filters) -> int:
        """
        Count entities matching the given filters.

        Args:
            **filters: Filters to apply (field=value pairs)

        Returns:
            int: Count of matching entities
        """
        stmt = select(func.count(getattr(self.model, "id"))).select_from(self.model)

        for key, value in filters.items():
            if hasattr(self.model, key):
                stmt = stmt.where(getattr(self.model, key) == value)

        return self.session.execute(stmt).scalar_one()
