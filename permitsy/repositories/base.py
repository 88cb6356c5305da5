"""Base repository class."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from loguru import logger
from pydantic import BaseModel

from permitsy.models.backend import BackendClient
from permitsy.models.query import QueryBuilder

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


def utc_now() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


def validate_rows(model: Type[M], rows: Optional[Iterable[Any]], source: str) -> List[M]:
    """
    Validate rows one by one, skipping malformed ones.

    Args:
        model: Entity class
        rows: Raw rows from the backend
        source: Table or view name used in the warning

    Returns:
        Entities for every well-formed row, in input order
    """
    entities: List[M] = []
    for row in rows or []:
        try:
            entities.append(model.model_validate(row))
        except ValueError as e:
            row_id = row.get("id") if isinstance(row, dict) else None
            logger.warning(f"Skipping malformed {source} row {row_id}: {e}")
    return entities


class BaseRepository(ABC, Generic[T]):
    """Base repository with common CRUD operations over one backend table."""

    table: str = ""

    def __init__(self, backend: BackendClient):
        """
        Initialize repository with backend client.

        Args:
            backend: Connected BackendClient instance
        """
        self.backend = backend

    def _query(self, table: Optional[str] = None) -> QueryBuilder:
        return self.backend.table(table or self.table)

    @abstractmethod
    async def get_by_id(self, id: str) -> Optional[T]:
        """
        Get entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity or None if not found
        """
        pass

    @abstractmethod
    async def get_all(self) -> List[T]:
        """
        Get all entities.

        Returns:
            List of entities
        """
        pass

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> Optional[T]:
        """
        Create new entity.

        Args:
            data: Entity data

        Returns:
            Created entity or None on failure
        """
        pass

    @abstractmethod
    async def update(self, id: str, data: Dict[str, Any]) -> Optional[T]:
        """
        Update entity.

        Args:
            id: Entity ID
            data: Update data

        Returns:
            Updated entity or None on failure
        """
        pass

    @abstractmethod
    async def delete(self, id: str) -> bool:
        """
        Delete entity.

        Args:
            id: Entity ID

        Returns:
            True if deleted, False otherwise
        """
        pass
