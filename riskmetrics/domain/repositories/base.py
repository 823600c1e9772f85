"""Generic repository base interface.

Repository[T] is the root abstraction for entity-style data access.
Concrete implementations live in riskmetrics/infrastructure/persistence/
and are wired at the application boundary.

Design notes:
  - All methods are async to accommodate asyncpg / SQLAlchemy async.
  - T is the domain model type (never an ORM row).
  - Time-series and statistic repositories are specialised interfaces and
    do not extend this base: their records are append-only and keyed by
    date, not by a surrogate id.
  - update() and delete() are present on the base; implementations may
    leave them unsupported (NotImplementedError) when the data is owned
    by another system.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar
from uuid import UUID

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """Abstract CRUD interface for a domain entity."""

    @abstractmethod
    async def get(self, id: UUID) -> T | None:
        """Return the entity with the given primary key, or None if not found."""

    @abstractmethod
    async def list(self, limit: int = 50, offset: int = 0) -> list[T]:
        """Return a page of entities."""

    @abstractmethod
    async def create(self, entity: T) -> T:
        """Persist a new entity and return it."""

    @abstractmethod
    async def update(self, entity: T) -> T:
        """Persist changes to an existing entity and return the updated version."""

    @abstractmethod
    async def delete(self, id: UUID) -> None:
        """Remove the entity with the given primary key."""
