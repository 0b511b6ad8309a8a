"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that all
domain-specific repository interfaces extend.  Service-layer code
depends on this abstraction, never on Django ORM directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the domain entity managed by the
    repository (e.g. ``Product``).  Every primitive is atomic on its own.
    """

    @abstractmethod
    def find_by_id(self, id: Optional[int]) -> Optional[T]:
        """Retrieve an entity by its primary key, or ``None``."""

    @abstractmethod
    def find_all(self) -> List[T]:
        """Return every entity ordered by primary key."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Insert the entity if it has no id yet, otherwise overwrite it."""

    @abstractmethod
    def delete_by_id(self, id: int) -> None:
        """Remove an entity by ID; raises if it does not exist."""
