"""Product repository interface.

Extends ``IRepository[Product]`` with the look-ups the service needs for
name uniqueness, status/price queries and bulk maintenance.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product entity.

    Each primitive runs in its own transaction.  Reads return ``None`` or
    an empty list when nothing matches; writes raise ``ProductNotFound``
    when the target id does not exist.
    """

    @abstractmethod
    def find_first(self) -> Optional[Product]:
        """Return the product with the smallest id, or ``None``."""

    @abstractmethod
    def find_by_name(self, name: Optional[str]) -> List[Product]:
        """Case-insensitive substring search, ordered by id."""

    @abstractmethod
    def find_by_status(self, status: Optional[bool]) -> List[Product]:
        """Exact status match; ``None`` returns every product."""

    @abstractmethod
    def find_by_price_range(
        self, min_price: Optional[float], max_price: Optional[float]
    ) -> List[Product]:
        """Inclusive price range, either bound optional, ordered by price."""

    @abstractmethod
    def count(self) -> int:
        """Total number of products."""

    @abstractmethod
    def exists_by_id(self, id: Optional[int]) -> bool:
        """``True`` iff a product with this id exists."""

    @abstractmethod
    def update(self, entity: Product) -> Product:
        """Overwrite an existing product; raises if it does not exist."""

    @abstractmethod
    def delete(self, entity: Product) -> None:
        """Remove the given product by its id."""

    @abstractmethod
    def delete_all(self) -> None:
        """Remove every product in a single transaction."""
