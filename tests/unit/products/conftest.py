"""Shared fixtures for product unit tests.

``InMemoryProductRepository`` satisfies ``IProductRepository`` without a
database.  It stores copies, so changes to a returned instance only reach
the "store" through ``save``/``update``, as with the ORM repository.
"""

from __future__ import annotations

import copy
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from modules.products.dtos import CreateProductDTO
from modules.products.exceptions import InvalidProductData, ProductNotFound
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository
from modules.products.services import ProductService


class InMemoryProductRepository(IProductRepository):
    def __init__(self) -> None:
        self._rows: Dict[int, Product] = {}
        self._next_id = 1
        self.update_calls = 0

    def _copy(self, product: Product) -> Product:
        return copy.copy(product)

    def save(self, entity: Product) -> Product:
        if entity.id is None:
            entity.id = self._next_id
            self._next_id += 1
        self._rows[entity.id] = self._copy(entity)
        return entity

    def find_by_id(self, id: Optional[int]) -> Optional[Product]:
        if id is None or id not in self._rows:
            return None
        return self._copy(self._rows[id])

    def find_all(self) -> List[Product]:
        return [self._copy(self._rows[key]) for key in sorted(self._rows)]

    def find_first(self) -> Optional[Product]:
        products = self.find_all()
        return products[0] if products else None

    def find_by_name(self, name: Optional[str]) -> List[Product]:
        if name is None or not name.strip():
            return []
        needle = name.strip().lower()
        return [p for p in self.find_all() if needle in p.name.lower()]

    def find_by_status(self, status: Optional[bool]) -> List[Product]:
        if status is None:
            return self.find_all()
        return [p for p in self.find_all() if p.status == status]

    def find_by_price_range(
        self, min_price: Optional[float], max_price: Optional[float]
    ) -> List[Product]:
        products = [
            p
            for p in self.find_all()
            if (min_price is None or (p.price is not None and p.price >= min_price))
            and (max_price is None or (p.price is not None and p.price <= max_price))
        ]
        return sorted(products, key=lambda p: (p.price is None, p.price or 0, p.id))

    def count(self) -> int:
        return len(self._rows)

    def exists_by_id(self, id: Optional[int]) -> bool:
        return id is not None and id in self._rows

    def update(self, entity: Product) -> Product:
        if entity is None or entity.id is None:
            raise InvalidProductData("Product and its id are required for an update.")
        if entity.id not in self._rows:
            raise ProductNotFound(entity.id)
        self.update_calls += 1
        return self.save(entity)

    def delete_by_id(self, id: int) -> None:
        if id not in self._rows:
            raise ProductNotFound(id)
        del self._rows[id]

    def delete(self, entity: Product) -> None:
        self.delete_by_id(entity.id)

    def delete_all(self) -> None:
        self._rows.clear()


@pytest.fixture()
def memory_repo():
    return InMemoryProductRepository()


@pytest.fixture()
def memory_service(memory_repo):
    return ProductService(repository=memory_repo)


@pytest.fixture()
def mock_repo():
    return MagicMock()


@pytest.fixture()
def service(mock_repo):
    return ProductService(repository=mock_repo)


@pytest.fixture()
def make_product(memory_service):
    """Create a product through the in-memory service."""

    def _make(name: str = "Widget", price: Optional[float] = 10.0, **overrides):
        return memory_service.create_product(
            CreateProductDTO(name=name, price=price, **overrides)
        )

    return _make
