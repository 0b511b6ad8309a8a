"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.  Every
primitive runs inside its own ``unit_of_work`` and evaluates its
QuerySet there, so no lazy query escapes the transaction.  Look-ups
follow the Null Object pattern (``None`` / ``[]``); writes against a
missing id raise ``ProductNotFound`` and leave the store untouched.
"""

from __future__ import annotations

from typing import List, Optional

import structlog

from modules.core.db import unit_of_work
from modules.products.exceptions import InvalidProductData, ProductNotFound
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(self, entity: Product) -> Product:
        """Insert when ``entity.id`` is unset, otherwise overwrite the row."""
        is_new = entity.id is None
        with unit_of_work("product.save", product_id=entity.id):
            entity.save()
        logger.debug(
            "product.saved",
            product_id=entity.id,
            inserted=is_new,
        )
        return entity

    def update(self, entity: Product) -> Product:
        if entity is None or entity.id is None:
            raise InvalidProductData("Product and its id are required for an update.")
        if not self.exists_by_id(entity.id):
            raise ProductNotFound(entity.id)
        return self.save(entity)

    def delete_by_id(self, id: int) -> None:
        if id is None:
            raise InvalidProductData("Product id is required.")
        with unit_of_work("product.delete", product_id=id):
            deleted, _ = Product.objects.filter(pk=id).delete()
            if not deleted:
                raise ProductNotFound(id)
        logger.debug("product.deleted", product_id=id)

    def delete(self, entity: Product) -> None:
        if entity is None or entity.id is None:
            raise InvalidProductData("Product and its id are required for a delete.")
        self.delete_by_id(entity.id)

    def delete_all(self) -> None:
        with unit_of_work("product.delete_all"):
            deleted, _ = Product.objects.all().delete()
        logger.info("product.deleted_all", count=deleted)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_by_id(self, id: Optional[int]) -> Optional[Product]:
        if id is None:
            return None
        with unit_of_work("product.find_by_id", product_id=id):
            return Product.objects.filter(pk=id).first()

    def find_all(self) -> List[Product]:
        with unit_of_work("product.find_all"):
            return list(Product.objects.order_by("id"))

    def find_first(self) -> Optional[Product]:
        with unit_of_work("product.find_first"):
            return Product.objects.order_by("id").first()

    def find_by_name(self, name: Optional[str]) -> List[Product]:
        if name is None or not name.strip():
            return []
        with unit_of_work("product.find_by_name"):
            return list(
                Product.objects.filter(name__icontains=name.strip()).order_by("id")
            )

    def find_by_status(self, status: Optional[bool]) -> List[Product]:
        if status is None:
            return self.find_all()
        with unit_of_work("product.find_by_status"):
            return list(Product.objects.filter(status=status).order_by("id"))

    def find_by_price_range(
        self, min_price: Optional[float], max_price: Optional[float]
    ) -> List[Product]:
        queryset = Product.objects.all()
        if min_price is not None:
            queryset = queryset.filter(price__gte=min_price)
        if max_price is not None:
            queryset = queryset.filter(price__lte=max_price)
        with unit_of_work("product.find_by_price_range"):
            return list(queryset.order_by("price", "id"))

    def count(self) -> int:
        with unit_of_work("product.count"):
            return Product.objects.count()

    def exists_by_id(self, id: Optional[int]) -> bool:
        if id is None:
            return False
        return self.find_by_id(id) is not None
