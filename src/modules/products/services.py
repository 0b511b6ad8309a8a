"""Product service layer (Use Cases).

Orchestrates business logic for the Product entity, delegating
persistence to the injected ``IProductRepository``.

Business rules enforced here:
- Name is required, trimmed and at most 255 characters.
- Name is unique among products (case-insensitive substring look-up,
  excluding the product being updated).
- 0 <= price <= 999,999.99 and 0 <= quantity <= 999,999 on every write.
- A single price change cannot go below 50% of the current price.
- Discounts are between 0 and 100 percent.

The service never opens a transaction of its own: each repository call
is atomic, so ``apply_discount`` performs one independent update per
matched product.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Callable, List, Optional

import structlog

from modules.products.constants import (
    MAX_NAME_LENGTH,
    MAX_PRICE,
    MAX_QUANTITY,
    MIN_PRICE_RATIO,
    SORT_ASCENDING,
    SORT_DESCENDING,
    SORTABLE_FIELDS,
)
from modules.products.exceptions import (
    InvalidProductData,
    PriceDropTooLarge,
    ProductAlreadyExists,
    ProductNotFound,
)
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.products.dtos import (
        CreateProductDTO,
        ProductFilterDTO,
        UpdateProductDTO,
    )
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_product(self, dto: Optional[CreateProductDTO]) -> Product:
        """Create a new product after validation and uniqueness checks.

        Raises:
            InvalidProductData: bad name, price or quantity.
            ProductAlreadyExists: the name collides with another product.
        """
        if dto is None:
            raise InvalidProductData("Product data is required.")

        name = self._validate_name(dto.name)
        self._validate_price(dto.price)
        if dto.quantity is not None:
            self._validate_quantity(dto.quantity)

        if self.product_name_exists(name):
            logger.warning("product.duplicate_name", name=name)
            raise ProductAlreadyExists(f"A product named '{name}' already exists.")

        product = Product(
            name=name,
            price=dto.price,
            quantity=dto.quantity if dto.quantity is not None else 0,
            status=dto.status if dto.status is not None else True,
        )
        product = self._repo.save(product)
        logger.info("product.created", product_id=product.id, name=product.name)
        return product

    def update_product(
        self, id: Optional[int], dto: Optional[UpdateProductDTO]
    ) -> Product:
        """Apply a partial update: only the supplied fields are overwritten.

        Raises:
            InvalidProductData: bad id, empty request or invalid field value.
            ProductAlreadyExists: the new name collides with another product.
            ProductNotFound: no product with this id.
        """
        self._require_positive_id(id)
        if dto is None or not dto.has_any_field():
            raise InvalidProductData("At least one field must be provided for update.")

        product = self._repo.find_by_id(id)
        if product is None:
            raise ProductNotFound(id)

        fields = dto.provided_fields()
        changes = {}

        if "name" in fields:
            name = self._validate_name(dto.name)
            if self.product_name_exists(name, exclude_id=id):
                logger.warning("product.duplicate_name", name=name, product_id=id)
                raise ProductAlreadyExists(
                    f"Another product named '{name}' already exists."
                )
            changes["name"] = name
        if "price" in fields:
            self._validate_price(dto.price)
            changes["price"] = dto.price
        if "quantity" in fields:
            if dto.quantity is None:
                raise InvalidProductData("Quantity cannot be null.")
            self._validate_quantity(dto.quantity)
            changes["quantity"] = dto.quantity
        if "status" in fields:
            if dto.status is None:
                raise InvalidProductData("Status cannot be null.")
            changes["status"] = dto.status

        for field, value in changes.items():
            setattr(product, field, value)

        product = self._repo.update(product)
        logger.info("product.updated", product_id=id, fields=sorted(changes))
        return product

    def delete_product(self, id: Optional[int]) -> None:
        """Remove a product.

        Raises:
            InvalidProductData: id missing or not positive.
            ProductNotFound: no product with this id.
        """
        self._require_positive_id(id)
        if not self._repo.exists_by_id(id):
            raise ProductNotFound(id)
        self._repo.delete_by_id(id)
        logger.info("product.deleted", product_id=id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_product_by_id(self, id: Optional[int]) -> Optional[Product]:
        if id is None or id <= 0:
            return None
        return self._repo.find_by_id(id)

    def find_all_products(self) -> List[Product]:
        return self._repo.find_all()

    def find_products_with_filters(
        self, filter_dto: Optional[ProductFilterDTO]
    ) -> List[Product]:
        """Return the products matching every supplied criterion.

        With no criteria this is ``find_all_products()``.  Name is a
        case-insensitive substring match; price and quantity bounds are
        inclusive; products without a price never match a filtered search.
        """
        products = self.find_all_products()
        if filter_dto is None or not filter_dto.has_any_filter():
            return products

        return [
            product
            for product in products
            if _matches_name(product, filter_dto.name)
            and _matches_price(product, filter_dto.min_price, filter_dto.max_price)
            and _matches_quantity(
                product, filter_dto.min_quantity, filter_dto.max_quantity
            )
            and _matches_status(product, filter_dto.status)
        ]

    def find_products_by_name(self, name: Optional[str]) -> List[Product]:
        if name is None or not name.strip():
            return []
        return self._repo.find_by_name(name.strip())

    def find_products_by_status(self, status: Optional[bool]) -> List[Product]:
        return self._repo.find_by_status(status)

    def find_products_by_price_range(
        self, min_price: Optional[float], max_price: Optional[float]
    ) -> List[Product]:
        return self._repo.find_by_price_range(min_price, max_price)

    # ------------------------------------------------------------------
    # Business operations
    # ------------------------------------------------------------------

    def activate_product(self, id: Optional[int]) -> Product:
        return self._set_status(id, True)

    def deactivate_product(self, id: Optional[int]) -> Product:
        return self._set_status(id, False)

    def update_product_price(self, id: Optional[int], new_price: Optional[float]) -> Product:
        """Change a product's price.

        Raises:
            InvalidProductData: price out of bounds.
            ProductNotFound: no product with this id.
            PriceDropTooLarge: new price below 50% of the current one.
        """
        self._validate_price(new_price)
        product = self._get_or_fail(id)

        old_price = product.price
        if old_price is not None and new_price < old_price * MIN_PRICE_RATIO:
            raise PriceDropTooLarge(
                f"New price ({new_price:.2f}) cannot be less than 50% "
                f"of the current price ({old_price:.2f})."
            )

        product.price = new_price
        product = self._repo.update(product)
        logger.info(
            "product.price_changed",
            product_id=product.id,
            old_price=old_price,
            new_price=new_price,
        )
        return product

    def apply_discount(
        self, filter_dto: Optional[ProductFilterDTO], percentage: Optional[float]
    ) -> int:
        """Discount every matching product with a positive price.

        Each product is updated in its own transaction.  Returns the number
        of products actually updated; products without a positive price are
        skipped and not counted.
        """
        if (
            percentage is None
            or not math.isfinite(percentage)
            or percentage < 0
            or percentage > 100
        ):
            raise InvalidProductData("Discount percentage must be between 0 and 100.")

        updated = 0
        for product in self.find_products_with_filters(filter_dto):
            if product.price is None or product.price <= 0:
                continue
            new_price = product.price * (1 - percentage / 100)
            self._validate_price(new_price)
            product.price = new_price
            self._repo.update(product)
            updated += 1

        logger.info(
            "product.discount_applied",
            percentage=percentage,
            updated=updated,
        )
        return updated

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def count_products(self) -> int:
        return self._repo.count()

    def count_active_products(self) -> int:
        return len(self._repo.find_by_status(True))

    def count_inactive_products(self) -> int:
        return len(self._repo.find_by_status(False))

    def calculate_total_stock_value(self) -> float:
        return sum(
            (
                product.price * product.quantity
                for product in self.find_all_products()
                if product.price is not None and product.quantity > 0
            ),
            0.0,
        )

    def find_most_expensive_product(self) -> Optional[Product]:
        return max(self._priced_products(), key=_price_of, default=None)

    def find_cheapest_product(self) -> Optional[Product]:
        return min(self._priced_products(), key=_price_of, default=None)

    def product_exists(self, id: Optional[int]) -> bool:
        return self._repo.exists_by_id(id)

    def product_name_exists(
        self, name: Optional[str], exclude_id: Optional[int] = None
    ) -> bool:
        """Whether any product name contains ``name`` (case-insensitive).

        When ``exclude_id`` is given, a match on that product alone does
        not count.
        """
        if name is None or not name.strip():
            return False
        matches = self._repo.find_by_name(name.strip())
        if exclude_id is None:
            return bool(matches)
        return any(product.id != exclude_id for product in matches)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_or_fail(self, id: Optional[int]) -> Product:
        product = self.find_product_by_id(id)
        if product is None:
            raise ProductNotFound(id)
        return product

    def _set_status(self, id: Optional[int], status: bool) -> Product:
        product = self._get_or_fail(id)
        product.status = status
        product = self._repo.update(product)
        logger.info("product.status_changed", product_id=product.id, status=status)
        return product

    def _priced_products(self) -> List[Product]:
        return [p for p in self.find_all_products() if p.price is not None]

    @staticmethod
    def _require_positive_id(id: Optional[int]) -> None:
        if id is None or id <= 0:
            raise InvalidProductData("Product id is required and must be positive.")

    @staticmethod
    def _validate_name(name: Optional[str]) -> str:
        if name is None or not name.strip():
            raise InvalidProductData("Product name is required.")
        name = name.strip()
        if len(name) > MAX_NAME_LENGTH:
            raise InvalidProductData(
                f"Product name must be at most {MAX_NAME_LENGTH} characters."
            )
        return name

    @staticmethod
    def _validate_price(price: Optional[float]) -> None:
        if price is None:
            raise InvalidProductData("Price is required.")
        if not math.isfinite(price):
            raise InvalidProductData("Price must be a finite number.")
        if price < 0:
            raise InvalidProductData("Price must be greater than or equal to zero.")
        if price > MAX_PRICE:
            raise InvalidProductData(f"Price must not exceed {MAX_PRICE:,.2f}.")

    @staticmethod
    def _validate_quantity(quantity: int) -> None:
        if quantity < 0:
            raise InvalidProductData("Quantity must be greater than or equal to zero.")
        if quantity > MAX_QUANTITY:
            raise InvalidProductData(f"Quantity must not exceed {MAX_QUANTITY:,}.")


# ---------------------------------------------------------------------------
# Filter predicates
# ---------------------------------------------------------------------------


def _price_of(product: Product) -> float:
    return product.price


def _matches_name(product: Product, name: Optional[str]) -> bool:
    if name is None or not name.strip():
        return True
    return product.name is not None and name.strip().lower() in product.name.lower()


def _matches_price(
    product: Product, min_price: Optional[float], max_price: Optional[float]
) -> bool:
    if product.price is None:
        return False
    if min_price is not None and product.price < min_price:
        return False
    if max_price is not None and product.price > max_price:
        return False
    return True


def _matches_quantity(
    product: Product, min_quantity: Optional[int], max_quantity: Optional[int]
) -> bool:
    if min_quantity is not None and product.quantity < min_quantity:
        return False
    if max_quantity is not None and product.quantity > max_quantity:
        return False
    return True


def _matches_status(product: Product, status: Optional[bool]) -> bool:
    return status is None or product.status == status


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


def sort_products(
    products: List[Product], sort_by: str, direction: Optional[str] = None
) -> List[Product]:
    """Return ``products`` ordered by ``sort_by`` (ASC unless ``direction`` is DESC).

    Records whose sort value is ``None`` come last in either direction.

    Raises:
        InvalidProductData: unknown field or direction.
    """
    field = sort_by.strip().lower()
    if field not in SORTABLE_FIELDS:
        raise InvalidProductData(
            f"Cannot sort by '{sort_by}'; expected one of {sorted(SORTABLE_FIELDS)}."
        )
    direction = (direction or SORT_ASCENDING).strip().upper()
    if direction not in (SORT_ASCENDING, SORT_DESCENDING):
        raise InvalidProductData("Sort direction must be ASC or DESC.")

    key: Callable[[Product], object]
    if field == "name":
        key = lambda p: (p.name or "").lower()  # noqa: E731
    else:
        key = lambda p: getattr(p, field)  # noqa: E731

    present = [p for p in products if getattr(p, field) is not None]
    missing = [p for p in products if getattr(p, field) is None]
    present.sort(key=key, reverse=direction == SORT_DESCENDING)
    return present + missing
