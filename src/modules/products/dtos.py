"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the interface layer (JSON façade,
DRF views, management commands) and the Service layer.  DTOs are
immutable (``frozen=True``) and only coerce types: range checks and
business rules belong to ``ProductService`` so they surface as domain
errors.

JSON keys are camelCase (``minPrice``); Python attributes are snake_case.

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: input for partial product updates.
- ``ProductFilterDTO``: optional search criteria.
- ``ProductOutputDTO``: output with all product fields.
- ``OperationResultDTO`` / ``ProductStatisticsDTO``: façade envelopes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from modules.products.models import Product


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateProductDTO(_CamelModel):
    """Immutable DTO for product creation requests.

    ``quantity`` and ``status`` are optional; the service applies their
    defaults (0 and active).
    """

    name: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None
    status: Optional[bool] = None


class UpdateProductDTO(_CamelModel):
    """Immutable DTO for partial product updates.

    Presence is tracked by Pydantic's ``model_fields_set``: a field left
    out of the constructor (or the JSON payload) is *absent* and the
    stored value is kept.  A field passed explicitly, even as ``None``,
    is *present* and goes through validation.
    """

    name: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None
    status: Optional[bool] = None

    def provided_fields(self) -> FrozenSet[str]:
        """Names of the fields explicitly supplied by the caller."""
        return frozenset(self.model_fields_set)

    def has_any_field(self) -> bool:
        return bool(self.model_fields_set)


class ProductFilterDTO(_CamelModel):
    """Immutable DTO for product searches.

    Every criterion is optional and they combine with logical AND.
    """

    name: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_quantity: Optional[int] = None
    max_quantity: Optional[int] = None
    status: Optional[bool] = None

    def has_any_filter(self) -> bool:
        return any(
            value is not None
            for value in (
                self.name,
                self.min_price,
                self.max_price,
                self.min_quantity,
                self.max_quantity,
                self.status,
            )
        )


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class ProductOutputDTO(_CamelModel):
    """Immutable DTO for product responses."""

    id: Optional[int] = None
    name: Optional[str] = None
    price: Optional[float] = None
    quantity: int = 0
    status: bool = True

    @classmethod
    def from_entity(cls, product: Product) -> ProductOutputDTO:
        """Build an output DTO from a Product model instance."""
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            quantity=product.quantity,
            status=product.status,
        )


class OperationResultDTO(_CamelModel):
    """Generic ``{success, message, id?}`` result for delete/discount."""

    success: bool
    message: str
    id: Optional[int] = None


class ProductStatisticsDTO(_CamelModel):
    """Catalog-wide statistics."""

    total_products: int
    active_products: int
    inactive_products: int
    total_stock_value: float
    most_expensive_product: Optional[ProductOutputDTO] = None
    cheapest_product: Optional[ProductOutputDTO] = None
