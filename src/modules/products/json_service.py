"""JSON façade over ``ProductService``.

Every input and output is a JSON document: request bodies are parsed
into the Pydantic DTOs and results are rendered pretty-printed with
``null`` fields omitted.  The façade only talks to the service's typed
API; domain errors propagate unchanged, and a payload that is not valid
JSON (or has the wrong types) is reported as ``InvalidProductData``.
"""

from __future__ import annotations

from typing import Iterable, Optional, Type, TypeVar

import structlog
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from modules.products.dtos import (
    CreateProductDTO,
    OperationResultDTO,
    ProductFilterDTO,
    ProductOutputDTO,
    ProductStatisticsDTO,
    UpdateProductDTO,
)
from modules.products.exceptions import InvalidProductData
from modules.products.models import Product
from modules.products.services import ProductService

logger = structlog.get_logger(__name__)

DTO = TypeVar("DTO", bound=BaseModel)

_INDENT = 2
_product_list = TypeAdapter(list[ProductOutputDTO])


class ProductJsonService:
    """JSON-in / JSON-out wrapper around a ``ProductService``."""

    def __init__(self, service: ProductService) -> None:
        self._service = service

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_product(self, create_json: str) -> str:
        dto = _parse(create_json, CreateProductDTO)
        return _render_product(self._service.create_product(dto))

    def find_product_by_id(self, id: Optional[int]) -> Optional[str]:
        """Return the product as JSON, or ``None`` when it does not exist."""
        product = self._service.find_product_by_id(id)
        if product is None:
            return None
        return _render_product(product)

    def find_all_products(self) -> str:
        return _render_products(self._service.find_all_products())

    def update_product(self, id: Optional[int], update_json: str) -> str:
        dto = _parse(update_json, UpdateProductDTO)
        return _render_product(self._service.update_product(id, dto))

    def delete_product(self, id: Optional[int]) -> str:
        self._service.delete_product(id)
        result = OperationResultDTO(
            success=True, message="Product deleted successfully.", id=id
        )
        return _render(result)

    # ------------------------------------------------------------------
    # Searches
    # ------------------------------------------------------------------

    def find_products_with_filters(self, filter_json: str) -> str:
        dto = _parse(filter_json, ProductFilterDTO)
        return _render_products(self._service.find_products_with_filters(dto))

    def find_products_by_name(self, name: Optional[str]) -> str:
        return _render_products(self._service.find_products_by_name(name))

    def find_products_by_status(self, status: Optional[bool]) -> str:
        return _render_products(self._service.find_products_by_status(status))

    def find_products_by_price_range(
        self, min_price: Optional[float], max_price: Optional[float]
    ) -> str:
        return _render_products(
            self._service.find_products_by_price_range(min_price, max_price)
        )

    # ------------------------------------------------------------------
    # Business operations
    # ------------------------------------------------------------------

    def activate_product(self, id: Optional[int]) -> str:
        return _render_product(self._service.activate_product(id))

    def deactivate_product(self, id: Optional[int]) -> str:
        return _render_product(self._service.deactivate_product(id))

    def update_product_price(self, id: Optional[int], new_price: Optional[float]) -> str:
        return _render_product(self._service.update_product_price(id, new_price))

    def apply_discount(self, filter_json: str, percentage: Optional[float]) -> str:
        dto = _parse(filter_json, ProductFilterDTO)
        affected = self._service.apply_discount(dto, percentage)
        result = OperationResultDTO(
            success=True, message=f"Discount applied to {affected} products."
        )
        return _render(result)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_statistics(self) -> str:
        return _render(build_statistics(self._service))


def build_statistics(service: ProductService) -> ProductStatisticsDTO:
    """Collect the catalog statistics exposed by the façade and the API."""
    return ProductStatisticsDTO(
        total_products=service.count_products(),
        active_products=service.count_active_products(),
        inactive_products=service.count_inactive_products(),
        total_stock_value=service.calculate_total_stock_value(),
        most_expensive_product=_output(service.find_most_expensive_product()),
        cheapest_product=_output(service.find_cheapest_product()),
    )


# ---------------------------------------------------------------------------
# (De)serialisation helpers
# ---------------------------------------------------------------------------


def _parse(payload: Optional[str], model: Type[DTO]) -> DTO:
    if payload is None or not payload.strip():
        return model()
    try:
        return model.model_validate_json(payload)
    except PydanticValidationError as exc:
        logger.warning(
            "product_json.invalid_payload",
            model=model.__name__,
            errors=exc.error_count(),
        )
        raise InvalidProductData(f"Invalid {model.__name__} payload: {exc}") from exc


def _output(product: Optional[Product]) -> Optional[ProductOutputDTO]:
    return ProductOutputDTO.from_entity(product) if product is not None else None


def _render(model: BaseModel) -> str:
    return model.model_dump_json(indent=_INDENT, by_alias=True, exclude_none=True)


def _render_product(product: Product) -> str:
    return _render(ProductOutputDTO.from_entity(product))


def _render_products(products: Iterable[Product]) -> str:
    payload = [ProductOutputDTO.from_entity(product) for product in products]
    return _product_list.dump_json(
        payload, indent=_INDENT, by_alias=True, exclude_none=True
    ).decode()
