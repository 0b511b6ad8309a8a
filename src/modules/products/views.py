"""Product API views.

Exposes the ``ProductService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into appropriate
HTTP status codes: validation 400, duplicate name 409, missing
product 404, store failure 503.
"""

from __future__ import annotations

from typing import Any, Mapping

import structlog
from django.http import QueryDict
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import DomainError, EntityNotFound, PersistenceError
from modules.products.dtos import CreateProductDTO, ProductFilterDTO, UpdateProductDTO
from modules.products.exceptions import InvalidProductData, ProductAlreadyExists
from modules.products.json_service import build_statistics
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer
from modules.products.services import ProductService, sort_products

logger = structlog.get_logger(__name__)


def _error_response(exc: DomainError) -> Response:
    if isinstance(exc, EntityNotFound):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, PersistenceError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(exc, ProductAlreadyExists):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({"detail": str(exc)}, status=code)


def _payload(data: Any, label: str = "Request body") -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise InvalidProductData(f"{label} must be a JSON object.")
    # QueryDict.dict() keeps the last value per key instead of a list.
    return data.dict() if isinstance(data, QueryDict) else data


def _validate(model, data: Any, label: str = "Request body"):
    payload = _payload(data, label)
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise InvalidProductData(str(exc)) from exc


def _number(body: Mapping[str, Any], field: str) -> float | None:
    value = body.get(field)
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidProductData(f"Field '{field}' must be a number.")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidProductData(f"Field '{field}' must be a number.") from exc


class ProductViewSet(GenericViewSet):
    """ViewSet for Product operations.

    Uses ``ProductService`` with ``ProductDjangoRepository`` (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    queryset = Product.objects.none()
    serializer_class = ProductSerializer
    lookup_value_regex = r"\d+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            logger.warning(
                "product_api.domain_error",
                error=type(exc).__name__,
                detail=str(exc),
            )
            return _error_response(exc)
        return super().handle_exception(exc)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/products/?name=&minPrice=&status=&sortBy=&sortDirection=

        ``sortBy`` / ``sortDirection`` order the page; without them the
        result keeps id order.
        """
        filter_dto = _validate(ProductFilterDTO, request.query_params)
        products = self._service.find_products_with_filters(filter_dto)
        sort_by = request.query_params.get("sortBy", "").strip()
        if sort_by:
            products = sort_products(
                products, sort_by, request.query_params.get("sortDirection")
            )
        page = self.paginate_queryset(products)
        if page is not None:
            return self.get_paginated_response(ProductSerializer(page, many=True).data)
        return Response(ProductSerializer(products, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        product = self._service.find_product_by_id(int(pk))
        if product is None:
            return Response(
                {"detail": "Product not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(ProductSerializer(product).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        dto = _validate(CreateProductDTO, request.data)
        product = self._service.create_product(dto)
        return Response(
            ProductSerializer(product).data, status=status.HTTP_201_CREATED
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/products/{pk}/

        Only the fields present in the body are changed.
        """
        dto = _validate(UpdateProductDTO, request.data)
        product = self._service.update_product(int(pk), dto)
        return Response(ProductSerializer(product).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/"""
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/"""
        self._service.delete_product(int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Business operations
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def activate(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/products/{pk}/activate/"""
        product = self._service.activate_product(int(pk))
        return Response(ProductSerializer(product).data)

    @action(detail=True, methods=["post"])
    def deactivate(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/products/{pk}/deactivate/"""
        product = self._service.deactivate_product(int(pk))
        return Response(ProductSerializer(product).data)

    @action(detail=True, methods=["patch"], url_path="price")
    def update_price(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/price/ with ``{"price": N}``."""
        price = _number(_payload(request.data), "price")
        product = self._service.update_product_price(int(pk), price)
        return Response(ProductSerializer(product).data)

    @action(detail=False, methods=["post"])
    def discount(self, request: Request) -> Response:
        """POST /api/v1/products/discount/

        Body: ``{"percentage": N, "filter": {...}}``.
        """
        body = _payload(request.data)
        filter_data = body.get("filter")
        filter_dto = _validate(
            ProductFilterDTO,
            filter_data if filter_data is not None else {},
            label="Field 'filter'",
        )
        percentage = _number(body, "percentage")
        affected = self._service.apply_discount(filter_dto, percentage)
        return Response(
            {
                "success": True,
                "message": f"Discount applied to {affected} products.",
                "affected": affected,
            }
        )

    @action(detail=False, methods=["get"])
    def statistics(self, request: Request) -> Response:
        """GET /api/v1/products/statistics/"""
        stats = build_statistics(self._service)
        return Response(stats.model_dump(by_alias=True, exclude_none=True))
