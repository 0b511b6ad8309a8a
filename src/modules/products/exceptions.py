"""Product domain exceptions.

Raised by the Service Layer when business rules are violated.
The interface layer (views, JSON façade, commands) catches these and
translates them into responses.
"""

from __future__ import annotations

from modules.core.exceptions import BusinessRuleViolation, EntityNotFound


class InvalidProductData(BusinessRuleViolation):
    """Malformed or out-of-range product input."""


class ProductAlreadyExists(InvalidProductData):
    """Another product already matches the requested name."""


class PriceDropTooLarge(InvalidProductData):
    """The new price is below half of the current price."""


class ProductNotFound(EntityNotFound):
    """No product exists with the requested id."""

    def __init__(self, product_id: object) -> None:
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found.")
