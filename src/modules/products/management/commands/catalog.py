"""Command-line access to the product catalog.

Every sub-command goes through ``ProductJsonService`` and prints its JSON
result, e.g.::

    python manage.py catalog create '{"name": "Desk", "price": 899.0}'
    python manage.py catalog filter '{"minPrice": 100, "status": true}'
    python manage.py catalog discount '{"name": "desk"}' 10
    python manage.py catalog stats
"""

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from modules.core.exceptions import DomainError
from modules.products.json_service import ProductJsonService
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductService


def _status(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "active", "1", "yes"):
        return True
    if lowered in ("false", "inactive", "0", "no"):
        return False
    raise ValueError(value)


class Command(BaseCommand):
    help = "Create, query, update and summarise catalog products (JSON in/out)."

    def add_arguments(self, parser):
        sub = parser.add_subparsers(dest="action", required=True)

        sub.add_parser("create").add_argument("payload", help="CreateProduct JSON.")
        sub.add_parser("get").add_argument("id", type=int)
        sub.add_parser("list")

        update = sub.add_parser("update")
        update.add_argument("id", type=int)
        update.add_argument("payload", help="UpdateProduct JSON (partial).")

        sub.add_parser("delete").add_argument("id", type=int)
        sub.add_parser("filter").add_argument("payload", nargs="?", default="{}")
        sub.add_parser("search").add_argument("name")
        sub.add_parser("by-status").add_argument("status", type=_status)

        price_range = sub.add_parser("price-range")
        price_range.add_argument("--min", type=float, default=None, dest="min_price")
        price_range.add_argument("--max", type=float, default=None, dest="max_price")

        sub.add_parser("activate").add_argument("id", type=int)
        sub.add_parser("deactivate").add_argument("id", type=int)

        price = sub.add_parser("price")
        price.add_argument("id", type=int)
        price.add_argument("new_price", type=float)

        discount = sub.add_parser("discount")
        discount.add_argument("payload", help="ProductFilter JSON selecting products.")
        discount.add_argument("percentage", type=float)

        sub.add_parser("stats")

    def handle(self, *args, **options):
        facade = ProductJsonService(ProductService(repository=ProductDjangoRepository()))
        action = options["action"]

        try:
            output = self._dispatch(facade, action, options)
        except DomainError as exc:
            raise CommandError(f"{type(exc).__name__}: {exc}") from exc

        if output is None:
            raise CommandError(f"Product {options['id']} not found.")
        self.stdout.write(output)

    @staticmethod
    def _dispatch(facade: ProductJsonService, action: str, options: dict):
        if action == "create":
            return facade.create_product(options["payload"])
        if action == "get":
            return facade.find_product_by_id(options["id"])
        if action == "list":
            return facade.find_all_products()
        if action == "update":
            return facade.update_product(options["id"], options["payload"])
        if action == "delete":
            return facade.delete_product(options["id"])
        if action == "filter":
            return facade.find_products_with_filters(options["payload"])
        if action == "search":
            return facade.find_products_by_name(options["name"])
        if action == "by-status":
            return facade.find_products_by_status(options["status"])
        if action == "price-range":
            return facade.find_products_by_price_range(
                options["min_price"], options["max_price"]
            )
        if action == "activate":
            return facade.activate_product(options["id"])
        if action == "deactivate":
            return facade.deactivate_product(options["id"])
        if action == "price":
            return facade.update_product_price(options["id"], options["new_price"])
        if action == "discount":
            return facade.apply_discount(options["payload"], options["percentage"])
        if action == "stats":
            return facade.get_statistics()
        raise CommandError(f"Unknown action '{action}'.")
