from __future__ import annotations

import random

from django.core.management.base import BaseCommand

from modules.products.dtos import CreateProductDTO
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductService

CATALOG = [
    ("Monitor 27in", 1299.90, True),
    ("Mechanical Keyboard", 399.90, True),
    ("Gaming Mouse", 249.90, True),
    ("Notebook 14in", 3999.00, True),
    ("Headset", 299.90, True),
    ("Office Desk", 899.00, True),
    ("Ergonomic Chair", 1499.00, True),
    ("Bookshelf", 699.00, False),
    ("A4 Paper", 29.90, True),
    ("Blue Pen", 4.90, True),
    ("Calculator", 89.90, False),
    ("LED Lamp", 59.90, True),
]


class Command(BaseCommand):
    help = "Seed the catalog with demo products (skips names the catalog already covers)."

    def add_arguments(self, parser):
        parser.add_argument("--seed", type=int, default=42, help="Random seed for quantities.")

    def handle(self, *args, **options):
        random.seed(options["seed"])
        service = ProductService(repository=ProductDjangoRepository())

        created = 0
        for name, price, active in CATALOG:
            if service.product_name_exists(name):
                continue
            service.create_product(
                CreateProductDTO(
                    name=name,
                    price=price,
                    quantity=random.randint(0, 200),
                    status=active,
                )
            )
            created += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Seed completed: created={created}, total={service.count_products()}"
            )
        )
