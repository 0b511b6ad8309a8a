"""Product model.

Business rules implemented at the service layer, not here:
- Name is unique among all products (case-insensitive).
- 0 <= price <= 999,999.99 and 0 <= quantity <= 999,999.
- Price cannot drop by more than 50% in one operation.
"""

from __future__ import annotations

from django.db import models

from modules.products.constants import MAX_NAME_LENGTH


class Product(models.Model):
    """Catalog record.

    ``id`` is assigned by the store on first insert (SQLite
    ``AUTOINCREMENT``, never reused) and stays ``None`` until then.
    ``price`` is nullable at the store level; rows without a price are
    skipped by price filters, discounts and statistics.
    """

    id = models.AutoField(primary_key=True)
    name = models.CharField(max_length=MAX_NAME_LENGTH)
    price = models.FloatField(null=True, blank=True)
    quantity = models.PositiveIntegerField(default=0)
    status = models.BooleanField(default=True)

    class Meta:
        db_table = "products"
        ordering = ["id"]

    def __str__(self) -> str:
        return f"#{self.id} - {self.name}"
