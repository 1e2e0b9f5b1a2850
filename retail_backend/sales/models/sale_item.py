# sales/models/sale_item.py

"""
SALE ITEM (IMMUTABLE SNAPSHOT)

One line of a sale version.

Notes:
- subtotal is always derived: quantity x unit_price
- Lines are never updated in place; editing a sale deletes the old version's
  lines and recreates them in the same transaction
"""

from __future__ import annotations

import uuid
from decimal import Decimal, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.db import models

from products.models import Product

from .sale import Sale


class SaleItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name="items",
    )

    # PROTECT: stored lines are the basis for exact stock reversal.
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="sale_items",
    )

    quantity = models.PositiveIntegerField()

    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
    )

    subtotal = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        editable=False,
    )

    class Meta:
        ordering = ["sale", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["sale", "product"], name="sale_item_unique_product"
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="sale_item_quantity_positive",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("SaleItem records are immutable")

        self.subtotal = (Decimal(self.unit_price) * Decimal(int(self.quantity))).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        )
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product} x {self.quantity}"
