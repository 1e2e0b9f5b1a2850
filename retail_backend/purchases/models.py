# purchases/models.py

import uuid
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from products.models.product import Product

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


User = settings.AUTH_USER_MODEL


class Purchase(models.Model):
    """
    Stock intake header.

    - Always settled at registration (no purchase credit)
    - total_amount = sum(item.subtotal), computed by the purchase orchestrator
    - Stock is mutated ONLY via the stock ledger
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    purchase_date = models.DateField(default=timezone.localdate, db_index=True)

    total_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    note = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchases_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-purchase_date", "-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=Decimal("0.00")),
                name="purchase_total_nonnegative",
            ),
        ]
        indexes = [
            models.Index(fields=["created_at"], name="purch_created_idx"),
        ]

    def __str__(self):
        return f"Purchase {self.id} | {self.total_amount}"


class PurchaseItem(models.Model):
    """
    One line of a purchase version. Never updated in place.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    purchase = models.ForeignKey(
        Purchase,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="purchase_items",
    )

    quantity = models.PositiveIntegerField()
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2)

    subtotal = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00"), editable=False
    )

    class Meta:
        ordering = ["purchase", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["purchase", "product"],
                name="purchase_item_unique_product",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="purchase_item_qty_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(unit_cost__gt=Decimal("0.00")),
                name="purchase_item_cost_positive",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("PurchaseItem records are immutable")

        self.subtotal = _money(Decimal(self.unit_cost) * Decimal(int(self.quantity)))
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product} x {self.quantity}"
