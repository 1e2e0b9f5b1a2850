# inventory/models/stock_movement.py

"""
STOCK LEDGER AUDIT TRAIL

Immutable record of one stock delta applied by the stock ledger.

GUARANTEES:
- Append-only (no updates, no deletes)
- quantity_delta sign matches the reason
- reference is a plain string ("SALE:<id>", "PURCHASE:<id>") so the row
  survives deletion of the transaction it describes
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class StockMovement(models.Model):
    class Reason(models.TextChoices):
        SALE = "SALE", "Sale"
        SALE_REVERSAL = "SALE_REVERSAL", "Sale Reversal"
        PURCHASE = "PURCHASE", "Purchase"
        PURCHASE_REVERSAL = "PURCHASE_REVERSAL", "Purchase Reversal"

    INBOUND_REASONS = {Reason.PURCHASE, Reason.SALE_REVERSAL}
    OUTBOUND_REASONS = {Reason.SALE, Reason.PURCHASE_REVERSAL}

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="stock_movements",
    )

    quantity_delta = models.IntegerField()
    reason = models.CharField(max_length=20, choices=Reason.choices)
    stock_after = models.PositiveIntegerField()
    reference = models.CharField(max_length=64, db_index=True)

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["product", "created_at"], name="inv_mv_product_created_idx"),
            models.Index(fields=["reason"], name="inv_mv_reason_idx"),
        ]

    def __str__(self):
        return f"{self.reason} {self.quantity_delta:+d} ({self.reference})"

    def clean(self):
        if not self.quantity_delta:
            raise ValidationError("quantity_delta cannot be zero")

        if self.reason in self.INBOUND_REASONS and self.quantity_delta < 0:
            raise ValidationError(f"{self.reason} requires a positive delta")

        if self.reason in self.OUTBOUND_REASONS and self.quantity_delta > 0:
            raise ValidationError(f"{self.reason} requires a negative delta")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("StockMovement records cannot be deleted")
