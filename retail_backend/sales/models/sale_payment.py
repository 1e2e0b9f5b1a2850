# sales/models/sale_payment.py

"""
SALE PAYMENT LEDGER (ABONOS)

Append-only payment entries for a sale.

RULES:
- Rows are written once and never edited or individually deleted.
- A correction is a NEW row with a negative amount pointing at the payment
  it corrects through `reverses` (one correction per payment at most).
- Sale.balance_remaining is always recomputed from the sum of this ledger.
- Rows disappear only when their sale is deleted (cascade).
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class SalePayment(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        related_name="payments",
    )

    method = models.ForeignKey(
        "sales.PaymentMethod",
        on_delete=models.PROTECT,
        related_name="payments",
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    note = models.CharField(max_length=255, blank=True, default="")

    reverses = models.OneToOneField(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversal",
        help_text="Payment this entry corrects (negative amount).",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="sale_payments",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["sale", "created_at"], name="sales_pay_sale_created_idx"),
        ]

    @property
    def is_correction(self) -> bool:
        return self.reverses_id is not None

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("SalePayment records are immutable")

        if self.reverses_id is None and Decimal(self.amount) <= 0:
            raise ValidationError("Payment amount must be greater than zero")

        if self.reverses_id is not None and Decimal(self.amount) >= 0:
            raise ValidationError("A payment correction must carry a negative amount")

        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("SalePayment records cannot be deleted")

    def __str__(self):
        return f"{self.sale_id} | {self.method} | {self.amount}"
