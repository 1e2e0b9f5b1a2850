# sales/models/sale.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    Represents a sale transaction (cash or credit / fiado).

    GUARANTEES:
    - total_amount = sum of line subtotals (computed server-side)
    - balance_remaining = total_amount - sum(payments.amount)
    - status PAID <=> balance_remaining == 0 (non-cancelled sales)
    - Stock is mutated ONLY via the stock ledger

    CREDIT:
    - is_credit is derived at write time: payments cover less than the total
    - a credit sale requires customer_description
    """

    STATUS_PENDING = "PENDING"
    STATUS_PAID = "PAID"
    STATUS_CANCELLED = "CANCELLED"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PAID, "Paid"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    STATUS_ENUM = {
        STATUS_PENDING: {"label": "Pending", "terminal": False, "accepts_payments": True},
        STATUS_PAID: {"label": "Paid", "terminal": True, "accepts_payments": False},
        STATUS_CANCELLED: {"label": "Cancelled", "terminal": True, "accepts_payments": False},
    }

    @classmethod
    def get_status_enum(cls):
        return cls.STATUS_ENUM

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale_date = models.DateField(default=timezone.localdate, db_index=True)

    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    is_credit = models.BooleanField(default=False)
    customer_description = models.CharField(max_length=255, blank=True, default="")

    balance_remaining = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name="sales",
        help_text="Staff member who registered the sale",
    )

    note = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-sale_date", "-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="sales_sale_created_idx"),
            models.Index(fields=["status"], name="sales_sale_status_idx"),
            models.Index(fields=["is_credit", "status"], name="sales_sale_credit_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(total_amount__gte=0),
                name="sale_total_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(balance_remaining__gte=0),
                name="sale_balance_non_negative",
            ),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.STATUS_ENUM.get(self.status, {}).get("terminal", False)

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous_status = (
                Sale.objects.filter(pk=self.pk).values_list("status", flat=True).first()
            )
            if previous_status == self.STATUS_CANCELLED:
                raise ValidationError("Sale is immutable once CANCELLED")

        super().save(*args, **kwargs)

    def __str__(self):
        return f"Sale {self.id} | {self.total_amount} | {self.status}"
