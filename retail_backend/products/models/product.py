# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q


class Product(models.Model):
    """
    Represents a sellable / purchasable product.

    STOCK MODEL (IMPORTANT):
    - stock_current is the single on-hand quantity for the product
    - It is seeded once at creation (reference-data CRUD)
    - Afterwards ONLY inventory.services.stock_ledger.apply_delta writes it,
      through a conditional UPDATE that the database re-checks
    - stock_min / stock_max are advisory thresholds (warnings, never blocks)
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)

    stock_current = models.IntegerField(default=0)
    stock_min = models.PositiveIntegerField(default=0)
    stock_max = models.PositiveIntegerField(default=999_999)

    cost_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    sale_price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["sku"], name="products_pr_sku_idx"),
            models.Index(fields=["name"], name="products_pr_name_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(stock_current__gte=0),
                name="product_stock_current_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(stock_min__lte=F("stock_max")),
                name="product_stock_min_lte_max",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.stock_current is None or int(self.stock_current) < 0:
            raise ValidationError("stock_current cannot be negative")

        if int(self.stock_min or 0) > int(self.stock_max or 0):
            raise ValidationError("stock_min cannot exceed stock_max")

        if self.sale_price is not None and Decimal(self.sale_price) < 0:
            raise ValidationError("sale_price cannot be negative")

        if self.cost_price is not None and Decimal(self.cost_price) < 0:
            raise ValidationError("cost_price cannot be negative")

    def save(self, *args, **kwargs):
        # Stock on an existing row moves only through the stock ledger.
        if not self._state.adding:
            update_fields = kwargs.get("update_fields")
            if update_fields is None or "stock_current" in update_fields:
                persisted = (
                    Product.objects.filter(pk=self.pk)
                    .values_list("stock_current", flat=True)
                    .first()
                )
                if persisted is not None and persisted != self.stock_current:
                    raise ValidationError(
                        "stock_current can only change through the stock ledger"
                    )

        super().save(*args, **kwargs)

    @property
    def is_low_stock(self) -> bool:
        return int(self.stock_current) < int(self.stock_min)
