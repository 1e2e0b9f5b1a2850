"""
======================================================
PATH: products/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Product

- stock_current is guarded by a non-negative CHECK constraint
- stock_min <= stock_max is enforced at the database level
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("sku", models.CharField(db_index=True, max_length=128, unique=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("stock_current", models.IntegerField(default=0)),
                ("stock_min", models.PositiveIntegerField(default=0)),
                ("stock_max", models.PositiveIntegerField(default=999999)),
                (
                    "cost_price",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=12
                    ),
                ),
                (
                    "sale_price",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=12
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["sku"], name="products_pr_sku_idx"),
                    models.Index(fields=["name"], name="products_pr_name_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(stock_current__gte=0),
                        name="product_stock_current_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(stock_min__lte=models.F("stock_max")),
                        name="product_stock_min_lte_max",
                    ),
                ],
            },
        ),
    ]
