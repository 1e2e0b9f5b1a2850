"""
======================================================
PATH: inventory/migrations/0001_initial.py
======================================================
MIGRATION: CREATE StockMovement (append-only stock audit trail)
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("products", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="StockMovement",
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
                ("quantity_delta", models.IntegerField()),
                (
                    "reason",
                    models.CharField(
                        choices=[
                            ("SALE", "Sale"),
                            ("SALE_REVERSAL", "Sale Reversal"),
                            ("PURCHASE", "Purchase"),
                            ("PURCHASE_REVERSAL", "Purchase Reversal"),
                        ],
                        max_length=20,
                    ),
                ),
                ("stock_after", models.PositiveIntegerField()),
                ("reference", models.CharField(db_index=True, max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to="products.product",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_movements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(
                        fields=["product", "created_at"],
                        name="inv_mv_product_created_idx",
                    ),
                    models.Index(fields=["reason"], name="inv_mv_reason_idx"),
                ],
            },
        ),
    ]
