"""
======================================================
PATH: purchases/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Purchase, PurchaseItem
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("products", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Purchase",
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
                (
                    "purchase_date",
                    models.DateField(db_index=True, default=django.utils.timezone.localdate),
                ),
                (
                    "total_amount",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14),
                ),
                ("note", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="purchases_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-purchase_date", "-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(total_amount__gte=Decimal("0.00")),
                        name="purchase_total_nonnegative",
                    ),
                ],
                "indexes": [
                    models.Index(fields=["created_at"], name="purch_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PurchaseItem",
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
                ("quantity", models.PositiveIntegerField()),
                ("unit_cost", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "subtotal",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), editable=False, max_digits=14
                    ),
                ),
                (
                    "purchase",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="purchases.purchase",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchase_items",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["purchase", "id"],
                "constraints": [
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
                ],
            },
        ),
    ]
