# inventory/tests/helpers.py

"""
Shared fixtures for ledger tests (users, products, payment methods).
"""

from __future__ import annotations

import itertools
from decimal import Decimal

from django.contrib.auth import get_user_model

from products.models import Product
from sales.models import PaymentMethod

User = get_user_model()

_seq = itertools.count(1)


def make_user(*, username: str | None = None, is_active: bool = True):
    return User.objects.create_user(
        username=username or f"staff{next(_seq)}",
        password="pass",
        is_active=is_active,
    )


def make_product(
    *,
    name: str | None = None,
    stock: int = 10,
    stock_min: int = 0,
    stock_max: int = 1000,
    sale_price: str = "10.00",
    is_active: bool = True,
) -> Product:
    n = next(_seq)
    return Product.objects.create(
        sku=f"SKU-{n}",
        name=name or f"Product {n}",
        stock_current=stock,
        stock_min=stock_min,
        stock_max=stock_max,
        cost_price=Decimal("1.00"),
        sale_price=Decimal(sale_price),
        is_active=is_active,
    )


def make_method(*, name: str | None = None, is_active: bool = True) -> PaymentMethod:
    return PaymentMethod.objects.create(
        name=name or f"Method {next(_seq)}",
        is_active=is_active,
    )


def stock_of(product: Product) -> int:
    product.refresh_from_db(fields=["stock_current"])
    return product.stock_current
