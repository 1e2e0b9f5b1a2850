# inventory/services/stock_ledger.py

"""
STOCK LEDGER (SINGLE WRITER OF Product.stock_current)

Rules:
- Runs inside the caller's transaction; holds no state of its own.
- Product rows are locked with SELECT ... FOR UPDATE in primary-key order
  so two transactions touching overlapping products queue instead of
  deadlocking.
- apply_delta is a conditional UPDATE: the database re-checks the bound in
  the same statement, so stock can never go below zero (or above the
  configured cap) even if a caller skipped the oversell guard.
- Every applied delta writes one immutable StockMovement row.
"""

from __future__ import annotations

import logging

from django.db.models import F
from django.utils import timezone

from inventory.models import StockMovement
from inventory.services.exceptions import IntegrityError, NotFoundError, ValidationError
from inventory.services.payloads import ledger_limit
from products.models import Product

logger = logging.getLogger("ledger")


def lock_products(product_ids) -> dict:
    """
    Lock the given product rows (ascending pk) and return {id: Product}.
    Missing ids are simply absent from the result.
    """
    ids = list(set(product_ids))
    if not ids:
        return {}

    rows = (
        Product.objects.select_for_update()
        .filter(pk__in=ids)
        .order_by("pk")
    )
    return {p.pk: p for p in rows}


def available_stock(product_id) -> int:
    qty = (
        Product.objects.filter(pk=product_id)
        .values_list("stock_current", flat=True)
        .first()
    )
    if qty is None:
        raise NotFoundError(
            "Product not found.",
            details={"entity": "product", "ids": [str(product_id)]},
        )
    return int(qty)


def apply_delta(*, product_id, delta: int, reason: str, reference: str, user=None) -> int:
    """
    stock_current += delta, atomically and bounded.

    Returns the new stock quantity.

    Raises:
    - NotFoundError   if the product does not exist
    - IntegrityError  reason NEGATIVE_STOCK when the result would be < 0
    - IntegrityError  reason STOCK_LIMIT_EXCEEDED when the result would
                      exceed LEDGER["MAX_STOCK"]; sale reversals only
                      return stock that was taken and are never capped
    """
    if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
        raise ValidationError(
            "Stock delta must be a non-zero integer.",
            details={"field": "delta", "value": str(delta)},
        )

    max_stock = int(ledger_limit("MAX_STOCK"))

    qs = Product.objects.filter(pk=product_id)
    if delta < 0:
        qs = qs.filter(stock_current__gte=-delta)
    elif reason != StockMovement.Reason.SALE_REVERSAL:
        qs = qs.filter(stock_current__lte=max_stock - delta)

    updated = qs.update(
        stock_current=F("stock_current") + delta,
        updated_at=timezone.now(),
    )

    if updated == 0:
        current = (
            Product.objects.filter(pk=product_id)
            .values_list("stock_current", flat=True)
            .first()
        )
        if current is None:
            raise NotFoundError(
                "Product not found.",
                details={"entity": "product", "ids": [str(product_id)]},
            )

        failure = "NEGATIVE_STOCK" if delta < 0 else "STOCK_LIMIT_EXCEEDED"
        logger.warning(
            "Stock delta rejected",
            extra={
                "product_id": str(product_id),
                "delta": delta,
                "stock_current": current,
                "reason": failure,
                "reference": reference,
            },
        )
        raise IntegrityError(
            "Stock change would leave the product outside its allowed range.",
            details={
                "reason": failure,
                "product_id": str(product_id),
                "stock_current": int(current),
                "delta": delta,
                "max_stock": max_stock,
            },
        )

    new_qty = available_stock(product_id)

    StockMovement.objects.create(
        product_id=product_id,
        quantity_delta=delta,
        reason=reason,
        stock_after=new_qty,
        reference=reference,
        performed_by=user,
    )

    logger.debug(
        "Stock delta applied",
        extra={
            "product_id": str(product_id),
            "delta": delta,
            "stock_after": new_qty,
            "reason": reason,
            "reference": reference,
        },
    )
    return new_qty
