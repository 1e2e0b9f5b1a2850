# inventory/services/oversell_guard.py

"""
OVERSELL GUARD

Decides, before any stock is written, whether a requested allocation fits.

- Quantities are aggregated per product (a product listed twice counts once
  with the summed quantity).
- available = locked stock_current + prior_allocation
  (prior_allocation is what the version being replaced already holds, so an
  edit that keeps or lowers a quantity never fails spuriously).
- ALL shortfalls are collected and reported together; nothing is applied
  when any product is short.

Must run against rows locked by stock_ledger.lock_products.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from inventory.services.exceptions import InsufficientStockError

logger = logging.getLogger("ledger")


def aggregate_quantities(lines) -> dict:
    """{product_id: total quantity} over normalized lines."""
    totals = defaultdict(int)
    for line in lines:
        totals[line["product_id"]] += int(line["quantity"])
    return dict(totals)


def check_availability(requested: dict, products: dict, prior_allocation: dict | None = None) -> None:
    prior = prior_allocation or {}

    shortfalls = []
    for product_id in sorted(requested, key=str):
        qty = int(requested[product_id])
        product = products[product_id]
        available = int(product.stock_current) + int(prior.get(product_id, 0))

        if qty > available:
            shortfalls.append(
                {
                    "product_id": str(product_id),
                    "name": product.name,
                    "requested": qty,
                    "available": available,
                    "deficit": qty - available,
                }
            )

    if shortfalls:
        logger.warning(
            "Oversell guard rejected allocation",
            extra={"shortfalls": shortfalls},
        )
        raise InsufficientStockError(
            "Not enough stock for one or more products.",
            items=shortfalls,
        )
