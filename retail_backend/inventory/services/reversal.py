# inventory/services/reversal.py

"""
REVERSAL ENGINE

Restores the stock effect of a stored transaction version exactly.

Rules:
- Sale reversal returns stock (+qty). It is never rejected for exceeding
  stock_max; the overshoot surfaces as a STOCK_ABOVE_MAX warning.
- Purchase reversal removes stock (-qty). If any product would go negative
  the whole reversal is rejected with InsufficientStockError before
  anything is written.
- Callers invoke a reversal once per logical deletion, inside the same
  transaction that removes the stored rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from inventory.models import StockMovement
from inventory.services.oversell_guard import check_availability
from inventory.services.stock_ledger import apply_delta
from inventory.services.threshold_monitor import collect_warnings

logger = logging.getLogger("ledger")


def reverse_sale_allocation(*, allocation: dict, reference: str, user=None) -> list:
    for product_id in sorted(allocation, key=str):
        apply_delta(
            product_id=product_id,
            delta=int(allocation[product_id]),
            reason=StockMovement.Reason.SALE_REVERSAL,
            reference=reference,
            user=user,
        )

    logger.info(
        "Sale allocation reversed",
        extra={"reference": reference, "products": len(allocation)},
    )
    return collect_warnings(allocation.keys())


def check_purchase_reversal(*, allocation: dict, products: dict, incoming: dict | None = None) -> None:
    """
    Raise InsufficientStockError if removing `allocation` would drive any
    product negative. `incoming` is stock the same operation adds back
    (the replacing purchase version), so edits are judged on net effect.
    """
    check_availability(allocation, products, prior_allocation=incoming)


def reverse_purchase_allocation(*, allocation: dict, reference: str, user=None) -> list:
    for product_id in sorted(allocation, key=str):
        apply_delta(
            product_id=product_id,
            delta=-int(allocation[product_id]),
            reason=StockMovement.Reason.PURCHASE_REVERSAL,
            reference=reference,
            user=user,
        )

    logger.info(
        "Purchase allocation reversed",
        extra={"reference": reference, "products": len(allocation)},
    )
    return collect_warnings(allocation.keys())


@dataclass
class DeletionOutcome:
    warnings: list = field(default_factory=list)
