# purchases/services/purchase_orchestrator.py

"""
======================================================
PATH: purchases/services/purchase_orchestrator.py
======================================================
PURCHASE ORCHESTRATOR

Register stock intake atomically:

1) Validate payload (lines, costs, date) before any I/O
2) Resolve user + lock products (pk order)
3) Write header + lines, add stock through the stock ledger
4) Collect threshold warnings on the final stock

Edits and deletes remove stock that may already have been sold:
- delete: every line is checked first; if any product would go negative
  the whole delete is rejected with InsufficientStockError
- replace: judged on net effect (old removed, new added back), then the
  new version is applied BEFORE the old one is removed so stock never dips
  below zero mid-transaction
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from inventory.models import StockMovement
from inventory.services.atomic import ledger_atomic
from inventory.services.exceptions import NotFoundError
from inventory.services.oversell_guard import aggregate_quantities
from inventory.services.payloads import (
    lines_total,
    normalize_date,
    normalize_lines,
    parse_uuid,
)
from inventory.services.references import ensure_active, resolve_products, resolve_user
from inventory.services.reversal import (
    DeletionOutcome,
    check_purchase_reversal,
    reverse_purchase_allocation,
)
from inventory.services.stock_ledger import apply_delta
from inventory.services.threshold_monitor import collect_warnings
from purchases.models import Purchase, PurchaseItem

logger = logging.getLogger("purchases")


@dataclass
class PurchaseOutcome:
    purchase: Purchase
    lines: list = field(default_factory=list)
    warnings: list = field(default_factory=list)


def purchase_reference(purchase_id) -> str:
    return f"PURCHASE:{purchase_id}"


def _stored_allocation(purchase: Purchase) -> dict:
    allocation = {}
    for product_id, qty in purchase.items.values_list("product_id", "quantity"):
        allocation[product_id] = allocation.get(product_id, 0) + int(qty)
    return allocation


def _lock_purchase(purchase_id) -> Purchase:
    purchase = Purchase.objects.select_for_update().filter(pk=purchase_id).first()
    if purchase is None:
        raise NotFoundError(
            "Purchase not found.",
            details={"entity": "purchase", "id": str(purchase_id)},
        )
    return purchase


def _write_lines(*, purchase: Purchase, lines: list[dict], user) -> list[PurchaseItem]:
    reference = purchase_reference(purchase.id)
    items = []
    for line in lines:
        items.append(
            PurchaseItem.objects.create(
                purchase=purchase,
                product_id=line["product_id"],
                quantity=line["quantity"],
                unit_cost=line["price"],
            )
        )
        apply_delta(
            product_id=line["product_id"],
            delta=line["quantity"],
            reason=StockMovement.Reason.PURCHASE,
            reference=reference,
            user=user,
        )
    return items


@ledger_atomic
def create_purchase(*, user, lines, purchase_date=None, note: str = "") -> PurchaseOutcome:
    lines = normalize_lines(lines, price_field="unit_cost")
    purchase_date = normalize_date(purchase_date)
    total = lines_total(lines)

    user = resolve_user(user)
    requested = aggregate_quantities(lines)
    resolve_products(requested.keys())

    purchase = Purchase.objects.create(
        purchase_date=purchase_date,
        total_amount=total,
        note=(note or "").strip(),
        created_by=user,
    )
    items = _write_lines(purchase=purchase, lines=lines, user=user)

    warnings = collect_warnings(requested.keys())

    logger.info(
        "Purchase created",
        extra={
            "purchase_id": str(purchase.id),
            "total": str(total),
            "lines": len(items),
            "warnings": len(warnings),
        },
    )
    return PurchaseOutcome(purchase=purchase, lines=items, warnings=warnings)


@ledger_atomic
def replace_purchase(*, purchase_id, user, lines, purchase_date=None, note: str = "") -> PurchaseOutcome:
    lines = normalize_lines(lines, price_field="unit_cost")
    purchase_date = normalize_date(purchase_date)
    total = lines_total(lines)
    purchase_id = parse_uuid(purchase_id, field="purchase_id")

    user = resolve_user(user)
    purchase = _lock_purchase(purchase_id)

    prior = _stored_allocation(purchase)
    requested = aggregate_quantities(lines)
    touched = set(prior) | set(requested)

    products = resolve_products(touched, require_active=False)
    ensure_active(products, requested.keys())

    check_purchase_reversal(allocation=prior, products=products, incoming=requested)

    reference = purchase_reference(purchase.id)

    # New version in first, then the stored one out.
    purchase.items.all().delete()
    items = _write_lines(purchase=purchase, lines=lines, user=user)
    reverse_purchase_allocation(allocation=prior, reference=reference, user=user)

    purchase.purchase_date = purchase_date
    purchase.total_amount = total
    purchase.note = (note or "").strip()
    purchase.save(update_fields=["purchase_date", "total_amount", "note", "updated_at"])

    warnings = collect_warnings(touched)

    logger.info(
        "Purchase replaced",
        extra={
            "purchase_id": str(purchase.id),
            "total": str(total),
            "lines": len(items),
            "warnings": len(warnings),
        },
    )
    return PurchaseOutcome(purchase=purchase, lines=items, warnings=warnings)


@ledger_atomic
def delete_purchase(*, purchase_id, user) -> DeletionOutcome:
    purchase_id = parse_uuid(purchase_id, field="purchase_id")
    user = resolve_user(user)
    purchase = _lock_purchase(purchase_id)

    allocation = _stored_allocation(purchase)
    products = resolve_products(allocation.keys(), require_active=False)

    check_purchase_reversal(allocation=allocation, products=products)

    warnings = reverse_purchase_allocation(
        allocation=allocation,
        reference=purchase_reference(purchase.id),
        user=user,
    )
    purchase.delete()

    logger.info(
        "Purchase deleted",
        extra={"purchase_id": str(purchase_id), "products": len(allocation), "warnings": len(warnings)},
    )
    return DeletionOutcome(warnings=warnings)
