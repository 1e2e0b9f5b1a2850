# sales/services/sale_orchestrator.py

"""
SALE ORCHESTRATOR (APPLICATION SERVICE)

Purpose:
- Turn a sale request into a persisted Sale (header, lines, stock deltas,
  initial payments) in ONE database transaction.
- Edit a sale by reversing its stored version and re-orchestrating the new
  one; delete a sale by reversing it and removing it.

Hard rules:
- Quantities are integer units; money is Decimal 2dp, computed server-side.
- The whole payload is validated before any database access.
- Every referenced product is row-locked (pk order) before the oversell
  guard runs, and stays locked until commit.
- All shortfalls are reported together; nothing is written on failure.
- Threshold warnings are advisory and are computed on the final stock.

Credit:
- sum(payments) < total  -> credit sale (PENDING), customer required
- sum(payments) == total -> PAID
- sum(payments) > total  -> rejected (no change is given)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from inventory.models import StockMovement
from inventory.services.atomic import ledger_atomic
from inventory.services.exceptions import NotFoundError, ValidationError
from inventory.services.oversell_guard import aggregate_quantities, check_availability
from inventory.services.payloads import (
    ZERO,
    lines_total,
    normalize_date,
    normalize_lines,
    normalize_payments,
    parse_uuid,
)
from inventory.services.references import (
    ensure_active,
    resolve_payment_methods,
    resolve_products,
    resolve_user,
)
from inventory.services.reversal import DeletionOutcome, reverse_sale_allocation
from inventory.services.stock_ledger import apply_delta
from inventory.services.threshold_monitor import collect_warnings
from sales.models import Sale, SaleItem, SalePayment
from sales.services.credit_settlement import (
    derive_terms,
    paid_amount,
    recompute_settlement,
    record_payments,
)
from sales.services.sale_lifecycle import ensure_not_terminal

logger = logging.getLogger("sales")


@dataclass
class SaleOutcome:
    sale: Sale
    lines: list = field(default_factory=list)
    payments: list = field(default_factory=list)
    warnings: list = field(default_factory=list)


def sale_reference(sale_id) -> str:
    return f"SALE:{sale_id}"


def _payload_paid(payments: list[dict]) -> Decimal:
    return sum((p["amount"] for p in payments), ZERO)


def _stored_allocation(sale: Sale) -> dict:
    allocation = {}
    for product_id, qty in sale.items.values_list("product_id", "quantity"):
        allocation[product_id] = allocation.get(product_id, 0) + int(qty)
    return allocation


def _write_lines(*, sale: Sale, lines: list[dict], user) -> list[SaleItem]:
    reference = sale_reference(sale.id)
    items = []
    for line in lines:
        items.append(
            SaleItem.objects.create(
                sale=sale,
                product_id=line["product_id"],
                quantity=line["quantity"],
                unit_price=line["price"],
            )
        )
        apply_delta(
            product_id=line["product_id"],
            delta=-line["quantity"],
            reason=StockMovement.Reason.SALE,
            reference=reference,
            user=user,
        )
    return items


def _lock_sale(sale_id) -> Sale:
    sale = Sale.objects.select_for_update().filter(pk=sale_id).first()
    if sale is None:
        raise NotFoundError(
            "Sale not found.",
            details={"entity": "sale", "id": str(sale_id)},
        )
    return sale


@ledger_atomic
def create_sale(
    *,
    user,
    lines,
    payments=None,
    sale_date=None,
    customer_description: str = "",
    note: str = "",
) -> SaleOutcome:
    # 1) Payload (no I/O)
    lines = normalize_lines(lines, price_field="unit_price")
    payments = normalize_payments(payments)
    sale_date = normalize_date(sale_date)
    customer_description = (customer_description or "").strip()

    total = lines_total(lines)
    terms = derive_terms(
        total=total,
        paid=_payload_paid(payments),
        customer_description=customer_description,
    )

    # 2) References (locks products)
    user = resolve_user(user)
    methods = resolve_payment_methods(p["method_id"] for p in payments)
    requested = aggregate_quantities(lines)
    products = resolve_products(requested.keys())

    # 3) Oversell guard
    check_availability(requested, products)

    # 4) Writes
    sale = Sale.objects.create(
        sale_date=sale_date,
        total_amount=total,
        is_credit=terms["is_credit"],
        customer_description=customer_description,
        balance_remaining=total,
        status=Sale.STATUS_PENDING,
        created_by=user,
        note=(note or "").strip(),
    )

    items = _write_lines(sale=sale, lines=lines, user=user)
    payment_rows = record_payments(sale=sale, payments=payments, methods=methods, user=user)
    recompute_settlement(sale)

    # 5) Advisory thresholds
    warnings = collect_warnings(requested.keys())

    logger.info(
        "Sale created",
        extra={
            "sale_id": str(sale.id),
            "total": str(sale.total_amount),
            "is_credit": sale.is_credit,
            "status": sale.status,
            "lines": len(items),
            "warnings": len(warnings),
        },
    )

    return SaleOutcome(sale=sale, lines=items, payments=payment_rows, warnings=warnings)


@ledger_atomic
def replace_sale(
    *,
    sale_id,
    user,
    lines,
    payments=None,
    sale_date=None,
    customer_description: str = "",
    note: str = "",
) -> SaleOutcome:
    """
    Replace a sale's content (lines, date, customer, note).

    - Stored payments are kept; payload payments are appended.
    - The stored version's allocation counts as available to the new one.
    - Only PENDING sales can be edited; PAID and CANCELLED are terminal.
    """
    lines = normalize_lines(lines, price_field="unit_price")
    payments = normalize_payments(payments)
    sale_date = normalize_date(sale_date)
    customer_description = (customer_description or "").strip()
    total = lines_total(lines)
    sale_id = parse_uuid(sale_id, field="sale_id")

    user = resolve_user(user)
    sale = _lock_sale(sale_id)

    ensure_not_terminal(sale=sale, action="edit")

    methods = resolve_payment_methods(p["method_id"] for p in payments)

    prior = _stored_allocation(sale)
    requested = aggregate_quantities(lines)
    touched = set(prior) | set(requested)

    products = resolve_products(touched, require_active=False)
    ensure_active(products, requested.keys())

    check_availability(requested, products, prior_allocation=prior)

    terms = derive_terms(
        total=total,
        paid=paid_amount(sale) + _payload_paid(payments),
        customer_description=customer_description,
    )

    reference = sale_reference(sale.id)

    # Stored version out, new version in.
    reverse_sale_allocation(allocation=prior, reference=reference, user=user)
    sale.items.all().delete()
    items = _write_lines(sale=sale, lines=lines, user=user)

    sale.sale_date = sale_date
    sale.total_amount = total
    sale.is_credit = terms["is_credit"]
    sale.customer_description = customer_description
    sale.note = (note or "").strip()
    sale.save(
        update_fields=[
            "sale_date",
            "total_amount",
            "is_credit",
            "customer_description",
            "note",
            "updated_at",
        ]
    )

    record_payments(sale=sale, payments=payments, methods=methods, user=user)
    recompute_settlement(sale)

    warnings = collect_warnings(touched)

    logger.info(
        "Sale replaced",
        extra={
            "sale_id": str(sale.id),
            "total": str(sale.total_amount),
            "status": sale.status,
            "lines": len(items),
            "warnings": len(warnings),
        },
    )

    return SaleOutcome(
        sale=sale,
        lines=items,
        payments=list(SalePayment.objects.filter(sale=sale)),
        warnings=warnings,
    )


@ledger_atomic
def delete_sale(*, sale_id, user) -> DeletionOutcome:
    """
    Return the sale's stock and remove it (lines cascade).

    A sale that already carries payment entries is rejected: the payment
    ledger is never deleted.
    """
    sale_id = parse_uuid(sale_id, field="sale_id")
    user = resolve_user(user)
    sale = _lock_sale(sale_id)

    if sale.payments.exists():
        raise ValidationError(
            "A sale with registered payments cannot be deleted.",
            details={"sale_id": str(sale.id), "reason": "HAS_PAYMENTS"},
        )

    allocation = _stored_allocation(sale)
    resolve_products(allocation.keys(), require_active=False)

    warnings = reverse_sale_allocation(
        allocation=allocation,
        reference=sale_reference(sale.id),
        user=user,
    )
    sale.delete()

    logger.info(
        "Sale deleted",
        extra={"sale_id": str(sale_id), "products": len(allocation), "warnings": len(warnings)},
    )
    return DeletionOutcome(warnings=warnings)
