# sales/services/credit_settlement.py

"""
CREDIT SETTLEMENT TRACKER (FIADO)

Tracks how much of a sale has been paid.

Rules:
- The SalePayment ledger is the source of truth; balance_remaining and status
  are recomputed from sum(payments.amount) after every write, never
  incremented in place.
- register_payment checks, in order:
    amount > 0                    -> ValidationError
    sale exists                   -> NotFoundError
    sale not PAID / CANCELLED     -> TerminalStateError
    method exists and is active   -> NotFoundError
    amount <= balance_remaining   -> BalanceExceededError
- The sale row is locked for the whole operation, so concurrent payments
  against the same sale serialize and can never overpay it.
- Corrections are negative entries linked to the payment they correct.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Sum

from inventory.services.atomic import ledger_atomic
from inventory.services.exceptions import (
    BalanceExceededError,
    IntegrityError,
    NotFoundError,
    ValidationError,
)
from inventory.services.payloads import parse_uuid, positive_amount
from inventory.services.references import resolve_payment_methods, resolve_user
from sales.models import Sale, SalePayment
from sales.services.sale_lifecycle import (
    ensure_not_terminal,
    status_for_balance,
    validate_transition,
)

logger = logging.getLogger("payments")

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


@dataclass
class PaymentOutcome:
    payment: SalePayment
    balance_before: Decimal
    balance_after: Decimal
    status_changed: bool


def _money(v) -> Decimal:
    return Decimal(str(v or "0")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def derive_terms(*, total: Decimal, paid: Decimal, customer_description: str) -> dict:
    """
    Credit terms of a sale version from its total and the sum of its payments.

    - paid > total       -> ValidationError (no change is given)
    - paid < total       -> credit sale; customer_description required
    - paid == total      -> fully paid
    """
    total = _money(total)
    paid = _money(paid)

    if paid > total:
        raise ValidationError(
            "Payments exceed the sale total.",
            details={"reason": "OVERPAYMENT", "total": str(total), "paid": str(paid)},
        )

    balance = _money(total - paid)
    is_credit = balance > ZERO

    if is_credit and not (customer_description or "").strip():
        raise ValidationError(
            "A credit sale requires a customer description.",
            details={"field": "customer_description", "reason": "CUSTOMER_REQUIRED"},
        )

    return {
        "is_credit": is_credit,
        "balance_remaining": balance,
        "status": status_for_balance(balance),
    }


def paid_amount(sale: Sale) -> Decimal:
    total = sale.payments.aggregate(total=Sum("amount")).get("total")
    return _money(total)


def record_payments(*, sale: Sale, payments: list[dict], methods: dict, user) -> list[SalePayment]:
    """Write normalized payment entries for a sale (no balance checks)."""
    rows = []
    for p in payments:
        rows.append(
            SalePayment.objects.create(
                sale=sale,
                method=methods[p["method_id"]],
                amount=p["amount"],
                note=p.get("note", ""),
                created_by=user,
            )
        )
    return rows


def recompute_settlement(sale: Sale) -> Sale:
    """
    Re-derive balance_remaining (and status, unless cancelled) from the
    payment ledger and persist them.
    """
    paid = paid_amount(sale)
    balance = _money(Decimal(sale.total_amount) - paid)

    if balance < ZERO:
        raise IntegrityError(
            "Payments exceed the sale total.",
            details={"sale_id": str(sale.id), "total": str(sale.total_amount), "paid": str(paid)},
        )

    sale.balance_remaining = balance
    if sale.status != Sale.STATUS_CANCELLED:
        sale.status = status_for_balance(balance)

    sale.save(update_fields=["balance_remaining", "status", "updated_at"])
    return sale


def _lock_sale(sale_id) -> Sale:
    sale = Sale.objects.select_for_update().filter(pk=sale_id).first()
    if sale is None:
        raise NotFoundError(
            "Sale not found.",
            details={"entity": "sale", "id": str(sale_id)},
        )
    return sale


@ledger_atomic
def register_payment(*, sale_id, method_id, amount, user, note: str = "") -> PaymentOutcome:
    amount = positive_amount(amount)
    sale_id = parse_uuid(sale_id, field="sale_id")
    method_id = parse_uuid(method_id, field="method_id")

    user = resolve_user(user)
    sale = _lock_sale(sale_id)

    ensure_not_terminal(sale=sale, action="register a payment")

    methods = resolve_payment_methods([method_id])

    balance_before = _money(sale.balance_remaining)
    if amount > balance_before:
        logger.warning(
            "Payment rejected: exceeds balance",
            extra={"sale_id": str(sale.id), "amount": str(amount), "balance": str(balance_before)},
        )
        raise BalanceExceededError(
            "Payment exceeds the remaining balance.",
            details={
                "sale_id": str(sale.id),
                "amount": str(amount),
                "balance_remaining": str(balance_before),
            },
        )

    status_before = sale.status

    (payment,) = record_payments(
        sale=sale,
        payments=[{"method_id": method_id, "amount": amount, "note": (note or "").strip()}],
        methods=methods,
        user=user,
    )
    recompute_settlement(sale)

    logger.info(
        "Payment registered",
        extra={
            "sale_id": str(sale.id),
            "payment_id": str(payment.id),
            "amount": str(amount),
            "balance_after": str(sale.balance_remaining),
            "status": sale.status,
        },
    )

    return PaymentOutcome(
        payment=payment,
        balance_before=balance_before,
        balance_after=_money(sale.balance_remaining),
        status_changed=sale.status != status_before,
    )


@ledger_atomic
def reverse_payment(*, payment_id, user, note: str = "") -> PaymentOutcome:
    """
    Correct a payment by appending a negative entry linked to it.

    Only while the sale is PENDING; each payment can be corrected once and
    corrections themselves cannot be corrected.
    """
    payment_id = parse_uuid(payment_id, field="payment_id")
    user = resolve_user(user)

    original = SalePayment.objects.filter(pk=payment_id).first()
    if original is None:
        raise NotFoundError(
            "Payment not found.",
            details={"entity": "payment", "id": str(payment_id)},
        )

    sale = _lock_sale(original.sale_id)
    ensure_not_terminal(sale=sale, action="reverse a payment")

    if original.is_correction:
        raise ValidationError(
            "A payment correction cannot itself be corrected.",
            details={"payment_id": str(original.id), "reason": "CORRECTION_NOT_REVERSIBLE"},
        )

    if SalePayment.objects.filter(reverses=original).exists():
        raise ValidationError(
            "This payment has already been corrected.",
            details={"payment_id": str(original.id), "reason": "ALREADY_REVERSED"},
        )

    balance_before = _money(sale.balance_remaining)

    correction = SalePayment.objects.create(
        sale=sale,
        method=original.method,
        amount=-_money(original.amount),
        note=(note or "").strip(),
        reverses=original,
        created_by=user,
    )
    recompute_settlement(sale)

    logger.info(
        "Payment reversed",
        extra={
            "sale_id": str(sale.id),
            "payment_id": str(original.id),
            "correction_id": str(correction.id),
            "balance_after": str(sale.balance_remaining),
        },
    )

    return PaymentOutcome(
        payment=correction,
        balance_before=balance_before,
        balance_after=_money(sale.balance_remaining),
        status_changed=False,
    )


@ledger_atomic
def cancel_sale(*, sale_id, user, reason: str = "") -> Sale:
    """
    Administrative PENDING -> CANCELLED transition. Status only; stock is
    not touched (delete the sale to return its stock).
    """
    sale_id = parse_uuid(sale_id, field="sale_id")
    user = resolve_user(user)
    sale = _lock_sale(sale_id)

    validate_transition(sale=sale, target_status=Sale.STATUS_CANCELLED)

    sale.status = Sale.STATUS_CANCELLED
    reason = (reason or "").strip()
    if reason:
        sale.note = f"{sale.note}\nCancelled: {reason}".strip()
    sale.save(update_fields=["status", "note", "updated_at"])

    logger.info(
        "Sale cancelled",
        extra={"sale_id": str(sale.id), "user_id": user.pk, "reason": reason},
    )
    return sale


def settlement_summary(sale: Sale) -> dict:
    """
    {total, paid, pending, percent_paid} for one sale, derived from the
    payment ledger.
    """
    total = _money(sale.total_amount)
    paid = paid_amount(sale)
    pending = _money(total - paid)

    if total > ZERO:
        percent = (paid / total * Decimal("100")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    else:
        percent = Decimal("100.00")

    return {
        "total": total,
        "paid": paid,
        "pending": pending,
        "percent_paid": percent,
    }
