"""
SALE LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Sale entities:

    PENDING -> PAID        (balance reaches zero)
    PENDING -> CANCELLED   (administrative cancellation)

PAID and CANCELLED are terminal.

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
"""

from decimal import Decimal

from inventory.services.exceptions import TerminalStateError, ValidationError
from sales.models import Sale

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Sale.STATUS_PAID,
    Sale.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Sale.STATUS_PENDING: {
        Sale.STATUS_PAID,
        Sale.STATUS_CANCELLED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def ensure_not_terminal(*, sale: Sale, action: str):
    if sale.status in TERMINAL_STATES:
        raise TerminalStateError(
            f"Sale {sale.id} is {sale.status}; cannot {action}.",
            details={"sale_id": str(sale.id), "status": sale.status, "action": action},
        )


def validate_transition(*, sale: Sale, target_status: str):
    ensure_not_terminal(sale=sale, action=f"move to {target_status}")

    if not can_transition(from_status=sale.status, to_status=target_status):
        raise ValidationError(
            f"Sale {sale.id} cannot transition from "
            f"'{sale.status}' to '{target_status}'",
            details={
                "sale_id": str(sale.id),
                "from": sale.status,
                "to": target_status,
            },
        )


def status_for_balance(balance_remaining) -> str:
    """Derived status of a non-cancelled sale."""
    if Decimal(balance_remaining) <= Decimal("0.00"):
        return Sale.STATUS_PAID
    return Sale.STATUS_PENDING
