# inventory/services/exceptions.py

"""
LEDGER DOMAIN ERRORS

Centralized error taxonomy for the stock ledger, the sale/purchase
orchestrators and the credit settlement tracker.

Every error carries:
- code:    stable machine-readable identifier
- message: human readable explanation
- details: structured payload (e.g. per-product deficits) so a caller can
           explain the failure without re-deriving it

Propagation rules:
- ValidationError / NotFoundError are raised before any write.
- InsufficientStockError / BalanceExceededError / TerminalStateError are
  raised before the write phase of the transaction.
- IntegrityError / InternalError are storage-layer failures remapped by
  inventory.services.atomic.ledger_atomic after rollback.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base exception for all ledger failures."""

    code = "LEDGER_ERROR"
    http_status = 400

    def __init__(self, message: str = "", *, details: dict | None = None):
        self.message = message or self.code
        self.details = dict(details or {})
        super().__init__(self.message)

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(LedgerError):
    """Raised when a payload is malformed or out of range."""

    code = "VALIDATION_ERROR"
    http_status = 400


class NotFoundError(LedgerError):
    """Raised when a referenced product, method, user or transaction is missing or inactive."""

    code = "NOT_FOUND"
    http_status = 404


class InsufficientStockError(LedgerError):
    """Raised when a sale would oversell, or a purchase reversal would drive stock negative."""

    code = "INSUFFICIENT_STOCK"
    http_status = 409

    def __init__(self, message: str = "", *, items: list[dict]):
        super().__init__(
            message or "Not enough stock to complete the operation.",
            details={"items": items},
        )
        self.items = items


class BalanceExceededError(LedgerError):
    """Raised when a payment is larger than the remaining balance."""

    code = "BALANCE_EXCEEDED"
    http_status = 409


class TerminalStateError(LedgerError):
    """Raised when mutating a sale that is already PAID or CANCELLED."""

    code = "TERMINAL_STATE"
    http_status = 409


class IntegrityError(LedgerError):
    """Raised when a storage-layer constraint is violated."""

    code = "INTEGRITY_ERROR"
    http_status = 409


class InternalError(LedgerError):
    """Raised on unexpected storage failures (including lock timeouts)."""

    code = "INTERNAL_ERROR"
    http_status = 500
