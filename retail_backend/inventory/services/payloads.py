# inventory/services/payloads.py

"""
PAYLOAD NORMALIZATION (no I/O)

Every orchestrated operation validates its whole payload here BEFORE touching
the database. Normalized shapes:

- line:    {"product_id": UUID, "quantity": int, "price": Decimal}
- payment: {"method_id": UUID, "amount": Decimal, "note": str}

Hard rules:
- Quantities are whole integer units in 1..LEDGER["MAX_QUANTITY"].
- Prices / costs are Decimal 2dp in (0, LEDGER["MAX_UNIT_PRICE"]].
- A transaction carries at most LEDGER["MAX_LINE_ITEMS"] lines and each
  product at most once.
- Money is rounded ROUND_HALF_UP to 2dp; totals are computed server-side.
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings
from django.utils import timezone

from inventory.services.exceptions import ValidationError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

_DEFAULT_LIMITS = {
    "MAX_LINE_ITEMS": 200,
    "MAX_QUANTITY": 999_999,
    "MAX_UNIT_PRICE": "99999999",
    "MAX_TOTAL": "99999999",
    "MAX_STOCK": 999_999,
}


def ledger_limit(key: str):
    return getattr(settings, "LEDGER", {}).get(key, _DEFAULT_LIMITS[key])


def money(value, *, field: str = "amount") -> Decimal:
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError(
            f"{field} is required and must be a number.",
            details={"field": field, "reason": "NOT_A_NUMBER"},
        )

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(
            f"{field} must be a number.",
            details={"field": field, "reason": "NOT_A_NUMBER"},
        )

    if not amount.is_finite():
        raise ValidationError(
            f"{field} must be a finite number.",
            details={"field": field, "reason": "NOT_A_NUMBER"},
        )

    return amount.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def to_int_qty(value, *, field: str = "quantity") -> int:
    if isinstance(value, bool):
        raise ValidationError(
            f"{field} must be a whole integer unit.",
            details={"field": field, "reason": "NOT_AN_INTEGER"},
        )

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        s = value.strip()
        if s.isdigit():
            return int(s)

    raise ValidationError(
        f"{field} must be a whole integer unit.",
        details={"field": field, "reason": "NOT_AN_INTEGER"},
    )


def parse_uuid(value, *, field: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value

    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError):
        raise ValidationError(
            f"{field} is not a valid identifier.",
            details={"field": field, "value": str(value), "reason": "INVALID_ID"},
        )


def normalize_date(value) -> datetime.date:
    """
    Accept a date, a datetime or an ISO "YYYY-MM-DD" string.
    None means today (local). Future dates are rejected.
    """
    today = timezone.localdate()

    if value is None or value == "":
        return today

    if isinstance(value, datetime.datetime):
        value = value.date()

    if not isinstance(value, datetime.date):
        try:
            value = datetime.date.fromisoformat(str(value).strip())
        except ValueError:
            raise ValidationError(
                "date must be formatted as YYYY-MM-DD.",
                details={"field": "date", "value": str(value), "reason": "INVALID_DATE"},
            )

    if value > today:
        raise ValidationError(
            "date cannot be in the future.",
            details={"field": "date", "value": value.isoformat(), "reason": "FUTURE_DATE"},
        )

    return value


def normalize_lines(lines, *, price_field: str) -> list[dict]:
    """
    Validate a line list and return normalized lines in payload order.

    price_field is "unit_price" for sales and "unit_cost" for purchases.
    """
    if not isinstance(lines, (list, tuple)) or not lines:
        raise ValidationError(
            "At least one line item is required.",
            details={"field": "lines", "reason": "EMPTY_LINES"},
        )

    max_lines = int(ledger_limit("MAX_LINE_ITEMS"))
    if len(lines) > max_lines:
        raise ValidationError(
            f"A transaction may carry at most {max_lines} line items.",
            details={"field": "lines", "reason": "TOO_MANY_LINES", "limit": max_lines},
        )

    max_qty = int(ledger_limit("MAX_QUANTITY"))
    max_price = Decimal(str(ledger_limit("MAX_UNIT_PRICE")))

    out = []
    seen = set()
    for idx, raw in enumerate(lines):
        if not isinstance(raw, dict):
            raise ValidationError(
                f"Line {idx} must be an object.",
                details={"field": "lines", "index": idx, "reason": "MALFORMED_LINE"},
            )

        product_id = parse_uuid(raw.get("product_id"), field=f"lines[{idx}].product_id")

        qty = to_int_qty(raw.get("quantity"), field=f"lines[{idx}].quantity")
        if qty < 1 or qty > max_qty:
            raise ValidationError(
                f"Line {idx}: quantity must be between 1 and {max_qty}.",
                details={
                    "field": f"lines[{idx}].quantity",
                    "index": idx,
                    "reason": "QUANTITY_OUT_OF_RANGE",
                    "value": qty,
                },
            )

        price = money(raw.get(price_field), field=f"lines[{idx}].{price_field}")
        if price <= ZERO or price > max_price:
            raise ValidationError(
                f"Line {idx}: {price_field} must be greater than 0 and at most {max_price}.",
                details={
                    "field": f"lines[{idx}].{price_field}",
                    "index": idx,
                    "reason": "PRICE_OUT_OF_RANGE",
                    "value": str(price),
                },
            )

        if product_id in seen:
            raise ValidationError(
                f"Line {idx}: product appears more than once.",
                details={
                    "field": f"lines[{idx}].product_id",
                    "index": idx,
                    "product_id": str(product_id),
                    "reason": "DUPLICATE_PRODUCT_LINE",
                },
            )
        seen.add(product_id)

        out.append({"product_id": product_id, "quantity": qty, "price": price})

    return out


def lines_total(lines: list[dict]) -> Decimal:
    """Sum of quantity x price, bounded by LEDGER["MAX_TOTAL"]."""
    total = ZERO
    for line in lines:
        total += (line["price"] * Decimal(line["quantity"])).quantize(
            TWOPLACES, rounding=ROUND_HALF_UP
        )
    total = total.quantize(TWOPLACES, rounding=ROUND_HALF_UP)

    max_total = Decimal(str(ledger_limit("MAX_TOTAL")))
    if total > max_total:
        raise ValidationError(
            f"Transaction total exceeds the maximum of {max_total}.",
            details={"field": "total", "reason": "TOTAL_OUT_OF_RANGE", "value": str(total)},
        )

    return total


def normalize_payments(payments) -> list[dict]:
    if payments is None:
        return []

    if not isinstance(payments, (list, tuple)):
        raise ValidationError(
            "payments must be a list.",
            details={"field": "payments", "reason": "MALFORMED_PAYMENTS"},
        )

    out = []
    for idx, raw in enumerate(payments):
        if not isinstance(raw, dict):
            raise ValidationError(
                f"Payment {idx} must be an object.",
                details={"field": "payments", "index": idx, "reason": "MALFORMED_PAYMENT"},
            )

        method_id = parse_uuid(raw.get("method_id"), field=f"payments[{idx}].method_id")
        amount = positive_amount(raw.get("amount"), field=f"payments[{idx}].amount")

        out.append(
            {
                "method_id": method_id,
                "amount": amount,
                "note": str(raw.get("note", "") or "").strip(),
            }
        )

    return out


def positive_amount(value, *, field: str = "amount") -> Decimal:
    amount = money(value, field=field)
    if amount <= ZERO:
        raise ValidationError(
            f"{field} must be greater than zero.",
            details={"field": field, "reason": "NON_POSITIVE_AMOUNT", "value": str(amount)},
        )
    return amount
