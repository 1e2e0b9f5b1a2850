# inventory/tests/test_payloads.py

import uuid
from datetime import date, timedelta
from decimal import Decimal

from django.test import SimpleTestCase, override_settings
from django.utils import timezone

from inventory.services.exceptions import ValidationError
from inventory.services.payloads import (
    lines_total,
    money,
    normalize_date,
    normalize_lines,
    normalize_payments,
    to_int_qty,
)


def _line(**overrides):
    line = {"product_id": str(uuid.uuid4()), "quantity": 1, "unit_price": "10.00"}
    line.update(overrides)
    return line


class PayloadNormalizationTests(SimpleTestCase):
    """
    Payload validation runs before any database access.

    GUARANTEES:
    - Malformed or out-of-range payloads raise ValidationError
    - Money is Decimal 2dp, ROUND_HALF_UP
    """

    def assertRejected(self, reason, func, *args, **kwargs):
        with self.assertRaises(ValidationError) as ctx:
            func(*args, **kwargs)
        self.assertEqual(ctx.exception.details.get("reason"), reason)
        return ctx.exception

    def test_money_rounds_half_up(self):
        self.assertEqual(money("2.345"), Decimal("2.35"))
        self.assertEqual(money(10), Decimal("10.00"))

    def test_money_rejects_garbage(self):
        self.assertRejected("NOT_A_NUMBER", money, "abc")
        self.assertRejected("NOT_A_NUMBER", money, None)
        self.assertRejected("NOT_A_NUMBER", money, True)
        self.assertRejected("NOT_A_NUMBER", money, "NaN")

    def test_quantity_must_be_whole_units(self):
        self.assertEqual(to_int_qty("5"), 5)
        self.assertEqual(to_int_qty(7), 7)
        self.assertRejected("NOT_AN_INTEGER", to_int_qty, 1.5)
        self.assertRejected("NOT_AN_INTEGER", to_int_qty, True)
        self.assertRejected("NOT_AN_INTEGER", to_int_qty, "-3")

    def test_lines_are_normalized(self):
        pid = uuid.uuid4()
        lines = normalize_lines(
            [{"product_id": str(pid), "quantity": "3", "unit_price": "2.5"}],
            price_field="unit_price",
        )
        self.assertEqual(lines, [{"product_id": pid, "quantity": 3, "price": Decimal("2.50")}])

    def test_empty_lines_rejected(self):
        self.assertRejected("EMPTY_LINES", normalize_lines, [], price_field="unit_price")
        self.assertRejected("EMPTY_LINES", normalize_lines, None, price_field="unit_price")

    @override_settings(LEDGER={"MAX_LINE_ITEMS": 2})
    def test_too_many_lines_rejected(self):
        self.assertRejected(
            "TOO_MANY_LINES",
            normalize_lines,
            [_line(), _line(), _line()],
            price_field="unit_price",
        )

    def test_quantity_range(self):
        self.assertRejected(
            "QUANTITY_OUT_OF_RANGE", normalize_lines, [_line(quantity=0)], price_field="unit_price"
        )
        self.assertRejected(
            "QUANTITY_OUT_OF_RANGE",
            normalize_lines,
            [_line(quantity=1_000_000)],
            price_field="unit_price",
        )

    def test_price_range(self):
        self.assertRejected(
            "PRICE_OUT_OF_RANGE", normalize_lines, [_line(unit_price="0")], price_field="unit_price"
        )
        self.assertRejected(
            "PRICE_OUT_OF_RANGE",
            normalize_lines,
            [_line(unit_price="100000000")],
            price_field="unit_price",
        )

    def test_purchase_lines_read_unit_cost(self):
        line = {"product_id": str(uuid.uuid4()), "quantity": 2, "unit_cost": "4.00"}
        (normalized,) = normalize_lines([line], price_field="unit_cost")
        self.assertEqual(normalized["price"], Decimal("4.00"))

    def test_duplicate_product_lines_rejected(self):
        pid = str(uuid.uuid4())
        exc = self.assertRejected(
            "DUPLICATE_PRODUCT_LINE",
            normalize_lines,
            [_line(product_id=pid), _line(product_id=pid, quantity=2)],
            price_field="unit_price",
        )
        self.assertEqual(exc.details["index"], 1)

    def test_invalid_product_id_rejected(self):
        self.assertRejected(
            "INVALID_ID", normalize_lines, [_line(product_id="nope")], price_field="unit_price"
        )

    def test_lines_total(self):
        lines = normalize_lines(
            [
                _line(quantity=3, unit_price="2.50"),
                _line(quantity=1, unit_price="10.00"),
            ],
            price_field="unit_price",
        )
        self.assertEqual(lines_total(lines), Decimal("17.50"))

    @override_settings(LEDGER={"MAX_TOTAL": "100"})
    def test_total_limit(self):
        lines = normalize_lines([_line(quantity=11, unit_price="10.00")], price_field="unit_price")
        self.assertRejected("TOTAL_OUT_OF_RANGE", lines_total, lines)

    def test_payments_must_be_positive(self):
        payments = normalize_payments([{"method_id": str(uuid.uuid4()), "amount": "5"}])
        self.assertEqual(payments[0]["amount"], Decimal("5.00"))
        self.assertEqual(payments[0]["note"], "")

        self.assertRejected(
            "NON_POSITIVE_AMOUNT",
            normalize_payments,
            [{"method_id": str(uuid.uuid4()), "amount": "0"}],
        )

    def test_dates(self):
        today = timezone.localdate()
        self.assertEqual(normalize_date(None), today)
        self.assertEqual(normalize_date("2024-01-05"), date(2024, 1, 5))
        self.assertRejected("FUTURE_DATE", normalize_date, today + timedelta(days=1))
        self.assertRejected("INVALID_DATE", normalize_date, "05/01/2024")
