# inventory/tests/test_stock_ledger.py

import uuid

from django.core.exceptions import ValidationError as ModelValidationError
from django.db import connection
from django.test import TestCase, override_settings, skipUnlessDBFeature
from django.test.utils import CaptureQueriesContext

from inventory.models import StockMovement
from inventory.services.exceptions import IntegrityError, NotFoundError, ValidationError
from inventory.services.stock_ledger import apply_delta, available_stock, lock_products
from inventory.tests.helpers import make_product, make_user, stock_of


class StockLedgerTests(TestCase):
    """
    GUARANTEES:
    - apply_delta is the only path that moves stock_current
    - stock never goes below zero or above the configured cap
    - every applied delta leaves one immutable StockMovement
    """

    def setUp(self):
        self.user = make_user()
        self.product = make_product(stock=10)

    def test_apply_delta_moves_stock_and_writes_movement(self):
        new_qty = apply_delta(
            product_id=self.product.id,
            delta=-4,
            reason=StockMovement.Reason.SALE,
            reference="SALE:test",
            user=self.user,
        )

        self.assertEqual(new_qty, 6)
        self.assertEqual(stock_of(self.product), 6)

        mv = StockMovement.objects.get(product=self.product)
        self.assertEqual(mv.quantity_delta, -4)
        self.assertEqual(mv.stock_after, 6)
        self.assertEqual(mv.reference, "SALE:test")
        self.assertEqual(mv.performed_by, self.user)

    def test_negative_result_is_rejected(self):
        with self.assertRaises(IntegrityError) as ctx:
            apply_delta(
                product_id=self.product.id,
                delta=-11,
                reason=StockMovement.Reason.SALE,
                reference="SALE:test",
            )

        self.assertEqual(ctx.exception.details["reason"], "NEGATIVE_STOCK")
        self.assertEqual(stock_of(self.product), 10)
        self.assertFalse(StockMovement.objects.exists())

    def test_exact_depletion_is_allowed(self):
        apply_delta(
            product_id=self.product.id,
            delta=-10,
            reason=StockMovement.Reason.SALE,
            reference="SALE:test",
        )
        self.assertEqual(available_stock(self.product.id), 0)

    @override_settings(LEDGER={"MAX_STOCK": 15})
    def test_stock_cap_is_enforced(self):
        apply_delta(
            product_id=self.product.id,
            delta=5,
            reason=StockMovement.Reason.PURCHASE,
            reference="PURCHASE:test",
        )

        with self.assertRaises(IntegrityError) as ctx:
            apply_delta(
                product_id=self.product.id,
                delta=1,
                reason=StockMovement.Reason.PURCHASE,
                reference="PURCHASE:test",
            )

        self.assertEqual(ctx.exception.details["reason"], "STOCK_LIMIT_EXCEEDED")
        self.assertEqual(stock_of(self.product), 15)

    @override_settings(LEDGER={"MAX_STOCK": 10})
    def test_sale_reversal_is_exempt_from_stock_cap(self):
        new_qty = apply_delta(
            product_id=self.product.id,
            delta=4,
            reason=StockMovement.Reason.SALE_REVERSAL,
            reference="SALE:test",
        )

        self.assertEqual(new_qty, 14)
        self.assertEqual(stock_of(self.product), 14)

    def test_unknown_product(self):
        with self.assertRaises(NotFoundError):
            apply_delta(
                product_id=uuid.uuid4(),
                delta=1,
                reason=StockMovement.Reason.PURCHASE,
                reference="PURCHASE:test",
            )

        with self.assertRaises(NotFoundError):
            available_stock(uuid.uuid4())

    def test_zero_delta_is_rejected(self):
        with self.assertRaises(ValidationError):
            apply_delta(
                product_id=self.product.id,
                delta=0,
                reason=StockMovement.Reason.SALE,
                reference="SALE:test",
            )

    def test_lock_products_returns_existing_rows_only(self):
        other = make_product()
        missing = uuid.uuid4()

        locked = lock_products([self.product.id, other.id, missing])

        self.assertEqual(set(locked), {self.product.id, other.id})
        self.assertEqual(lock_products([]), {})

    def test_lock_products_orders_by_primary_key(self):
        other = make_product()

        with CaptureQueriesContext(connection) as ctx:
            lock_products([self.product.id, other.id])

        (query,) = ctx.captured_queries
        self.assertIn("ORDER BY", query["sql"].upper())

    @skipUnlessDBFeature("has_select_for_update")
    def test_lock_products_takes_row_locks(self):
        with CaptureQueriesContext(connection) as ctx:
            lock_products([self.product.id])

        self.assertTrue(any("FOR UPDATE" in q["sql"].upper() for q in ctx.captured_queries))


class StockImmutabilityTests(TestCase):
    def setUp(self):
        self.product = make_product(stock=3)

    def test_product_save_cannot_change_stock(self):
        self.product.stock_current = 99
        with self.assertRaises(ModelValidationError):
            self.product.save()

        self.assertEqual(stock_of(self.product), 3)

    def test_product_save_keeps_other_fields_editable(self):
        self.product.name = "Renamed"
        self.product.save()

        self.product.refresh_from_db()
        self.assertEqual(self.product.name, "Renamed")
        self.assertEqual(self.product.stock_current, 3)

    def test_stock_movements_are_append_only(self):
        apply_delta(
            product_id=self.product.id,
            delta=2,
            reason=StockMovement.Reason.PURCHASE,
            reference="PURCHASE:test",
        )
        mv = StockMovement.objects.get()

        with self.assertRaises(ModelValidationError):
            mv.save()

        with self.assertRaises(ModelValidationError):
            mv.delete()

    def test_movement_sign_must_match_reason(self):
        mv = StockMovement(
            product=self.product,
            quantity_delta=5,
            reason=StockMovement.Reason.SALE,
            stock_after=8,
            reference="SALE:bad",
        )
        with self.assertRaises(ModelValidationError):
            mv.save()
