# inventory/tests/test_concurrency.py

"""
Row-lock behaviour of concurrent ledger transactions.

Needs real row locks, so it only runs against PostgreSQL
(SQLite ignores SELECT ... FOR UPDATE).
"""

import threading
import unittest

from django.db import connection, transaction
from django.test import TransactionTestCase, override_settings

from inventory.services.exceptions import InsufficientStockError, InternalError
from inventory.services.stock_ledger import lock_products
from inventory.tests.helpers import make_method, make_product, make_user, stock_of
from sales.models import Sale
from sales.services.sale_orchestrator import create_sale


@unittest.skipUnless(connection.vendor == "postgresql", "row locks need PostgreSQL")
class ConcurrentSaleTests(TransactionTestCase):
    """
    GUARANTEES:
    - a sale cannot read stock while another transaction holds the row
    - a bounded lock wait surfaces as a retryable InternalError
    - the waiting sale writes nothing
    """

    def setUp(self):
        self.user = make_user()
        self.cash = make_method(name="Cash")
        self.product = make_product(stock=1)

    def hold_lock(self, locked, release):
        try:
            with transaction.atomic():
                lock_products([self.product.id])
                locked.set()
                release.wait(10)
        finally:
            connection.close()

    @override_settings(LEDGER={"LOCK_TIMEOUT_MS": 200})
    def test_sale_waits_on_locked_product(self):
        locked = threading.Event()
        release = threading.Event()
        holder = threading.Thread(target=self.hold_lock, args=(locked, release))
        holder.start()

        try:
            self.assertTrue(locked.wait(10))

            with self.assertRaises(InternalError) as ctx:
                create_sale(
                    user=self.user,
                    lines=[
                        {"product_id": str(self.product.id), "quantity": 1, "unit_price": "5.00"}
                    ],
                    payments=[{"method_id": str(self.cash.id), "amount": "5.00"}],
                )
        finally:
            release.set()
            holder.join()

        self.assertTrue(ctx.exception.details["retryable"])
        self.assertEqual(stock_of(self.product), 1)
        self.assertFalse(Sale.objects.exists())

    def test_second_sale_sees_committed_stock(self):
        line = {"product_id": str(self.product.id), "quantity": 1, "unit_price": "5.00"}
        payment = {"method_id": str(self.cash.id), "amount": "5.00"}

        create_sale(user=self.user, lines=[line], payments=[payment])

        with self.assertRaises(InsufficientStockError):
            create_sale(user=self.user, lines=[line], payments=[payment])

        self.assertEqual(stock_of(self.product), 0)
        self.assertEqual(Sale.objects.count(), 1)
