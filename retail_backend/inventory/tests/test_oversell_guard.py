# inventory/tests/test_oversell_guard.py

from django.test import TestCase

from inventory.services.exceptions import InsufficientStockError
from inventory.services.oversell_guard import aggregate_quantities, check_availability
from inventory.tests.helpers import make_product


class OversellGuardTests(TestCase):
    def setUp(self):
        self.a = make_product(name="Apples", stock=5)
        self.b = make_product(name="Bread", stock=2)
        self.products = {self.a.id: self.a, self.b.id: self.b}

    def test_aggregate_sums_duplicate_products(self):
        lines = [
            {"product_id": self.a.id, "quantity": 2},
            {"product_id": self.b.id, "quantity": 1},
            {"product_id": self.a.id, "quantity": 3},
        ]
        self.assertEqual(aggregate_quantities(lines), {self.a.id: 5, self.b.id: 1})

    def test_allocation_within_stock_passes(self):
        check_availability({self.a.id: 5, self.b.id: 2}, self.products)

    def test_all_shortfalls_reported_together(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            check_availability({self.a.id: 6, self.b.id: 4}, self.products)

        items = {i["product_id"]: i for i in ctx.exception.items}
        self.assertEqual(len(items), 2)
        self.assertEqual(items[str(self.a.id)]["deficit"], 1)
        self.assertEqual(items[str(self.b.id)]["requested"], 4)
        self.assertEqual(items[str(self.b.id)]["available"], 2)
        self.assertEqual(items[str(self.b.id)]["deficit"], 2)
        self.assertEqual(items[str(self.b.id)]["name"], "Bread")

    def test_prior_allocation_counts_as_available(self):
        # 7 requested, 5 on hand + 3 held by the version being replaced
        check_availability({self.a.id: 7}, self.products, prior_allocation={self.a.id: 3})

        with self.assertRaises(InsufficientStockError):
            check_availability({self.a.id: 9}, self.products, prior_allocation={self.a.id: 3})
