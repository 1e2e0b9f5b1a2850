# products/tests/test_products.py

from decimal import Decimal

from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from inventory.models import StockMovement
from inventory.services.stock_ledger import apply_delta
from inventory.tests.helpers import make_product, make_user
from products.models import Product


class ProductModelTests(TestCase):
    """
    Product model tests.

    GUARANTEES:
    - SKU uniqueness is enforced
    - stock_min never exceeds stock_max
    - low stock means strictly below the minimum
    """

    def test_sku_must_be_unique(self):
        make_product()
        sku = Product.objects.get().sku

        with self.assertRaises(IntegrityError), transaction.atomic():
            Product.objects.create(
                name="Duplicate",
                sku=sku,
                cost_price=Decimal("1.00"),
                sale_price=Decimal("2.00"),
            )

    def test_min_above_max_is_rejected(self):
        with self.assertRaises(IntegrityError), transaction.atomic():
            Product.objects.create(
                name="Broken",
                sku="BRK-1",
                stock_min=10,
                stock_max=5,
                cost_price=Decimal("1.00"),
                sale_price=Decimal("2.00"),
            )

    def test_is_low_stock(self):
        self.assertTrue(make_product(stock=1, stock_min=2).is_low_stock)
        self.assertFalse(make_product(stock=2, stock_min=2).is_low_stock)


class ProductApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=make_user())

        self.low = make_product(name="Beans", stock=1, stock_min=5)
        self.ok = make_product(name="Flour", stock=50, stock_min=5)
        make_product(name="Old stock", stock=0, stock_min=5, is_active=False)

    def test_list_and_search(self):
        res = self.client.get("/api/products/", {"q": "flo"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([p["name"] for p in res.data["results"]], ["Flour"])

    def test_active_filter(self):
        res = self.client.get("/api/products/", {"active": "true"})
        self.assertEqual(res.data["count"], 2)

    def test_low_stock_lists_active_products_only(self):
        res = self.client.get("/api/products/low-stock/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([p["name"] for p in res.data], ["Beans"])
        self.assertTrue(res.data[0]["is_low_stock"])

    def test_movements(self):
        for _ in range(3):
            apply_delta(
                product_id=self.ok.id,
                delta=-1,
                reason=StockMovement.Reason.SALE,
                reference="SALE:test",
            )

        res = self.client.get(f"/api/products/{self.ok.id}/movements/", {"limit": 2})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data), 2)
        self.assertEqual(res.data[0]["quantity_delta"], -1)

    def test_products_are_read_only(self):
        res = self.client.post("/api/products/", {"name": "X"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    def test_requires_authentication(self):
        res = APIClient().get("/api/products/")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)
