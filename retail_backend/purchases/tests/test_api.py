# purchases/tests/test_api.py

from __future__ import annotations

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from inventory.tests.helpers import make_product, make_user, stock_of


class PurchasesApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=make_user())
        self.product = make_product(stock=0)

    def payload(self, quantity):
        return {
            "lines": [
                {"product_id": str(self.product.id), "quantity": quantity, "unit_cost": "3.00"}
            ]
        }

    def test_create_list_retrieve(self):
        res = self.client.post("/api/purchases/", self.payload(4), format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["total_amount"], "12.00")
        self.assertEqual(res.data["warnings"], [])
        purchase_id = res.data["id"]

        res = self.client.get("/api/purchases/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 1)

        res = self.client.get(f"/api/purchases/{purchase_id}/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data["items"]), 1)
        self.assertEqual(stock_of(self.product), 4)

    def test_update_and_delete(self):
        purchase_id = self.client.post("/api/purchases/", self.payload(4), format="json").data["id"]

        res = self.client.put(f"/api/purchases/{purchase_id}/", self.payload(6), format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(stock_of(self.product), 6)

        res = self.client.delete(f"/api/purchases/{purchase_id}/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(stock_of(self.product), 0)

    def test_future_date_is_rejected(self):
        body = self.payload(1)
        body["purchase_date"] = "2999-01-01"

        res = self.client.post("/api/purchases/", body, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["details"]["reason"], "FUTURE_DATE")
        self.assertEqual(stock_of(self.product), 0)

    def test_requires_authentication(self):
        res = APIClient().get("/api/purchases/")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)
