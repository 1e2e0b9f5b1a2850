# sales/tests/test_api.py

from __future__ import annotations

import uuid

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from inventory.tests.helpers import make_method, make_product, make_user, stock_of
from sales.models import Sale


class SalesApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_user()
        self.client.force_authenticate(user=self.user)

        self.cash = make_method(name="Cash")
        self.product = make_product(name="Rice", stock=10, stock_min=2)

    def create_payload(self, quantity, *, paid=None, customer=""):
        payload = {
            "lines": [
                {"product_id": str(self.product.id), "quantity": quantity, "unit_price": "10.00"}
            ],
            "customer_description": customer,
        }
        if paid is not None:
            payload["payments"] = [{"method_id": str(self.cash.id), "amount": paid}]
        return payload

    def test_requires_authentication(self):
        res = APIClient().get("/api/sales/")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_sale(self):
        res = self.client.post("/api/sales/", self.create_payload(9, paid="90.00"), format="json")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["status"], Sale.STATUS_PAID)
        self.assertEqual(res.data["total_amount"], "90.00")
        self.assertEqual(len(res.data["items"]), 1)
        self.assertEqual(res.data["warnings"][0]["code"], "STOCK_BELOW_MIN")
        self.assertEqual(stock_of(self.product), 1)

    def test_oversell_returns_error_envelope(self):
        res = self.client.post("/api/sales/", self.create_payload(12, paid="120.00"), format="json")

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        error = res.data["error"]
        self.assertEqual(error["code"], "INSUFFICIENT_STOCK")
        self.assertEqual(error["details"]["items"][0]["deficit"], 2)
        self.assertEqual(stock_of(self.product), 10)

    def test_malformed_payload_is_rejected(self):
        res = self.client.post("/api/sales/", {"lines": []}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters_open_credit_sales(self):
        self.client.post("/api/sales/", self.create_payload(1, paid="10.00"), format="json")
        self.client.post("/api/sales/", self.create_payload(2, customer="Juan"), format="json")

        res = self.client.get("/api/sales/", {"status": Sale.STATUS_PENDING, "is_credit": "true"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["customer_description"], "Juan")

    def test_payment_flow(self):
        sale_id = self.client.post(
            "/api/sales/", self.create_payload(3, customer="Juan"), format="json"
        ).data["id"]

        res = self.client.post(
            f"/api/sales/{sale_id}/payments/",
            {"method_id": str(self.cash.id), "amount": "10.00"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["balance_after"], "20.00")
        payment_id = res.data["payment"]["id"]

        res = self.client.post(
            f"/api/sales/{sale_id}/payments/",
            {"method_id": str(self.cash.id), "amount": "25.00"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "BALANCE_EXCEEDED")

        res = self.client.post(f"/api/sales/payments/{payment_id}/reverse/", {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["balance_after"], "30.00")

        res = self.client.get(f"/api/sales/{sale_id}/payments/")
        self.assertEqual(len(res.data), 2)

        res = self.client.get(f"/api/sales/{sale_id}/summary/")
        self.assertEqual(res.data["pending"], "30.00")
        self.assertEqual(res.data["paid"], "0.00")

    def test_cancel_then_edit_is_conflict(self):
        sale_id = self.client.post(
            "/api/sales/", self.create_payload(1, customer="Juan"), format="json"
        ).data["id"]

        res = self.client.post(f"/api/sales/{sale_id}/cancel/", {"reason": "void"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], Sale.STATUS_CANCELLED)

        res = self.client.put(
            f"/api/sales/{sale_id}/", self.create_payload(1, customer="Juan"), format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "TERMINAL_STATE")

    def test_update_and_delete(self):
        sale_id = self.client.post(
            "/api/sales/", self.create_payload(4, customer="Juan"), format="json"
        ).data["id"]

        res = self.client.put(
            f"/api/sales/{sale_id}/", self.create_payload(6, customer="Juan"), format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total_amount"], "60.00")
        self.assertEqual(stock_of(self.product), 4)

        res = self.client.delete(f"/api/sales/{sale_id}/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["deleted"])
        self.assertEqual(stock_of(self.product), 10)

    def test_unknown_sale_is_not_found(self):
        res = self.client.delete(f"/api/sales/{uuid.uuid4()}/")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["code"], "NOT_FOUND")

    def test_payment_methods(self):
        make_method(name="Old", is_active=False)

        res = self.client.get("/api/sales/payment-methods/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([m["name"] for m in res.data], ["Cash"])

    def test_paid_sale_is_final_over_the_api(self):
        sale_id = self.client.post(
            "/api/sales/", self.create_payload(2, paid="20.00"), format="json"
        ).data["id"]

        res = self.client.put(
            f"/api/sales/{sale_id}/", self.create_payload(5, customer="Juan"), format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "TERMINAL_STATE")

        res = self.client.delete(f"/api/sales/{sale_id}/")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["details"]["reason"], "HAS_PAYMENTS")

        self.assertEqual(stock_of(self.product), 8)
        self.assertEqual(len(self.client.get(f"/api/sales/{sale_id}/payments/").data), 1)
