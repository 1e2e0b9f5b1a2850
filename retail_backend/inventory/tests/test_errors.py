# inventory/tests/test_errors.py

from django.db import DatabaseError
from django.db import IntegrityError as DBIntegrityError
from django.test import TestCase
from rest_framework.exceptions import NotAuthenticated

from inventory.api.exception_handler import ledger_exception_handler
from inventory.services.atomic import ledger_atomic
from inventory.services.exceptions import (
    BalanceExceededError,
    InsufficientStockError,
    IntegrityError,
    InternalError,
    NotFoundError,
)


class LedgerAtomicTests(TestCase):
    """
    Storage failures are remapped into the ledger taxonomy after rollback;
    domain errors pass through unchanged.
    """

    def test_domain_errors_pass_through(self):
        @ledger_atomic
        def op():
            raise NotFoundError("missing")

        with self.assertRaises(NotFoundError):
            op()

    def test_storage_integrity_error_is_remapped(self):
        @ledger_atomic
        def op():
            raise DBIntegrityError("CHECK constraint failed")

        with self.assertRaises(IntegrityError) as ctx:
            op()

        self.assertEqual(ctx.exception.details["operation"], "op")

    def test_database_error_is_remapped_as_retryable(self):
        @ledger_atomic
        def op():
            raise DatabaseError("canceling statement due to lock timeout")

        with self.assertRaises(InternalError) as ctx:
            op()

        self.assertTrue(ctx.exception.details["retryable"])
        self.assertEqual(ctx.exception.http_status, 500)

    def test_return_value_is_preserved(self):
        @ledger_atomic
        def op(x, *, y):
            return x + y

        self.assertEqual(op(1, y=2), 3)


class ExceptionHandlerTests(TestCase):
    def test_ledger_error_envelope(self):
        exc = InsufficientStockError(
            items=[{"product_id": "p", "name": "P", "requested": 12, "available": 10, "deficit": 2}]
        )
        response = ledger_exception_handler(exc, {})

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["error"]["code"], "INSUFFICIENT_STOCK")
        self.assertEqual(response.data["error"]["details"]["items"][0]["deficit"], 2)

    def test_status_follows_error_class(self):
        self.assertEqual(ledger_exception_handler(NotFoundError("x"), {}).status_code, 404)
        self.assertEqual(ledger_exception_handler(BalanceExceededError("x"), {}).status_code, 409)

    def test_framework_errors_use_default_rendering(self):
        response = ledger_exception_handler(NotAuthenticated(), {})
        self.assertEqual(response.status_code, 401)
        self.assertIn("detail", response.data)
