# sales/tests/test_sale_lifecycle.py

from django.test import SimpleTestCase

from sales.models import Sale
from sales.services.sale_lifecycle import can_transition, status_for_balance


class SaleLifecycleTests(SimpleTestCase):
    def test_pending_transitions(self):
        self.assertTrue(can_transition(from_status=Sale.STATUS_PENDING, to_status=Sale.STATUS_PAID))
        self.assertTrue(can_transition(from_status=Sale.STATUS_PENDING, to_status=Sale.STATUS_CANCELLED))

    def test_terminal_states_do_not_move(self):
        for terminal in (Sale.STATUS_PAID, Sale.STATUS_CANCELLED):
            for target in (Sale.STATUS_PENDING, Sale.STATUS_PAID, Sale.STATUS_CANCELLED):
                self.assertFalse(can_transition(from_status=terminal, to_status=target))

    def test_status_for_balance(self):
        self.assertEqual(status_for_balance("0.00"), Sale.STATUS_PAID)
        self.assertEqual(status_for_balance("0.01"), Sale.STATUS_PENDING)
