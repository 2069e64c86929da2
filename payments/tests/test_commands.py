from io import StringIO
from unittest.mock import patch

from django.core.management import CommandError, call_command
from django.test import TestCase

from bookings.models import TrainerBooking
from payments.models import PostCommitAction, Transaction

from .helpers import FakeResponse, booking_metadata, gateway_payload

GATEWAY_POST = "payments.integrations.uddoktapay.requests.post"


class ProcessPostCommitActionsTests(TestCase):
    def _ledger_action(self, invoice_id="inv_1", **kwargs):
        return PostCommitAction.objects.create(
            invoice_id=invoice_id,
            kind=PostCommitAction.LEDGER,
            payload={
                "order_type": "trainer_booking", "order_id": "b1", "invoice_id": invoice_id,
                "user_id": "u1", "trainer_id": "t1", "amount": "250.00", "description": "Trainer booking payment",
            },
            **kwargs,
        )

    def test_retries_pending_actions(self):
        action = self._ledger_action(attempts=1, last_error="DatabaseError: locked")
        out = StringIO()
        call_command("process_post_commit_actions", stdout=out)

        action.refresh_from_db()
        self.assertEqual(action.status, PostCommitAction.DONE)
        self.assertEqual(action.attempts, 2)
        self.assertEqual(action.last_error, "")
        txn = Transaction.objects.get(invoice_id="inv_1")
        self.assertEqual(str(txn.commission), "25.00")
        self.assertEqual(str(txn.net_amount), "225.00")
        self.assertIn("Processed 1, succeeded 1.", out.getvalue())

    def test_skips_done_and_failed(self):
        self._ledger_action("inv_done", status=PostCommitAction.DONE)
        self._ledger_action("inv_failed", status=PostCommitAction.FAILED)
        out = StringIO()
        call_command("process_post_commit_actions", stdout=out)
        self.assertIn("No pending actions.", out.getvalue())
        self.assertFalse(Transaction.objects.exists())

    def test_invoice_filter(self):
        self._ledger_action("inv_a")
        self._ledger_action("inv_b")
        call_command("process_post_commit_actions", "--invoice", "inv_b", stdout=StringIO())
        self.assertEqual(list(Transaction.objects.values_list("invoice_id", flat=True)), ["inv_b"])

    def test_failure_is_reported_not_raised(self):
        self._ledger_action()

        def boom(payload):
            raise RuntimeError("still broken")

        out = StringIO()
        with patch.dict("payments.outbox.EXECUTORS", {PostCommitAction.LEDGER: boom}):
            with self.assertLogs("payments.outbox", level="ERROR"):
                call_command("process_post_commit_actions", stdout=out)
        self.assertIn("still broken", out.getvalue())
        self.assertIn("succeeded 0", out.getvalue())
        self.assertEqual(PostCommitAction.objects.get().status, PostCommitAction.PENDING)

    def test_max_attempts_marks_failed(self):
        self._ledger_action(attempts=2)

        def boom(payload):
            raise RuntimeError("still broken")

        with patch.dict("payments.outbox.EXECUTORS", {PostCommitAction.LEDGER: boom}):
            with self.assertLogs("payments.outbox", level="ERROR"):
                call_command("process_post_commit_actions", "--max-attempts", "3", stdout=StringIO())
        action = PostCommitAction.objects.get()
        self.assertEqual(action.status, PostCommitAction.FAILED)
        self.assertEqual(action.attempts, 3)


class ReverifyInvoiceTests(TestCase):
    def test_fulfils_paid_invoice(self):
        payload = gateway_payload(amount="800", metadata=booking_metadata(), invoice_id="inv_late")
        out = StringIO()
        with patch(GATEWAY_POST, return_value=FakeResponse(200, payload)):
            call_command("reverify_invoice", "inv_late", stdout=out)

        self.assertEqual(TrainerBooking.objects.get().invoice_id, "inv_late")
        self.assertIn("inv_late: HTTP 200", out.getvalue())

    def test_unverifiable_invoice_raises(self):
        with patch(GATEWAY_POST, return_value=FakeResponse(404, {"message": "Invoice not found"})):
            with self.assertLogs("payments", level="ERROR"):
                with self.assertRaises(CommandError):
                    call_command("reverify_invoice", "inv_missing", stdout=StringIO())
