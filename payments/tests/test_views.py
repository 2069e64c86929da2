import json
from datetime import date
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.urls import reverse

from bookings.models import Gym, GymMembership, ServiceOrder, TrainerBooking
from notifications.models import Notification
from payments.models import PostCommitAction, Transaction

from .helpers import FakeResponse, booking_metadata, gateway_payload, gym_membership_metadata

GATEWAY_POST = "payments.integrations.uddoktapay.requests.post"

SCENARIO_A_METADATA = {
    "user_id": "u1",
    "service_order_data": json.dumps({
        "trainerId": "t1", "serviceTitle": "Strength Plan", "packageType": "standard",
        "quantity": 1, "deliveryDays": 7, "requirements": "Beginner",
    }),
}


class VerifyPaymentViewTests(TestCase):
    url = reverse("payments:verify")

    def _post(self, body, gateway_response):
        with patch(GATEWAY_POST, return_value=gateway_response) as post:
            resp = self.client.post(self.url, json.dumps(body), content_type="application/json")
        return resp, post

    def assertNothingCreated(self):
        self.assertEqual(ServiceOrder.objects.count(), 0)
        self.assertEqual(GymMembership.objects.count(), 0)
        self.assertEqual(TrainerBooking.objects.count(), 0)
        self.assertEqual(Transaction.objects.count(), 0)
        self.assertEqual(Notification.objects.count(), 0)

    def test_webhook_for_completed_service_order(self):
        resp, post = self._post({"order_id": "inv_123"},
                                FakeResponse(200, gateway_payload(metadata=SCENARIO_A_METADATA)))

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(post.call_args.kwargs["json"], {"invoice_id": "inv_123"})
        data = resp.json()
        self.assertTrue(data["success"])
        self.assertEqual(data["status"], "COMPLETED")
        self.assertEqual(data["transaction_id"], "TX8H2K1")
        self.assertEqual(data["amount"], "1500")
        self.assertEqual(data["metadata"], SCENARIO_A_METADATA)
        self.assertNotIn("redirect_url", data)
        self.assertEqual(resp["Access-Control-Allow-Origin"], "*")

        order = ServiceOrder.objects.get()
        self.assertEqual(order.status, "pending")
        self.assertEqual(order.trainer_id, "t1")
        txn = Transaction.objects.get()
        self.assertEqual(str(txn.commission), "150.00")
        self.assertEqual(str(txn.net_amount), "1350.00")

    def test_pending_payment_creates_nothing(self):
        for status in ("PENDING", "ERROR", ""):
            with self.subTest(status=status):
                resp, _ = self._post({"order_id": "inv_123"},
                                     FakeResponse(200, gateway_payload(status=status, metadata=SCENARIO_A_METADATA)))
                self.assertEqual(resp.status_code, 200)
                self.assertTrue(resp.json()["success"])
                self.assertEqual(resp.json()["status"], status)
                self.assertNothingCreated()

    def test_gateway_rejection_is_reported(self):
        with self.assertLogs("payments", level="ERROR"):
            resp, _ = self._post({"invoice_id": "inv_999"},
                                 FakeResponse(402, {"status": False, "message": "Invoice not found"}))

        self.assertEqual(resp.status_code, 400)
        data = resp.json()
        self.assertFalse(data["success"])
        self.assertIn("Invoice not found", data["error"])
        self.assertNothingCreated()

    def test_gym_membership_redirects_to_new_membership(self):
        gym = Gym.objects.create(gym_id="g1", name="Iron Temple")
        with patch("payments.fulfillment.timezone.localdate", return_value=date(2024, 1, 1)):
            resp, _ = self._post({"order_id": "inv_gym"},
                                 FakeResponse(200, gateway_payload(invoice_id="inv_gym",
                                                                   metadata=gym_membership_metadata())))

        self.assertEqual(resp.status_code, 200)
        membership = GymMembership.objects.get()
        self.assertEqual(membership.end_date, date(2024, 3, 31))
        self.assertEqual(membership.status, "active")
        self.assertIn(str(membership.pk), resp.json()["redirect_url"])
        gym.refresh_from_db()
        self.assertEqual(gym.member_count, 1)

    def test_redelivered_webhook_is_idempotent(self):
        payload = gateway_payload(amount="800", metadata=booking_metadata())
        first, _ = self._post({"order_id": "inv_123"}, FakeResponse(200, payload))
        second, _ = self._post({"order_id": "inv_123"}, FakeResponse(200, payload))

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 200)
        self.assertNotIn("duplicate", first.json())
        self.assertTrue(second.json()["duplicate"])
        self.assertEqual(TrainerBooking.objects.count(), 1)
        self.assertEqual(Transaction.objects.count(), 1)
        self.assertEqual(Notification.objects.count(), 2)

    def test_missing_identifier(self):
        with patch(GATEWAY_POST) as post:
            with self.assertLogs("payments.services", level="ERROR"):
                resp = self.client.post(self.url, json.dumps({"amount": 10}), content_type="application/json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"success": False, "error": "No invoice_id or order_id provided"})
        post.assert_not_called()

    def test_invalid_json(self):
        with patch(GATEWAY_POST) as post:
            resp = self.client.post(self.url, "{nope", content_type="application/json")
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()["success"])
        post.assert_not_called()

    def test_form_encoded_webhook(self):
        with patch(GATEWAY_POST, return_value=FakeResponse(200, gateway_payload(status="PENDING"))) as post:
            resp = self.client.post(self.url, {"order_id": "inv_form"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(post.call_args.kwargs["json"], {"invoice_id": "inv_form"})

    @override_settings(UDDOKTAPAY_API_KEY="")
    def test_missing_api_key(self):
        with patch(GATEWAY_POST) as post:
            with self.assertLogs("payments.services", level="ERROR"):
                resp = self.client.post(self.url, json.dumps({"order_id": "inv_123"}),
                                        content_type="application/json")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"success": False, "error": "Payment gateway is not configured"})
        post.assert_not_called()

    def test_api_key_never_in_response(self):
        with self.assertLogs("payments", level="ERROR"):
            resp, _ = self._post({"order_id": "inv_1"}, FakeResponse(500, {"message": "boom"}))
        self.assertNotIn(b"test-gateway-key", resp.content)

    def test_paid_but_unfulfillable_metadata(self):
        with self.assertLogs("payments.services", level="ERROR"):
            resp, _ = self._post({"order_id": "inv_123"},
                                 FakeResponse(200, gateway_payload(metadata={"user_id": "u1"})))

        self.assertEqual(resp.status_code, 500)
        data = resp.json()
        self.assertFalse(data["success"])
        self.assertTrue(data["payment_verified"])
        self.assertEqual(data["status"], "COMPLETED")
        self.assertEqual(data["error_code"], "invalid_order_metadata")
        self.assertNothingCreated()

    def test_paid_but_order_write_failed(self):
        with patch("payments.fulfillment.ServiceOrder.objects.get_or_create", side_effect=DatabaseError("down")):
            with self.assertLogs("payments", level="ERROR"):
                resp, _ = self._post({"order_id": "inv_123"},
                                     FakeResponse(200, gateway_payload(metadata=SCENARIO_A_METADATA)))

        self.assertEqual(resp.status_code, 500)
        data = resp.json()
        self.assertTrue(data["payment_verified"])
        self.assertEqual(data["error"], "Failed to create service order")
        self.assertEqual(data["error_code"], "fulfillment_error")
        self.assertFalse(PostCommitAction.objects.exists())

    def test_side_effect_bookkeeping_failure_keeps_success(self):
        save = PostCommitAction.save

        def flaky_save(action, *args, **kwargs):
            if kwargs.get("update_fields"):
                raise DatabaseError("connection lost")
            return save(action, *args, **kwargs)

        with patch.object(PostCommitAction, "save", autospec=True, side_effect=flaky_save):
            with self.assertLogs("payments.outbox", level="ERROR"):
                resp, _ = self._post({"order_id": "inv_123"},
                                     FakeResponse(200, gateway_payload(metadata=SCENARIO_A_METADATA)))

        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["success"])
        self.assertEqual(ServiceOrder.objects.count(), 1)
        self.assertEqual(PostCommitAction.objects.filter(status=PostCommitAction.PENDING).count(), 2)

    def test_options_preflight(self):
        resp = self.client.options(self.url)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.content, b"")
        self.assertEqual(resp["Access-Control-Allow-Origin"], "*")
        self.assertIn("POST", resp["Access-Control-Allow-Methods"])

    def test_get_not_allowed(self):
        resp = self.client.get(self.url)
        self.assertEqual(resp.status_code, 405)


class CreatePaymentViewTests(TestCase):
    url = reverse("payments:create")

    def _body(self, **overrides):
        body = {
            "amount": "800",
            "customer_name": "Nadia Rahman",
            "customer_email": "nadia@example.com",
            "order_type": "trainer_booking",
            "metadata": booking_metadata(),
        }
        body.update(overrides)
        return body

    def _post(self, body, response=None, **extra):
        response = response or FakeResponse(200, {"payment_url": "https://pay.test/abc", "invoice_id": "inv_abc"})
        with patch(GATEWAY_POST, return_value=response) as post:
            resp = self.client.post(self.url, json.dumps(body), content_type="application/json", **extra)
        return resp, post

    def test_opens_checkout(self):
        resp, post = self._post(self._body(), HTTP_ORIGIN="https://web.example")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {
            "success": True,
            "payment_url": "https://pay.test/abc",
            "invoice_id": "inv_abc",
            "session_id": "inv_abc",
        })
        sent = post.call_args.kwargs["json"]
        self.assertEqual(post.call_args.args[0], "https://gateway.test/api/checkout-v2")
        self.assertEqual(sent["amount"], "800.00")
        self.assertEqual(sent["metadata"]["order_type"], "trainer_booking")
        self.assertEqual(sent["metadata"]["origin"], "https://web.example")
        self.assertEqual(sent["metadata"]["payment_type"], "trainer_booking")
        self.assertFalse(sent["metadata"]["is_mobile_app"])
        self.assertEqual(sent["redirect_url"], "https://web.example/payment-redirect")
        self.assertEqual(sent["cancel_url"], "https://web.example/payment-cancelled")
        self.assertEqual(sent["webhook_url"], "http://testserver/payments/verify")

    def test_mobile_app_deep_links(self):
        metadata = {**booking_metadata(), "is_mobile_app": True}
        resp, post = self._post(self._body(metadata=metadata))

        self.assertEqual(resp.status_code, 200)
        sent = post.call_args.kwargs["json"]
        self.assertEqual(sent["redirect_url"], "healthythako://payment/success?type=trainer_booking")
        self.assertEqual(sent["cancel_url"], "healthythako://payment/cancelled?type=trainer_booking")
        self.assertEqual(sent["metadata"]["origin"], "https://app.test")

    def test_rejects_bad_input_without_calling_gateway(self):
        cases = [
            self._body(order_type="supplements"),
            self._body(amount="0"),
            self._body(amount="abc"),
            self._body(metadata="nope"),
            self._body(order_type="gym_membership"),
        ]
        for body in cases:
            with self.subTest(body=body):
                resp, post = self._post(body)
                self.assertEqual(resp.status_code, 400)
                self.assertFalse(resp.json()["success"])
                post.assert_not_called()

    def test_gateway_refusal(self):
        with self.assertLogs("payments.integrations.uddoktapay", level="ERROR"):
            resp, _ = self._post(self._body(), FakeResponse(400, {"message": "Invalid amount"}))
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Invalid amount", resp.json()["error"])

    @override_settings(UDDOKTAPAY_API_KEY="")
    def test_missing_api_key(self):
        with self.assertLogs("payments.views", level="ERROR"):
            resp, post = self._post(self._body())
        self.assertEqual(resp.status_code, 500)
        post.assert_not_called()
