import logging
from dataclasses import dataclass
from typing import Optional

from .exceptions import (
    ConfigurationError, FulfillmentError, FulfillmentFailure, MissingIdentifier, PaymentError,
    VerificationFailure,
)
from .fulfillment import FulfillmentOutcome, fulfill
from .integrations.uddoktapay import UddoktaPayClient, VerificationResult, get_client
from .metadata import classify

logger = logging.getLogger(__name__)


@dataclass
class PaymentOutcome:
    result: Optional[VerificationResult] = None
    fulfillment: Optional[FulfillmentOutcome] = None
    error: Optional[PaymentError] = None

    @property
    def verified(self) -> bool:
        return self.result is not None


def extract_invoice_id(payload) -> str:
    """Manual checks send ``invoice_id``; gateway webhooks send ``order_id``."""
    if not isinstance(payload, dict):
        raise MissingIdentifier("No invoice_id or order_id provided")
    for key in ("invoice_id", "order_id"):
        value = payload.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    raise MissingIdentifier("No invoice_id or order_id provided")


def process_payment_callback(payload, client: Optional[UddoktaPayClient] = None) -> PaymentOutcome:
    """Verify the invoice named in ``payload`` and fulfil it when the gateway says COMPLETED.

    Verification problems come back as an outcome without a result. Once the
    gateway has confirmed the payment, any failure to fulfil it is reported
    alongside the verified result so the payment is never shown as failed.
    """
    try:
        client = client or get_client()
        invoice_id = extract_invoice_id(payload)
        result = client.verify_payment(invoice_id)
    except (ConfigurationError, VerificationFailure) as e:
        logger.error("Payment verification failed: %s", e)
        return PaymentOutcome(error=e)

    if not result.is_completed:
        logger.info("Invoice %s is %s; nothing to fulfil", result.invoice_id, result.status or "UNKNOWN")
        return PaymentOutcome(result=result)

    try:
        order = classify(result.metadata)
        outcome = fulfill(order, result)
    except FulfillmentFailure as e:
        logger.error("Invoice %s was paid but could not be fulfilled: %s", result.invoice_id, e)
        return PaymentOutcome(result=result, error=e)
    except Exception:
        logger.exception("Unexpected error fulfilling paid invoice %s", result.invoice_id)
        return PaymentOutcome(result=result, error=FulfillmentError("Failed to process payment"))
    return PaymentOutcome(result=result, fulfillment=outcome)


def build_response(outcome: PaymentOutcome) -> tuple[dict, int]:
    """Return the JSON body and HTTP status for a processed callback."""
    if not outcome.verified:
        if isinstance(outcome.error, ConfigurationError):
            return {"success": False, "error": "Payment gateway is not configured"}, 500
        return {"success": False, "error": str(outcome.error)}, 400

    result = outcome.result
    body = {
        "success": outcome.error is None,
        "status": result.status,
        "transaction_id": result.transaction_id or result.reference,
        "amount": str(result.amount),
        "metadata": result.metadata,
    }
    if outcome.error is not None:
        body.update({
            "payment_verified": True,
            "error": str(outcome.error),
            "error_code": outcome.error.code,
        })
        return body, 500

    redirect_url = (outcome.fulfillment and outcome.fulfillment.redirect_url) or result.redirect_url
    if redirect_url:
        body["redirect_url"] = redirect_url
    if outcome.fulfillment is not None and not outcome.fulfillment.created:
        body["duplicate"] = True
    return body, 200
