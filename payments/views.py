import json
import logging

from django.conf import settings
from django.http import HttpResponse, JsonResponse
from django.urls import reverse
from django.views.decorators.csrf import csrf_exempt

from .exceptions import ConfigurationError, GatewayError, InvalidOrderMetadata
from .integrations.uddoktapay import get_client
from .metadata import ORDER_TYPES, classify
from .services import build_response, process_payment_callback
from .utils import origin_from_headers, to_amount

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def _cors(resp):
    for key, value in CORS_HEADERS.items():
        resp[key] = value
    return resp


def _json_body(request):
    try:
        return json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        # some gateways post the webhook form-encoded
        return request.POST.dict() or None


def _error(message, status=400):
    return _cors(JsonResponse({"success": False, "error": message}, status=status))


@csrf_exempt
def verify_payment_view(request):
    """Gateway webhook and manual "confirm my payment" endpoint."""
    if request.method == "OPTIONS":
        return _cors(HttpResponse(status=200))
    if request.method != "POST":
        return _error("POST only", status=405)

    body = _json_body(request)
    if body is None:
        return _error("Invalid JSON body")
    outcome = process_payment_callback(body)
    payload, status = build_response(outcome)
    return _cors(JsonResponse(payload, status=status))


@csrf_exempt
def create_payment_view(request):
    """Open a gateway checkout session for a service order, membership or booking."""
    if request.method == "OPTIONS":
        return _cors(HttpResponse(status=200))
    if request.method != "POST":
        return _error("POST only", status=405)

    body = _json_body(request)
    if not isinstance(body, dict):
        return _error("Invalid JSON body")
    try:
        amount = to_amount(body.get("amount"))
    except ValueError:
        return _error("Invalid amount value")
    if amount <= 0:
        return _error("Amount must be greater than zero")

    metadata = body.get("metadata") or {}
    if not isinstance(metadata, dict):
        return _error("metadata must be an object")
    order_type = body.get("order_type") or metadata.get("order_type")
    if order_type not in ORDER_TYPES:
        return _error(f"order_type must be one of: {', '.join(ORDER_TYPES)}")

    origin = origin_from_headers(request.headers) or settings.PAYMENTS_APP_URL.rstrip("/")
    is_mobile_app = bool(metadata.get("is_mobile_app"))
    payment_type = metadata.get("payment_type") or order_type
    metadata = {
        **metadata,
        "order_type": order_type,
        "origin": origin,
        "is_mobile_app": is_mobile_app,
        "payment_type": payment_type,
    }
    try:
        order = classify(metadata)
    except InvalidOrderMetadata as e:
        return _error(str(e))
    if order.order_type != order_type:
        return _error(f"metadata describes a {order.order_type}, not a {order_type}")

    if is_mobile_app:
        scheme = settings.PAYMENTS_APP_SCHEME
        redirect_url = f"{scheme}://payment/success?type={payment_type}"
        cancel_url = f"{scheme}://payment/cancelled?type={payment_type}"
    else:
        redirect_url = body.get("return_url") or f"{origin}/payment-redirect"
        cancel_url = body.get("cancel_url") or f"{origin}/payment-cancelled"

    try:
        session = get_client().create_checkout(
            full_name=body.get("customer_name"),
            email=body.get("customer_email"),
            amount=amount,
            metadata=metadata,
            redirect_url=redirect_url,
            cancel_url=cancel_url,
            webhook_url=request.build_absolute_uri(reverse("payments:verify")),
        )
    except ConfigurationError:
        logger.error("Checkout requested but the payment gateway is not configured")
        return _error("Payment gateway is not configured", status=500)
    except GatewayError as e:
        return _error(str(e))

    logger.info("Checkout %s opened for %s amount=%s", session.invoice_id, order_type, amount)
    return _cors(JsonResponse({
        "success": True,
        "payment_url": session.payment_url,
        "invoice_id": session.invoice_id,
        "session_id": session.session_id,
    }))
