import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Optional

import requests
from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver
from requests import RequestException

from payments.exceptions import ConfigurationError, GatewayError, UpstreamVerificationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://digitaldot.paymently.io"
API_KEY_HEADER = "RT-UDDOKTAPAY-API-KEY"
VERIFY_PATH = "/api/verify-payment"
CHECKOUT_PATH = "/api/checkout-v2"


@dataclass(frozen=True)
class GatewayConfig:
    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 8.0

    def __post_init__(self):
        if not self.api_key:
            raise ConfigurationError("Missing UDDOKTAPAY_API_KEY")

    @classmethod
    def from_settings(cls) -> "GatewayConfig":
        return cls(
            api_key=getattr(settings, "UDDOKTAPAY_API_KEY", "") or "",
            base_url=(getattr(settings, "UDDOKTAPAY_BASE_URL", "") or DEFAULT_BASE_URL).rstrip("/"),
            timeout=float(getattr(settings, "UDDOKTAPAY_TIMEOUT", 8)),
        )


@dataclass
class VerificationResult:
    status: str
    amount: Decimal
    invoice_id: str
    transaction_id: str = ""
    session_id: str = ""
    metadata: dict = field(default_factory=dict)
    redirect_url: Optional[str] = None
    raw: dict = field(default_factory=dict, repr=False)

    @property
    def is_completed(self) -> bool:
        return (self.status or "").upper() == "COMPLETED"

    @property
    def reference(self) -> str:
        """Identifier stored on local records: the session id when the gateway sends one."""
        return self.session_id or self.invoice_id

    @classmethod
    def from_gateway(cls, data: dict, invoice_id: str) -> "VerificationResult":
        try:
            amount = Decimal(str(data.get("amount") or "0"))
        except InvalidOperation:
            amount = None
        if amount is None or not amount.is_finite():
            raise UpstreamVerificationError(f"Gateway returned an invalid amount: {data.get('amount')!r}")
        return cls(
            status=str(data.get("status") or ""),
            amount=amount,
            invoice_id=str(data.get("invoice_id") or invoice_id),
            transaction_id=str(data.get("transaction_id") or ""),
            session_id=str(data.get("session_id") or ""),
            metadata=_metadata_dict(data.get("metadata")),
            redirect_url=data.get("redirect_url") or None,
            raw=data,
        )


@dataclass
class CheckoutSession:
    payment_url: str
    invoice_id: str
    session_id: str
    raw: dict = field(default_factory=dict, repr=False)


def _metadata_dict(value) -> dict:
    # the gateway echoes metadata back either as an object or as a JSON string
    if isinstance(value, dict):
        return value
    if isinstance(value, str) and value.strip():
        try:
            decoded = json.loads(value)
        except ValueError:
            return {}
        return decoded if isinstance(decoded, dict) else {}
    return {}


def _error_message(data: dict, status_code: int) -> str:
    msg = data.get("message") or data.get("error")
    if isinstance(msg, dict):
        msg = msg.get("message")
    return str(msg) if msg else f"HTTP {status_code}"


class UddoktaPayClient:
    def __init__(self, config: GatewayConfig):
        self.config = config

    def _headers(self) -> dict:
        return {
            "accept": "application/json",
            "content-type": "application/json",
            API_KEY_HEADER: self.config.api_key,
        }

    def _post(self, path: str, payload: dict):
        url = f"{self.config.base_url}{path}"
        resp = requests.post(url, headers=self._headers(), json=payload, timeout=self.config.timeout)
        try: data = resp.json()
        except ValueError: data = {"raw": resp.text[:800]}
        if not isinstance(data, dict):
            data = {"raw": data}
        return resp, data

    def verify_payment(self, invoice_id: str) -> VerificationResult:
        try:
            resp, data = self._post(VERIFY_PATH, {"invoice_id": invoice_id})
        except RequestException as e:
            logger.error("Gateway verify request failed for invoice_id=%s: %s", invoice_id, e)
            raise UpstreamVerificationError(f"Gateway request failed: {e.__class__.__name__}")
        if not 200 <= resp.status_code < 300:
            message = _error_message(data, resp.status_code)
            logger.error("Gateway rejected verify for invoice_id=%s: status=%s message=%s",
                         invoice_id, resp.status_code, message)
            raise UpstreamVerificationError(f"Payment verification failed: {message}", resp.status_code)
        result = VerificationResult.from_gateway(data, invoice_id)
        logger.info("Verified invoice_id=%s status=%s amount=%s", invoice_id, result.status, result.amount)
        return result

    def create_checkout(self, *, full_name, email, amount, metadata, redirect_url, cancel_url,
                        webhook_url) -> CheckoutSession:
        payload = {
            "full_name": full_name or "Customer",
            "email": email or "customer@healthythako.com",
            "amount": str(amount),
            "metadata": metadata or {},
            "redirect_url": redirect_url,
            "cancel_url": cancel_url,
            "webhook_url": webhook_url,
        }
        try:
            resp, data = self._post(CHECKOUT_PATH, payload)
        except RequestException as e:
            logger.error("Gateway checkout request failed: %s", e)
            raise GatewayError(f"Gateway request failed: {e.__class__.__name__}")
        if not 200 <= resp.status_code < 300:
            message = _error_message(data, resp.status_code)
            logger.error("Gateway rejected checkout: status=%s message=%s", resp.status_code, message)
            raise GatewayError(f"Payment creation failed: {message}", resp.status_code)

        payment_url = data.get("payment_url") or data.get("checkout_url") or data.get("url")
        if not payment_url:
            logger.error("Gateway checkout response without payment URL: %s", json.dumps(data)[:800])
            raise GatewayError("Payment URL not provided by payment gateway", resp.status_code)
        invoice_id = data.get("invoice_id") or data.get("session_id") or data.get("id") or ""
        session_id = data.get("session_id") or data.get("invoice_id") or data.get("id") or ""
        return CheckoutSession(payment_url=payment_url, invoice_id=str(invoice_id),
                               session_id=str(session_id), raw=data)


_client = None


def get_client() -> UddoktaPayClient:
    """Client built from settings once per process; raises ConfigurationError without a key."""
    global _client
    if _client is None:
        _client = UddoktaPayClient(GatewayConfig.from_settings())
    return _client


@receiver(setting_changed)
def _reset_client(*, setting, **kwargs):
    global _client
    if setting.startswith("UDDOKTAPAY_"):
        _client = None
