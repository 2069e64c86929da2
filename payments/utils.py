from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from urllib.parse import urlsplit

from django.conf import settings

CENT = Decimal("0.01")


def to_amount(value) -> Decimal:
    """Parse a gateway/client amount into a 2-place Decimal; raises ValueError."""
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, AttributeError):
        raise ValueError(f"Invalid amount value: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Invalid amount value: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def commission_rate() -> Decimal:
    return Decimal(str(getattr(settings, "PAYMENTS_COMMISSION_RATE", "0.10")))


def split_commission(amount) -> tuple[Decimal, Decimal]:
    """Return (commission, net_amount); net is the exact complement of the rounded commission."""
    amount = to_amount(amount)
    commission = (amount * commission_rate()).quantize(CENT, rounding=ROUND_HALF_UP)
    return commission, amount - commission


def origin_from_headers(headers) -> str:
    origin = headers.get("Origin") or ""
    if not origin:
        referer = urlsplit(headers.get("Referer") or "")
        if referer.scheme and referer.netloc:
            origin = f"{referer.scheme}://{referer.netloc}"
    return origin.rstrip("/")


def app_base_url(metadata: dict) -> str:
    base = (metadata or {}).get("origin") or (metadata or {}).get("app_url") or settings.PAYMENTS_APP_URL
    return str(base).rstrip("/")
