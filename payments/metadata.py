"""Decode the metadata bag the gateway echoes back into one order variant.

Checkout stamps an explicit ``order_type``; payments created before that only
carry the payload key, so key presence still decides the variant:
``service_order_data`` first, then ``gym_membership_data``, then
``booking_data``.
"""
import json
import logging
from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from django.utils.dateparse import parse_date, parse_time

from .exceptions import InvalidOrderMetadata

logger = logging.getLogger(__name__)

SERVICE_ORDER = "service_order"
GYM_MEMBERSHIP = "gym_membership"
TRAINER_BOOKING = "trainer_booking"

PAYLOAD_KEYS = {
    SERVICE_ORDER: "service_order_data",
    GYM_MEMBERSHIP: "gym_membership_data",
    TRAINER_BOOKING: "booking_data",
}
ORDER_TYPES = tuple(PAYLOAD_KEYS)


@dataclass
class ServiceOrderData:
    user_id: str
    trainer_id: str
    service_title: str = "Training Service"
    package_type: str = "basic"
    quantity: int = 1
    delivery_days: int = 0
    requirements: str = ""
    additional_notes: str = ""
    urgent_delivery: bool = False

    order_type = SERVICE_ORDER


@dataclass
class GymMembershipData:
    user_id: str
    gym_id: str
    plan_id: str = ""
    duration_days: int = 30
    gym_name: str = ""

    order_type = GYM_MEMBERSHIP


@dataclass
class TrainerBookingData:
    user_id: str
    trainer_id: str
    trainer_name: str = ""
    title: str = ""
    description: str = ""
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[time] = None
    mode: str = "online"
    session_count: int = 1
    package_type: str = "basic"

    order_type = TRAINER_BOOKING


OrderMetadata = Union[ServiceOrderData, GymMembershipData, TrainerBookingData]


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(p.title() for p in rest)


class _Payload:
    """Read snake_case or camelCase keys from one decoded payload."""

    def __init__(self, data: dict, kind: str):
        self.data = data
        self.kind = kind

    def get(self, key, default=None):
        for k in (key, _camel(key)):
            value = self.data.get(k)
            if value not in (None, ""):
                return value
        return default

    def text(self, key, default=""):
        value = self.get(key)
        return default if value is None else str(value).strip()

    def required(self, key):
        value = self.text(key)
        if not value:
            raise InvalidOrderMetadata(f"{self.kind} is missing {key}")
        return value

    def integer(self, key, default):
        value = self.get(key)
        if value is None:
            return default
        # 3, 3.0 and "3" are accepted; 7.5, "7.5" and true are not
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            number = None
        integral = number is not None and number.is_finite() and number == number.to_integral_value()
        if isinstance(value, bool) or not integral:
            raise InvalidOrderMetadata(f"{self.kind}.{key} must be an integer, got {value!r}")
        number = int(number)
        if number < 0:
            raise InvalidOrderMetadata(f"{self.kind}.{key} must not be negative")
        return number

    def flag(self, key):
        value = self.get(key, False)
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)


def _decode(raw, kind: str) -> dict:
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str):
        raise InvalidOrderMetadata(f"{kind} must be a JSON object")
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise InvalidOrderMetadata(f"{kind} is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise InvalidOrderMetadata(f"{kind} must be a JSON object")
    return data


def _user_id(p: _Payload, metadata: dict) -> str:
    user_id = p.text("user_id") or str(metadata.get("user_id") or "").strip()
    if not user_id:
        raise InvalidOrderMetadata(f"{p.kind} has no user_id")
    return user_id


def _service_order(p: _Payload, metadata: dict) -> ServiceOrderData:
    return ServiceOrderData(
        user_id=_user_id(p, metadata),
        trainer_id=p.required("trainer_id"),
        service_title=p.text("service_title", "Training Service"),
        package_type=p.text("package_type", "basic"),
        quantity=p.integer("quantity", 1),
        delivery_days=p.integer("delivery_days", 0),
        requirements=p.text("requirements"),
        additional_notes=p.text("additional_notes"),
        urgent_delivery=p.flag("urgent_delivery"),
    )


def _gym_membership(p: _Payload, metadata: dict) -> GymMembershipData:
    return GymMembershipData(
        user_id=_user_id(p, metadata),
        gym_id=p.required("gym_id"),
        plan_id=p.text("plan_id"),
        duration_days=p.integer("duration_days", 30) or 30,
        gym_name=p.text("gym_name"),
    )


def _trainer_booking(p: _Payload, metadata: dict) -> TrainerBookingData:
    raw_date = p.text("scheduled_date")
    raw_time = p.text("scheduled_time")
    try:
        scheduled_date = parse_date(raw_date[:10]) if raw_date else None
        scheduled_time = parse_time(raw_time) if raw_time else None
    except ValueError:
        raise InvalidOrderMetadata(f"{p.kind} has an invalid schedule: {raw_date!r} {raw_time!r}")
    if (raw_date and scheduled_date is None) or (raw_time and scheduled_time is None):
        raise InvalidOrderMetadata(f"{p.kind} has an invalid schedule: {raw_date!r} {raw_time!r}")
    trainer_id = p.text("trainer_id") or str(metadata.get("trainer_id") or "").strip()
    if not trainer_id:
        raise InvalidOrderMetadata(f"{p.kind} is missing trainer_id")
    return TrainerBookingData(
        user_id=_user_id(p, metadata),
        trainer_id=trainer_id,
        trainer_name=p.text("trainer_name"),
        title=p.text("title"),
        description=p.text("description"),
        scheduled_date=scheduled_date,
        scheduled_time=scheduled_time,
        mode=p.text("mode", "online"),
        session_count=p.integer("session_count", 1) or 1,
        package_type=p.text("package_type", "basic"),
    )


DECODERS = {
    SERVICE_ORDER: _service_order,
    GYM_MEMBERSHIP: _gym_membership,
    TRAINER_BOOKING: _trainer_booking,
}


def classify(metadata: dict) -> OrderMetadata:
    metadata = metadata if isinstance(metadata, dict) else {}
    declared = metadata.get("order_type")
    present = [t for t in ORDER_TYPES if metadata.get(PAYLOAD_KEYS[t]) not in (None, "")]
    if present:
        order_type = present[0]
        if len(present) > 1:
            logger.warning("Metadata carries several order payloads %s; using %s", present, order_type)
        if declared and declared != order_type:
            logger.warning("order_type=%s disagrees with payload %s; using %s",
                           declared, PAYLOAD_KEYS[order_type], order_type)
    elif declared == TRAINER_BOOKING:
        # booking checkouts may put the booking fields straight into metadata
        return _trainer_booking(_Payload(metadata, "metadata"), metadata)
    elif declared and declared not in ORDER_TYPES:
        raise InvalidOrderMetadata(f"Unknown order_type {declared!r}")
    elif declared:
        raise InvalidOrderMetadata(f"order_type={declared} but {PAYLOAD_KEYS[declared]} is missing")
    else:
        raise InvalidOrderMetadata("Metadata does not describe a service order, gym membership or booking")

    key = PAYLOAD_KEYS[order_type]
    payload = _Payload(_decode(metadata[key], key), key)
    return DECODERS[order_type](payload, metadata)
