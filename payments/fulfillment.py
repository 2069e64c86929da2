"""Turn a verified, completed payment into an order record plus queued side effects.

Every handler keys its record on the gateway invoice id, so processing the
same invoice again returns the existing record and queues nothing.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional
from urllib.parse import urlencode

from django.db import DatabaseError, models, transaction
from django.utils import timezone

from bookings.models import GymMembership, ServiceOrder, TrainerBooking

from . import outbox
from .exceptions import FulfillmentError
from .integrations.uddoktapay import VerificationResult
from .metadata import (
    GYM_MEMBERSHIP, SERVICE_ORDER, TRAINER_BOOKING,
    GymMembershipData, OrderMetadata, ServiceOrderData, TrainerBookingData,
)
from .models import PostCommitAction
from .utils import app_base_url, to_amount

logger = logging.getLogger(__name__)

PAYMENT_METHOD = "uddoktapay"


@dataclass
class FulfillmentOutcome:
    order_type: str
    record: models.Model
    created: bool
    redirect_url: Optional[str] = None
    actions: List[PostCommitAction] = field(default_factory=list)


def _ledger(order_type, record, result: VerificationResult, user_id, description, trainer_id="", gym_id=""):
    return (PostCommitAction.LEDGER, {
        "order_type": order_type,
        "order_id": str(record.pk),
        "invoice_id": result.invoice_id,
        "payment_session_id": result.reference,
        "user_id": user_id,
        "trainer_id": trainer_id,
        "gym_id": gym_id,
        "amount": str(to_amount(result.amount)),
        "description": description,
        "transaction_date": timezone.now().isoformat(),
    })


def _notify(*entries):
    return (PostCommitAction.NOTIFY, {"notifications": list(entries)})


def _service_order_notes(data: ServiceOrderData) -> str:
    return "\n".join([
        "Service Order Details:",
        f"- Package: {data.package_type}",
        f"- Quantity: {data.quantity}",
        f"- Delivery Days: {data.delivery_days}",
        f"- Urgent: {'Yes' if data.urgent_delivery else 'No'}",
        f"- Requirements: {data.requirements}",
    ])


def fulfill_service_order(data: ServiceOrderData, result: VerificationResult, today: date):
    description = f"Service Order: {data.requirements}"
    if data.additional_notes:
        description += f"\n\nAdditional Notes: {data.additional_notes}"
    record, created = ServiceOrder.objects.get_or_create(
        invoice_id=result.invoice_id,
        defaults={
            "user_id": data.user_id,
            "trainer_id": data.trainer_id,
            "service_type": data.service_title or "Training Service",
            "description": description,
            "package_type": data.package_type or "basic",
            "session_count": data.quantity or 1,
            "session_duration": data.delivery_days * 24 * 60,
            "delivery_days": data.delivery_days,
            "urgent_delivery": data.urgent_delivery,
            "booking_type": "online",
            "total_amount": to_amount(result.amount),
            "status": "pending",
            "notes": _service_order_notes(data),
            "payment_method": PAYMENT_METHOD,
            "transaction_id": result.reference,
        },
    )
    if not created:
        return record, created, []
    title = data.service_title or "training service"
    return record, created, [
        _ledger(SERVICE_ORDER, record, result, data.user_id,
                f"Service order payment for {title}", trainer_id=data.trainer_id),
        _notify(
            {"user_id": data.user_id, "type": "service_order_placed", "title": "Service Order Placed",
             "message": f'Your service order "{data.service_title}" has been placed successfully!',
             "related_id": str(record.pk)},
            {"user_id": data.trainer_id, "type": "new_service_order", "title": "New Service Order",
             "message": f'You have received a new service order: "{data.service_title}"',
             "related_id": str(record.pk)},
        ),
    ]


def fulfill_gym_membership(data: GymMembershipData, result: VerificationResult, today: date):
    record, created = GymMembership.objects.get_or_create(
        invoice_id=result.invoice_id,
        defaults={
            "user_id": data.user_id,
            "gym_id": data.gym_id,
            "plan_id": data.plan_id,
            "amount_paid": to_amount(result.amount),
            "start_date": today,
            "end_date": today + timedelta(days=data.duration_days or 30),
            "status": "active",
            "payment_method": PAYMENT_METHOD,
            "transaction_id": result.reference,
        },
    )
    if not created:
        return record, created, []
    # the gym owner is not notified here, only the member
    return record, created, [
        _ledger(GYM_MEMBERSHIP, record, result, data.user_id,
                f"Gym membership payment for {data.gym_name or 'gym'}", gym_id=data.gym_id),
        _notify(
            {"user_id": data.user_id, "type": "membership_activated", "title": "Gym Membership Activated",
             "message": "Your gym membership has been activated successfully!",
             "related_id": str(record.pk)},
        ),
        (PostCommitAction.INCREMENT_MEMBER_COUNT, {"gym_id": data.gym_id}),
    ]


def fulfill_trainer_booking(data: TrainerBookingData, result: VerificationResult, today: date):
    service_type = data.title or f"Training Session with {data.trainer_name or 'trainer'}"
    record, created = TrainerBooking.objects.get_or_create(
        invoice_id=result.invoice_id,
        defaults={
            "user_id": data.user_id,
            "trainer_id": data.trainer_id,
            "service_type": service_type,
            "description": data.description,
            "scheduled_date": data.scheduled_date,
            "scheduled_time": data.scheduled_time,
            "booking_type": data.mode or "online",
            "session_count": data.session_count or 1,
            "package_type": data.package_type or "basic",
            "total_amount": to_amount(result.amount),
            "status": "confirmed",
            "payment_method": PAYMENT_METHOD,
            "transaction_id": result.reference,
        },
    )
    if not created:
        return record, created, []
    return record, created, [
        _ledger(TRAINER_BOOKING, record, result, data.user_id,
                f"Trainer booking payment for {record.service_type or 'training session'}",
                trainer_id=data.trainer_id),
        _notify(
            {"user_id": data.user_id, "type": "booking_confirmed", "title": "Booking Confirmed",
             "message": "Your training session has been confirmed!", "related_id": str(record.pk)},
            {"user_id": data.trainer_id, "type": "new_booking", "title": "New Booking",
             "message": "You have received a new booking!", "related_id": str(record.pk)},
        ),
    ]


HANDLERS = {
    SERVICE_ORDER: (fulfill_service_order, "service order"),
    GYM_MEMBERSHIP: (fulfill_gym_membership, "gym membership"),
    TRAINER_BOOKING: (fulfill_trainer_booking, "booking"),
}


def membership_redirect_url(record: GymMembership, metadata: dict) -> str:
    query = urlencode({"membership_id": str(record.pk), "type": GYM_MEMBERSHIP})
    return f"{app_base_url(metadata)}/payment-success?{query}"


def fulfill(order: OrderMetadata, result: VerificationResult, today: Optional[date] = None) -> FulfillmentOutcome:
    handler, label = HANDLERS[order.order_type]
    today = today or timezone.localdate()
    try:
        with transaction.atomic():
            record, created, planned = handler(order, result, today)
            queued = [outbox.enqueue(result.invoice_id, kind, payload) for kind, payload in planned]
    except DatabaseError:
        logger.exception("Error creating %s for invoice_id=%s", label, result.invoice_id)
        raise FulfillmentError(f"Failed to create {label}")

    if created:
        logger.info("Created %s %s for invoice_id=%s", label, record.pk, result.invoice_id)
    else:
        logger.info("Invoice %s already fulfilled as %s %s; skipping", result.invoice_id, label, record.pk)
        # a redelivered callback gets another go at side effects that failed last time
        queued = list(PostCommitAction.objects.filter(invoice_id=result.invoice_id,
                                                      status=PostCommitAction.PENDING))

    # side effects are best effort; failures stay queued for process_post_commit_actions
    outbox.dispatch(queued)

    redirect_url = None
    if order.order_type == GYM_MEMBERSHIP:
        redirect_url = membership_redirect_url(record, result.metadata)
    return FulfillmentOutcome(order.order_type, record, created, redirect_url, queued)
