import logging
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from bookings.models import Gym
from notifications.services import create_notifications

from .models import PostCommitAction, Transaction
from .utils import split_commission, to_amount

logger = logging.getLogger(__name__)


def enqueue(invoice_id: str, kind: str, payload: dict) -> PostCommitAction:
    return PostCommitAction.objects.create(invoice_id=invoice_id, kind=kind, payload=payload)


def record_ledger_entry(payload: dict) -> Transaction:
    amount = to_amount(payload["amount"])
    commission, net_amount = split_commission(amount)
    txn, created = Transaction.objects.get_or_create(
        invoice_id=payload["invoice_id"],
        defaults={
            "order_type": payload["order_type"],
            "order_id": payload["order_id"],
            "payment_session_id": payload.get("payment_session_id", ""),
            "user_id": payload["user_id"],
            "trainer_id": payload.get("trainer_id", ""),
            "gym_id": payload.get("gym_id", ""),
            "amount": amount,
            "commission": commission,
            "net_amount": net_amount,
            "description": payload.get("description", "")[:255],
            "transaction_date": parse_datetime(payload.get("transaction_date") or "") or timezone.now(),
        },
    )
    if created:
        logger.info("Ledger entry %s: amount=%s commission=%s net=%s", txn.invoice_id, amount, commission, net_amount)
    return txn


def send_notifications(payload: dict):
    return create_notifications(payload.get("notifications") or [])


def increment_member_count(payload: dict) -> int:
    updated = Gym.objects.filter(gym_id=payload["gym_id"]).update(member_count=F("member_count") + 1)
    if not updated:
        logger.warning("No gym %s to increment member count for", payload["gym_id"])
    return updated


EXECUTORS = {
    PostCommitAction.LEDGER: record_ledger_entry,
    PostCommitAction.NOTIFY: send_notifications,
    PostCommitAction.INCREMENT_MEMBER_COUNT: increment_member_count,
}


def _max_attempts() -> int:
    return int(getattr(settings, "PAYMENTS_ACTION_MAX_ATTEMPTS", 5))


def run_action(action: PostCommitAction, max_attempts: Optional[int] = None) -> Optional[bool]:
    """Claim and run one queued side effect.

    The row is re-read under ``select_for_update(skip_locked=True)``, so a copy
    that another request or the retry command already holds or has finished
    is skipped and ``None`` is returned. Executor failures are logged and kept
    on the row; the return value says whether the executor succeeded.
    """
    with transaction.atomic():
        row = (PostCommitAction.objects.select_for_update(skip_locked=True)
               .filter(pk=action.pk, status=PostCommitAction.PENDING)
               .first())
        if row is None:
            logger.info("Post-commit %s for invoice_id=%s already claimed or processed; skipping",
                        action.kind, action.invoice_id)
            return None

        row.attempts += 1
        try:
            with transaction.atomic():
                EXECUTORS[row.kind](row.payload)
        except Exception as e:
            logger.exception("Post-commit %s failed for invoice_id=%s (attempt %d)",
                             row.kind, row.invoice_id, row.attempts)
            row.last_error = f"{e.__class__.__name__}: {e}"[:2000]
            if row.attempts >= (max_attempts or _max_attempts()):
                row.status = PostCommitAction.FAILED
            row.save(update_fields=["attempts", "last_error", "status"])
            ok = False
        else:
            row.status = PostCommitAction.DONE
            row.last_error = ""
            row.processed_at = timezone.now()
            row.save(update_fields=["attempts", "last_error", "status", "processed_at"])
            ok = True

    action.attempts = row.attempts
    action.status = row.status
    action.last_error = row.last_error
    action.processed_at = row.processed_at
    return ok


def dispatch(actions) -> int:
    """Run actions in order and return how many succeeded.

    Bookkeeping errors are logged per action and never raised; the row stays
    pending for the retry command.
    """
    succeeded = 0
    for action in actions:
        try:
            if run_action(action):
                succeeded += 1
        except Exception:
            logger.exception("Could not record post-commit %s for invoice_id=%s",
                             action.kind, action.invoice_id)
    return succeeded
