import logging
from typing import Iterable, List

from django.db import transaction

from .models import Notification

logger = logging.getLogger(__name__)


def create_notifications(entries: Iterable[dict]) -> List[Notification]:
    """Insert one notification per entry.

    Each entry needs ``user_id``, ``type``, ``title`` and ``message``;
    ``related_id`` is optional. Entries without a recipient are skipped, the
    rest are written together so a retry never leaves half a batch behind.
    """
    rows = []
    for entry in entries:
        user_id = str(entry.get("user_id") or "").strip()
        if not user_id:
            logger.warning("Skipping %s notification without recipient", entry.get("type"))
            continue
        rows.append(Notification(
            user_id=user_id,
            type=entry["type"],
            title=entry["title"],
            message=entry["message"],
            related_id=str(entry.get("related_id") or ""),
        ))
    if not rows:
        return []
    with transaction.atomic():
        created = Notification.objects.bulk_create(rows)
    logger.info("Created %d notification(s) for related_id=%s", len(created), rows[0].related_id)
    return created
