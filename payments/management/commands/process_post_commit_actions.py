import time

from django.core.management.base import BaseCommand

from payments.models import PostCommitAction
from payments.outbox import run_action


class Command(BaseCommand):
    help = "Retry ledger entries, notifications and counters that failed after an order was created"

    def add_arguments(self, parser):
        parser.add_argument("--max", type=int, default=100)
        parser.add_argument("--sleep", type=float, default=0.0)
        parser.add_argument("--max-attempts", type=int, default=None,
                            help="Mark an action failed after this many attempts (default PAYMENTS_ACTION_MAX_ATTEMPTS)")
        parser.add_argument("--invoice", default="", help="Only retry actions for this invoice id")

    def handle(self, *args, **opts):
        qs = PostCommitAction.objects.filter(status=PostCommitAction.PENDING)
        if opts["invoice"]:
            qs = qs.filter(invoice_id=opts["invoice"])
        actions = list(qs.order_by("created_at")[:opts["max"]])

        if not actions:
            self.stdout.write(self.style.SUCCESS("No pending actions."))
            return

        ok = 0
        for action in actions:
            result = run_action(action, max_attempts=opts["max_attempts"])
            if result is None:
                self.stdout.write(f"{action.invoice_id}: {action.kind} claimed elsewhere, skipped")
            elif result:
                ok += 1
                self.stdout.write(self.style.SUCCESS(f"{action.invoice_id}: {action.kind} done"))
            else:
                self.stdout.write(self.style.WARNING(
                    f"{action.invoice_id}: {action.kind} {action.status} after {action.attempts} attempt(s): {action.last_error}"
                ))
            if opts["sleep"]:
                time.sleep(opts["sleep"])

        self.stdout.write(self.style.SUCCESS(f"Processed {len(actions)}, succeeded {ok}."))
