import json

from django.core.management.base import BaseCommand, CommandError

from payments.services import build_response, process_payment_callback


class Command(BaseCommand):
    help = "Re-verify invoices with the gateway and fulfil any that are paid but have no order yet"

    def add_arguments(self, parser):
        parser.add_argument("invoice_ids", nargs="+")

    def handle(self, *args, **opts):
        failed = 0
        for invoice_id in opts["invoice_ids"]:
            outcome = process_payment_callback({"invoice_id": invoice_id})
            body, status = build_response(outcome)
            line = f"{invoice_id}: HTTP {status} {json.dumps(body, default=str)}"
            if status == 200:
                self.stdout.write(self.style.SUCCESS(line))
            else:
                failed += 1
                self.stdout.write(self.style.ERROR(line))
        if failed:
            raise CommandError(f"{failed} invoice(s) could not be verified or fulfilled")
