from django.core.management.base import BaseCommand

from shop.outbox import dispatch_pending


class Command(BaseCommand):
    help = "Deliver pending and previously failed outbox events (order confirmation e-mails)."

    def add_arguments(self, parser):
        parser.add_argument("--limit", type=int, default=100, help="Maximum events to claim in this run.")
        parser.add_argument(
            "--max-attempts", type=int, default=None,
            help="Skip events that already failed this many times (default: OUTBOX_MAX_ATTEMPTS).",
        )

    def handle(self, *args, **options):
        sent, failed = dispatch_pending(limit=options["limit"], max_attempts=options["max_attempts"])
        self.stdout.write(f"outbox: {sent} sent, {failed} failed")
