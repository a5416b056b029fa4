from django.core.management.base import BaseCommand, CommandError

from storefront.exceptions import StorefrontError
from storefront.orders.models import OrderStatus
from storefront.orders.services import transition_order


class Command(BaseCommand):
    help = "Move an order along its lifecycle (paid, shipped, delivered, cancelled)."

    def add_arguments(self, parser):
        parser.add_argument("order_id")
        parser.add_argument("status", choices=[s.value for s in OrderStatus])

    def handle(self, *args, **options):
        try:
            order = transition_order(options["order_id"], options["status"])
        except StorefrontError as e:
            raise CommandError(e.message) from e
        self.stdout.write(self.style.SUCCESS(f"{order.order_number} is now {order.status}"))
