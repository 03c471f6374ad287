from django.core.management.base import BaseCommand

from products.services.stock_fifo import create_initial_lots_for_existing_products


class Command(BaseCommand):
    help = "Create an initial FIFO lot for every stocked product that has no lot history"

    def handle(self, *args, **options):
        created = create_initial_lots_for_existing_products()
        self.stdout.write(self.style.SUCCESS(f"Created {created} initial lots."))
