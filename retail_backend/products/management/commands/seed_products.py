from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from products.models import Product
from products.services.stock_intake import receive_stock


class Command(BaseCommand):
    help = "Seed demo products and receive an opening FIFO lot for each"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products and stock..."))

        # -------------------------------
        # PRODUCTS
        # sku, name, category, invoiced cost (ITBIS incl.), selling price, qty
        # -------------------------------
        products_data = [
            ("BEB-COLA-600", "Cola 600ml", "Beverages", "35.40", "60.00", 48),
            ("BEB-AGUA-500", "Bottled Water 500ml", "Beverages", "11.80", "25.00", 96),
            ("ALM-ARROZ-5", "Rice 5lb", "Groceries", "177.00", "240.00", 30),
            ("ALM-ACEITE-1", "Vegetable Oil 1L", "Groceries", "212.40", "275.00", 24),
            ("LIM-DETER-1", "Detergent 1kg", "Cleaning", "153.40", "210.00", 18),
        ]

        today = timezone.localdate()
        created_count = 0

        for sku, name, category, cost, price, qty in products_data:
            product, created = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "category": category,
                    "selling_price": Decimal(price),
                    "reorder_point": 10,
                },
            )
            if not created:
                continue

            receive_stock(
                product=product,
                quantity=qty,
                unit_cost=Decimal(cost),
                cost_includes_tax=True,
                lot_number=f"SEED-{sku}",
                expiration_date=today + timedelta(days=180),
                reference="SEED",
            )
            created_count += 1

        self.stdout.write(self.style.SUCCESS(f"Seeded {created_count} products with opening lots."))
