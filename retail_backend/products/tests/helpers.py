# products/tests/helpers.py

from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from products.models import InventoryLot, Product
from products.services.stock_fifo import add_inventory_lot


def make_product(*, sku="SKU-001", name="Test Product", last_price="10.00", current_stock=0, **extra) -> Product:
    """Product whose tax-exclusive cost equals last_price (cost_includes_tax=False)."""
    return Product.objects.create(
        sku=sku,
        name=name,
        last_price=Decimal(last_price),
        cost_includes_tax=False,
        current_stock=current_stock,
        **extra,
    )


def stock_with_lots(product: Product, *lots) -> list[InventoryLot]:
    """
    lots: (quantity, unit_cost) tuples, oldest first.
    Sets current_stock to the lot total.
    """
    base = timezone.localdate() - timedelta(days=len(lots) + 1)
    created = []
    for offset, (quantity, unit_cost) in enumerate(lots):
        created.append(
            add_inventory_lot(
                product=product,
                quantity=quantity,
                unit_cost_ex_tax=Decimal(str(unit_cost)),
                lot_number=f"LOT-{offset + 1}",
                purchase_date=base + timedelta(days=offset),
            )
        )
    product.current_stock = sum(quantity for quantity, _ in lots)
    product.save()
    return created
