# products/tests/test_stock_intake.py

from decimal import Decimal
from io import StringIO

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.test import TestCase

from products.models import InventoryLot, Product, StockMovement
from products.services.stock_intake import receive_stock
from products.tests.helpers import make_product


class ReceiveStockTests(TestCase):
    def setUp(self):
        self.product = make_product(last_price="0.00", current_stock=0)
        self.product.cost_includes_tax = True
        self.product.save()

    def test_receipt_creates_lot_movement_and_updates_stock(self):
        result = receive_stock(
            product=self.product,
            quantity=10,
            unit_cost="118.00",
            lot_number="INV-7781",
            reference="INV-7781",
        )

        self.assertEqual(result.lot.unit_cost, Decimal("100.0000"))
        self.assertEqual(result.lot.unit_cost_inc_tax, Decimal("118.0000"))
        self.assertEqual(result.lot.source, InventoryLot.Source.PURCHASE)
        self.assertEqual(result.movement.movement_type, StockMovement.MovementType.IN)
        self.assertEqual(result.movement.quantity, 10)
        self.assertEqual(result.movement.total_cost, Decimal("1000.0000"))

        self.assertEqual(self.product.current_stock, 10)
        self.assertEqual(self.product.last_price, Decimal("118.0000"))
        self.assertEqual(self.product.cost_ex_tax(), Decimal("100.0000"))

    def test_tax_exclusive_cost_is_used_as_is(self):
        result = receive_stock(
            product=self.product, quantity=2, unit_cost="50", cost_includes_tax=False
        )
        self.assertEqual(result.lot.unit_cost, Decimal("50.0000"))
        self.product.refresh_from_db()
        self.assertFalse(self.product.cost_includes_tax)

    def test_invalid_quantity_or_cost(self):
        with self.assertRaises(ValidationError):
            receive_stock(product=self.product, quantity=0, unit_cost="10")
        with self.assertRaises(ValidationError):
            receive_stock(product=self.product, quantity=1, unit_cost="-1")
        self.assertFalse(InventoryLot.objects.exists())


class SeedProductsCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_products", stdout=StringIO())
        call_command("seed_products", stdout=StringIO())

        self.assertEqual(Product.objects.count(), 5)
        self.assertEqual(InventoryLot.objects.count(), 5)
        cola = Product.objects.get(sku="BEB-COLA-600")
        self.assertEqual(cola.current_stock, 48)
        self.assertEqual(cola.lots.get().unit_cost, Decimal("30.0000"))
