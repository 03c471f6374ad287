# products/tests/test_kardex.py

from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from products.models import StockMovement
from products.services.kardex import open_kardex
from products.tests.helpers import make_product


class KardexTests(TestCase):
    def setUp(self):
        self.product = make_product(current_stock=12)
        start = timezone.now() - timedelta(days=3)
        for offset, (movement_type, quantity) in enumerate(
            [
                (StockMovement.MovementType.IN, 10),
                (StockMovement.MovementType.OUT, -3),
                (StockMovement.MovementType.IN, 5),
            ]
        ):
            StockMovement.objects.create(
                product=self.product,
                movement_type=movement_type,
                quantity=quantity,
                unit_cost=Decimal("2.00"),
                movement_date=start + timedelta(hours=offset),
            )

    def test_lines_are_newest_first_with_running_balance(self):
        lines = open_kardex(self.product)

        self.assertEqual([line.movement.quantity for line in lines], [5, -3, 10])
        self.assertEqual([line.balance for line in lines], [12, 7, 10])

    def test_limit_keeps_balances_anchored_on_current_stock(self):
        lines = open_kardex(self.product, limit=2)
        self.assertEqual([line.balance for line in lines], [12, 7])

    def test_empty_history(self):
        other = make_product(sku="SKU-EMPTY")
        self.assertEqual(open_kardex(other), [])

    def test_movement_total_cost_is_derived(self):
        movement = StockMovement.objects.filter(quantity=-3).get()
        self.assertEqual(movement.total_cost, Decimal("6.0000"))

    def test_movements_are_immutable(self):
        movement = StockMovement.objects.first()
        with self.assertRaises(ValidationError):
            movement.save()
        with self.assertRaises(ValidationError):
            movement.delete()

    def test_sign_rules(self):
        with self.assertRaises(ValidationError):
            StockMovement.objects.create(
                product=self.product, movement_type=StockMovement.MovementType.OUT, quantity=2
            )
        with self.assertRaises(ValidationError):
            StockMovement.objects.create(
                product=self.product, movement_type=StockMovement.MovementType.ADJUSTMENT, quantity=0
            )
