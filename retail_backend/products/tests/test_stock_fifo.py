# products/tests/test_stock_fifo.py

from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone

from products.models import CostConsumption, InventoryLot
from products.services.stock_fifo import (
    InsufficientLotsError,
    InventoryLotError,
    add_inventory_lot,
    consume_fifo,
    get_available_quantity,
    get_expired_lots,
    get_expiring_lots,
    get_fifo_cost,
    get_product_inventory_valuation,
    get_total_inventory_valuation,
    get_weighted_average_cost,
    mark_lot_expired,
)
from products.tests.helpers import make_product, stock_with_lots


class FifoConsumptionTests(TestCase):
    def setUp(self):
        self.product = make_product(last_price="9.00")
        self.lot_a, self.lot_b = stock_with_lots(self.product, (5, "10.00"), (10, "12.00"))

    def test_consumes_oldest_lot_first(self):
        result = consume_fifo(product=self.product, quantity=7)

        self.assertEqual(result.quantity, 7)
        self.assertEqual(result.total_cost, Decimal("74.0000"))
        self.assertEqual(result.legacy_quantity, 0)
        self.assertEqual([c.lot_id for c in result.consumptions], [self.lot_a.pk, self.lot_b.pk])

        self.lot_a.refresh_from_db()
        self.lot_b.refresh_from_db()
        self.assertEqual(self.lot_a.remaining_quantity, 0)
        self.assertEqual(self.lot_a.status, InventoryLot.Status.DEPLETED)
        self.assertIsNotNone(self.lot_a.depleted_at)
        self.assertEqual(self.lot_b.remaining_quantity, 8)

    def test_tolerant_mode_costs_shortfall_at_fallback(self):
        with self.assertLogs("products.services.stock_fifo", level="WARNING"):
            result = consume_fifo(product=self.product, quantity=18)

        self.assertEqual(result.legacy_quantity, 3)
        # 5 x 10 + 10 x 12 + 3 x 9
        self.assertEqual(result.total_cost, Decimal("197.0000"))
        self.assertTrue(CostConsumption.objects.filter(lot__isnull=True, quantity=3).exists())

    def test_strict_mode_raises_and_writes_nothing(self):
        with self.assertRaises(InsufficientLotsError):
            consume_fifo(product=self.product, quantity=16, strict=True)

        self.assertFalse(CostConsumption.objects.exists())
        self.lot_a.refresh_from_db()
        self.assertEqual(self.lot_a.remaining_quantity, 5)

    def test_rejects_non_positive_or_fractional_quantity(self):
        with self.assertRaises(InventoryLotError):
            consume_fifo(product=self.product, quantity=0)
        with self.assertRaises(InventoryLotError):
            consume_fifo(product=self.product, quantity=1.5)

    def test_cost_lookups(self):
        self.assertEqual(get_fifo_cost(self.product), Decimal("10.0000"))
        # (5 x 10 + 10 x 12) / 15
        self.assertEqual(get_weighted_average_cost(self.product), Decimal("11.3333"))
        self.assertEqual(get_available_quantity(self.product), 15)

    def test_fifo_cost_falls_back_without_lots(self):
        other = make_product(sku="SKU-NOLOTS", last_price="7.50")
        self.assertEqual(get_fifo_cost(other), Decimal("7.5000"))


class InventoryLotRulesTests(TestCase):
    def setUp(self):
        self.product = make_product()

    def test_lot_derives_tax_inclusive_cost(self):
        lot = add_inventory_lot(
            product=self.product, quantity=4, unit_cost_ex_tax="100", tax_rate=Decimal("0.18")
        )
        self.assertEqual(lot.unit_cost_inc_tax, Decimal("118.0000"))
        self.assertEqual(lot.status, InventoryLot.Status.ACTIVE)

    def test_unit_cost_is_immutable(self):
        lot = add_inventory_lot(product=self.product, quantity=4, unit_cost_ex_tax="10")
        lot.unit_cost = Decimal("11.0000")
        with self.assertRaises(ValidationError):
            lot.save()

    def test_consumed_lot_cannot_be_deleted(self):
        lot = add_inventory_lot(product=self.product, quantity=4, unit_cost_ex_tax="10")
        consume_fifo(product=self.product, quantity=1)
        with self.assertRaises(ValidationError):
            lot.delete()

    def test_zero_quantity_lot_is_rejected(self):
        with self.assertRaises(InventoryLotError):
            add_inventory_lot(product=self.product, quantity=0, unit_cost_ex_tax="10")


class ExpirationAndValuationTests(TestCase):
    def setUp(self):
        today = timezone.localdate()
        self.product = make_product()
        self.expired = add_inventory_lot(
            product=self.product,
            quantity=3,
            unit_cost_ex_tax="10",
            expiration_date=today - timedelta(days=1),
            purchase_date=today - timedelta(days=30),
        )
        self.expiring = add_inventory_lot(
            product=self.product,
            quantity=4,
            unit_cost_ex_tax="20",
            expiration_date=today + timedelta(days=3),
            purchase_date=today - timedelta(days=20),
        )
        self.fresh = add_inventory_lot(
            product=self.product,
            quantity=5,
            unit_cost_ex_tax="30",
            expiration_date=today + timedelta(days=90),
        )

    def test_expiry_queries(self):
        self.assertEqual(list(get_expired_lots()), [self.expired])
        self.assertEqual(list(get_expiring_lots(7)), [self.expiring])

    def test_marking_expired_takes_lot_out_of_rotation(self):
        mark_lot_expired(self.expired)

        self.expired.refresh_from_db()
        self.assertEqual(self.expired.status, InventoryLot.Status.EXPIRED)
        self.assertEqual(self.expired.remaining_quantity, 3)
        self.assertEqual(get_fifo_cost(self.product), Decimal("20.0000"))

    def test_valuation(self):
        product_valuation = get_product_inventory_valuation(self.product)
        self.assertEqual(product_valuation["total_quantity"], 12)
        self.assertEqual(product_valuation["total_value"], Decimal("260.0000"))
        self.assertEqual(len(product_valuation["lots"]), 3)

        total = get_total_inventory_valuation()
        self.assertEqual(total["total_value"], Decimal("260.0000"))
        self.assertEqual(total["total_units"], 12)
        self.assertEqual(total["product_count"], 1)


class InitialLotsCommandTests(TestCase):
    def test_creates_initial_lot_for_legacy_stock(self):
        legacy = make_product(sku="SKU-LEGACY", last_price="5.00", current_stock=12)
        make_product(sku="SKU-EMPTY", current_stock=0)

        out = StringIO()
        call_command("create_initial_lots", stdout=out)

        self.assertIn("Created 1 initial lots.", out.getvalue())
        lot = InventoryLot.objects.get(product=legacy)
        self.assertEqual(lot.source, InventoryLot.Source.INITIAL)
        self.assertEqual(lot.remaining_quantity, 12)
        self.assertEqual(lot.unit_cost, Decimal("5.0000"))

        call_command("create_initial_lots", stdout=StringIO())
        self.assertEqual(InventoryLot.objects.count(), 1)
