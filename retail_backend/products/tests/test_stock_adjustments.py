# products/tests/test_stock_adjustments.py

from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings

from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry
from accounting.services.exceptions import JournalEntryCreationError
from accounting.tests.helpers import seed_chart
from products.models import CostConsumption, InventoryLot, StockAdjustment, StockMovement
from products.services.stock_adjustments import StockAdjustmentError, save_adjustment
from products.tests.helpers import make_product, stock_with_lots

User = get_user_model()


def _lines(entry):
    return {
        (le.account.code, le.entry_type): le.amount
        for le in LedgerEntry.objects.filter(journal_entry=entry).select_related("account")
    }


class ShrinkageAdjustmentTests(TestCase):
    """
    GUARANTEES:
    - stock is set to the physical count
    - lots are consumed oldest first
    - the loss is expensed against Inventory
    """

    def setUp(self):
        seed_chart()
        self.user = User.objects.create_user(username="counter", password="password123")
        self.product = make_product(last_price="10.00")
        self.old_lot, self.new_lot = stock_with_lots(self.product, (30, "10.00"), (20, "12.00"))

    def test_shrinkage_reduces_stock_and_posts_expense(self):
        movement = save_adjustment(
            product=self.product, actual_count=42, reason="damage", user=self.user
        )

        self.assertEqual(movement.movement_type, StockMovement.MovementType.ADJUSTMENT)
        self.assertEqual(movement.quantity, -8)
        self.assertEqual(movement.unit_cost, Decimal("10.0000"))
        self.assertEqual(movement.total_cost, Decimal("80.0000"))
        self.assertEqual(movement.performed_by, self.user)

        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, 42)
        self.assertIsNotNone(self.product.last_stock_update)

        adjustment = movement.adjustment
        self.assertEqual(adjustment.theoretical_stock, 50)
        self.assertEqual(adjustment.actual_count, 42)
        self.assertEqual(adjustment.difference, -8)
        self.assertIsNotNone(adjustment.journal_entry)

        lines = _lines(adjustment.journal_entry)
        self.assertEqual(lines[("6100", LedgerEntry.DEBIT)], Decimal("80.00"))
        self.assertEqual(lines[("1200", LedgerEntry.CREDIT)], Decimal("80.00"))
        self.assertEqual(adjustment.journal_entry.reference, f"stock_adjustment:{adjustment.pk}")

    def test_shrinkage_consumes_oldest_lot_first(self):
        save_adjustment(product=self.product, actual_count=42, reason="physical_count")

        self.old_lot.refresh_from_db()
        self.new_lot.refresh_from_db()
        self.assertEqual(self.old_lot.remaining_quantity, 22)
        self.assertEqual(self.new_lot.remaining_quantity, 20)

        consumption = CostConsumption.objects.get()
        self.assertEqual(consumption.lot, self.old_lot)
        self.assertEqual(consumption.quantity, 8)
        self.assertEqual(consumption.total_cost, Decimal("80.0000"))

    def test_shrinkage_spanning_lots(self):
        save_adjustment(product=self.product, actual_count=15, reason="damage")

        self.old_lot.refresh_from_db()
        self.new_lot.refresh_from_db()
        self.assertEqual(self.old_lot.remaining_quantity, 0)
        self.assertEqual(self.old_lot.status, InventoryLot.Status.DEPLETED)
        self.assertEqual(self.new_lot.remaining_quantity, 15)

        total = sum(c.total_cost for c in CostConsumption.objects.all())
        self.assertEqual(total, Decimal("360.0000"))

    def test_theft_is_expensed_to_theft_account(self):
        movement = save_adjustment(product=self.product, actual_count=48, reason="theft")
        lines = _lines(movement.adjustment.journal_entry)
        self.assertEqual(lines[("6120", LedgerEntry.DEBIT)], Decimal("20.00"))

    def test_return_to_supplier_becomes_supplier_advance(self):
        movement = save_adjustment(product=self.product, actual_count=45, reason="return_supplier")
        lines = _lines(movement.adjustment.journal_entry)
        self.assertEqual(lines[("1130", LedgerEntry.DEBIT)], Decimal("50.00"))
        self.assertEqual(lines[("1200", LedgerEntry.CREDIT)], Decimal("50.00"))


class FoundGoodsAdjustmentTests(TestCase):
    def setUp(self):
        seed_chart()
        self.product = make_product(last_price="10.00")
        stock_with_lots(self.product, (20, "10.00"))

    def test_found_goods_create_lot_and_post_gain(self):
        movement = save_adjustment(product=self.product, actual_count=25, reason="found")

        self.assertEqual(movement.quantity, 5)
        self.assertEqual(movement.total_cost, Decimal("50.0000"))
        self.assertIsNotNone(movement.lot)
        self.assertEqual(movement.lot.source, InventoryLot.Source.ADJUSTMENT)
        self.assertEqual(movement.lot.original_quantity, 5)
        self.assertEqual(movement.lot.unit_cost, Decimal("10.0000"))

        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, 25)

        lines = _lines(movement.adjustment.journal_entry)
        self.assertEqual(lines[("1200", LedgerEntry.DEBIT)], Decimal("50.00"))
        self.assertEqual(lines[("4200", LedgerEntry.CREDIT)], Decimal("50.00"))
        self.assertFalse(CostConsumption.objects.exists())


class AdjustmentValidationTests(TestCase):
    def setUp(self):
        seed_chart()
        self.product = make_product(reorder_point=10)
        stock_with_lots(self.product, (50, "10.00"))

    def _assert_nothing_written(self):
        self.assertFalse(StockAdjustment.objects.exists())
        self.assertFalse(StockMovement.objects.exists())
        self.assertFalse(JournalEntry.objects.exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, 50)

    def test_matching_count_is_rejected(self):
        with self.assertRaises(StockAdjustmentError) as ctx:
            save_adjustment(product=self.product, actual_count=50, reason="physical_count")

        self.assertEqual(ctx.exception.code, "no_difference")
        self._assert_nothing_written()

    def test_negative_count_is_rejected(self):
        with self.assertRaises(StockAdjustmentError) as ctx:
            save_adjustment(product=self.product, actual_count=-1, reason="damage")

        self.assertEqual(ctx.exception.code, "invalid_count")
        self._assert_nothing_written()

    def test_unknown_reason_is_rejected(self):
        with self.assertRaises(StockAdjustmentError) as ctx:
            save_adjustment(product=self.product, actual_count=40, reason="vanished")

        self.assertEqual(ctx.exception.code, "invalid_reason")
        self._assert_nothing_written()


class AdjustmentLedgerFailureTests(TestCase):
    """
    The journal entry is a secondary effect: when it fails the stock
    change still stands and the adjustment has no journal link.
    """

    def setUp(self):
        seed_chart()
        self.product = make_product()
        stock_with_lots(self.product, (50, "10.00"))

    def test_journal_failure_keeps_stock_change(self):
        with mock.patch(
            "products.services.stock_adjustments.post_stock_adjustment_to_ledger",
            side_effect=JournalEntryCreationError("ledger unavailable"),
        ):
            with self.assertLogs("products.services.stock_adjustments", level="ERROR"):
                movement = save_adjustment(product=self.product, actual_count=42, reason="damage")

        self.assertTrue(StockMovement.objects.filter(pk=movement.pk).exists())
        adjustment = StockAdjustment.objects.get()
        self.assertIsNone(adjustment.journal_entry)
        self.assertFalse(JournalEntry.objects.exists())

        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, 42)

    @override_settings(ACCOUNTING_POSTING_ENABLED=False)
    def test_posting_disabled_skips_journal(self):
        movement = save_adjustment(product=self.product, actual_count=45, reason="damage")

        self.assertIsNone(movement.adjustment.journal_entry)
        self.assertFalse(JournalEntry.objects.exists())


class LegacyStockAdjustmentTests(TestCase):
    """Products with stock but no lot history are costed at their fallback cost."""

    def setUp(self):
        seed_chart()
        self.product = make_product(last_price="11.80", current_stock=10)
        self.product.cost_includes_tax = True
        self.product.save()

    def test_shrinkage_without_lots_uses_fallback_cost(self):
        movement = save_adjustment(product=self.product, actual_count=6, reason="damage")

        self.assertEqual(movement.unit_cost, Decimal("10.0000"))
        self.assertEqual(movement.total_cost, Decimal("40.0000"))

        consumption = CostConsumption.objects.get()
        self.assertIsNone(consumption.lot)
        self.assertEqual(consumption.quantity, 4)
