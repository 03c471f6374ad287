# sales/tests/test_settlement_service.py

from datetime import date
from decimal import Decimal
from unittest import mock

from django.test import TestCase

from accounting.models.itbis import ItbisSummary
from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry
from accounting.services.exceptions import JournalEntryCreationError, TaxRecordError
from accounting.services.itbis_service import recalculate_card_retentions
from accounting.tests.helpers import seed_chart
from sales.models import CardSettlement, Sale
from sales.services.settlement_service import (
    SettlementValidationError,
    compute_settlement_amounts,
    create_settlement,
    get_settled_sale_ids,
    get_settlement_candidates,
)
from sales.tests.helpers import make_bank_account, make_sale


class SettlementComputationTests(TestCase):
    def test_standard_rates(self):
        amounts = compute_settlement_amounts(Decimal("1000"), Decimal("0.038"), Decimal("0.02"))

        self.assertEqual(amounts.commission_amount, Decimal("38.0000"))
        self.assertEqual(amounts.retention_amount, Decimal("20.0000"))
        self.assertEqual(amounts.net_deposit, Decimal("942.0000"))

    def test_rates_default_from_settings(self):
        amounts = compute_settlement_amounts("1000")
        self.assertEqual(amounts.commission_rate, Decimal("0.038000"))
        self.assertEqual(amounts.retention_rate, Decimal("0.020000"))
        self.assertEqual(amounts.net_deposit, Decimal("942.0000"))

    def test_net_is_exact_on_stored_amounts(self):
        amounts = compute_settlement_amounts("600.005", "0.038", "0.02")
        self.assertEqual(
            amounts.net_deposit,
            amounts.gross_amount - amounts.commission_amount - amounts.retention_amount,
        )

    def test_non_finite_rate_is_rejected(self):
        for rate in ("NaN", "Infinity", Decimal("-Infinity")):
            with self.assertRaises(SettlementValidationError) as ctx:
                compute_settlement_amounts("100", rate, "0.02")
            self.assertEqual(ctx.exception.code, "invalid_rate")

    def test_rate_out_of_range_is_rejected(self):
        with self.assertRaises(SettlementValidationError) as ctx:
            compute_settlement_amounts("100", "1.5", "0.02")
        self.assertEqual(ctx.exception.code, "invalid_rate")


class CreateSettlementTests(TestCase):
    """
    GUARANTEES:
    - validation rejects before anything is written
    - a sale is settled at most once
    - the journal entry and the ITBIS record follow the settlement
    """

    def setUp(self):
        seed_chart()
        self.bank = make_bank_account()
        self.sale_a = make_sale("400.00", day=date(2025, 3, 3))
        self.sale_b = make_sale("200.00", method=Sale.PaymentMethod.DEBIT_CARD, day=date(2025, 3, 5))

    def _assert_nothing_written(self):
        self.assertFalse(CardSettlement.objects.exists())
        self.assertFalse(JournalEntry.objects.exists())
        self.assertFalse(ItbisSummary.objects.exists())

    def test_gross_mismatch_is_rejected_naming_both_figures(self):
        with self.assertRaises(SettlementValidationError) as ctx:
            create_settlement(sales=[self.sale_a, self.sale_b], gross_amount="500", bank_account=self.bank)

        self.assertEqual(ctx.exception.code, "mismatch")
        self.assertIn("500", str(ctx.exception))
        self.assertIn("600", str(ctx.exception))
        self._assert_nothing_written()

    def test_gross_within_tolerance_succeeds(self):
        settlement = create_settlement(
            sales=[self.sale_a, self.sale_b],
            gross_amount="600.005",
            bank_account=self.bank,
            settlement_date=date(2025, 3, 7),
        )

        self.assertEqual(settlement.gross_amount, Decimal("600.0050"))
        self.assertEqual(
            settlement.net_deposit,
            settlement.gross_amount - settlement.commission_amount - settlement.retention_amount,
        )
        self.assertIsNotNone(settlement.journal_entry)
        self.assertEqual(settlement.journal_entry.total_debit, settlement.journal_entry.total_credit)

    def test_gross_defaults_to_selected_total(self):
        settlement = create_settlement(sales=[self.sale_a, self.sale_b], bank_account=self.bank)

        self.assertEqual(settlement.gross_amount, Decimal("600.0000"))
        self.assertEqual(settlement.period_start, date(2025, 3, 3))
        self.assertEqual(settlement.period_end, date(2025, 3, 5))
        self.assertEqual(set(settlement.sale_ids), {self.sale_a.pk, self.sale_b.pk})
        self.assertEqual(settlement.status, CardSettlement.Status.RECONCILED)

    def test_posts_journal_and_records_retention(self):
        sale = make_sale("1000.00", day=date(2025, 4, 10))
        settlement = create_settlement(
            sales=[sale], bank_account=self.bank, settlement_date=date(2025, 4, 12), deposit_reference="DEP-881"
        )

        self.assertEqual(settlement.commission_amount, Decimal("38.0000"))
        self.assertEqual(settlement.retention_amount, Decimal("20.0000"))
        self.assertEqual(settlement.net_deposit, Decimal("942.0000"))

        entry = settlement.journal_entry
        self.assertEqual(entry.reference, f"card_settlement:{settlement.pk}")
        self.assertEqual(entry.source_type, JournalEntry.SourceType.CARD_SETTLEMENT)
        lines = {
            (le.account.code, le.entry_type): le.amount
            for le in LedgerEntry.objects.filter(journal_entry=entry).select_related("account")
        }
        self.assertEqual(
            lines,
            {
                ("1010", LedgerEntry.DEBIT): Decimal("942.00"),
                ("6200", LedgerEntry.DEBIT): Decimal("38.00"),
                ("1120", LedgerEntry.DEBIT): Decimal("20.00"),
                ("1110", LedgerEntry.CREDIT): Decimal("1000.00"),
            },
        )

        summary = ItbisSummary.objects.get(period="2025-04")
        self.assertEqual(summary.itbis_retained_by_cards, Decimal("20.00"))

    def test_manual_entry_without_sales(self):
        settlement = create_settlement(
            gross_amount="250.00", bank_account=self.bank, settlement_date=date(2025, 5, 2)
        )

        self.assertEqual(settlement.period_start, date(2025, 5, 2))
        self.assertEqual(settlement.period_end, date(2025, 5, 2))
        self.assertEqual(settlement.sale_ids, [])

    def test_settled_sales_leave_the_candidate_set(self):
        self.assertEqual(set(get_settlement_candidates()), {self.sale_a, self.sale_b})

        create_settlement(sales=[self.sale_a], bank_account=self.bank)

        self.assertEqual(list(get_settlement_candidates()), [self.sale_b])
        self.assertEqual(get_settled_sale_ids(), {self.sale_a.pk})

    def test_sale_cannot_be_settled_twice(self):
        create_settlement(sales=[self.sale_a], bank_account=self.bank)

        with self.assertRaises(SettlementValidationError) as ctx:
            create_settlement(sales=[self.sale_a, self.sale_b], bank_account=self.bank)

        self.assertEqual(ctx.exception.code, "already_settled")
        self.assertEqual(CardSettlement.objects.count(), 1)

    def test_settlements_are_disjoint(self):
        first = create_settlement(sales=[self.sale_a], bank_account=self.bank)
        second = create_settlement(sales=[self.sale_b], bank_account=self.bank)

        self.assertFalse(set(first.sale_ids) & set(second.sale_ids))

    def test_non_card_or_unpaid_sales_are_rejected(self):
        cash = make_sale("50.00", method=Sale.PaymentMethod.CASH)
        pending = make_sale("50.00", status=Sale.PaymentStatus.PENDING)

        for sale in (cash, pending):
            with self.assertRaises(SettlementValidationError) as ctx:
                create_settlement(sales=[sale], bank_account=self.bank)
            self.assertEqual(ctx.exception.code, "invalid_sale")

        self._assert_nothing_written()

    def test_unknown_sale_is_rejected(self):
        with self.assertRaises(SettlementValidationError) as ctx:
            create_settlement(sales=["not-a-uuid"], bank_account=self.bank)
        self.assertEqual(ctx.exception.code, "invalid_sale")

    def test_missing_bank_account_is_rejected(self):
        with self.assertRaises(SettlementValidationError) as ctx:
            create_settlement(sales=[self.sale_a], bank_account=None)

        self.assertEqual(ctx.exception.code, "missing_bank_account")
        self._assert_nothing_written()

    def test_non_positive_gross_is_rejected(self):
        for gross in ("0", "-10"):
            with self.assertRaises(SettlementValidationError) as ctx:
                create_settlement(gross_amount=gross, bank_account=self.bank)
            self.assertEqual(ctx.exception.code, "invalid_amount")

        with self.assertRaises(SettlementValidationError) as ctx:
            create_settlement(bank_account=self.bank)
        self.assertEqual(ctx.exception.code, "invalid_amount")

        self._assert_nothing_written()

    def test_non_finite_gross_is_rejected(self):
        for gross in ("NaN", "Infinity", Decimal("NaN")):
            with self.assertRaises(SettlementValidationError) as ctx:
                create_settlement(gross_amount=gross, bank_account=self.bank)
            self.assertEqual(ctx.exception.code, "invalid_amount")

        self._assert_nothing_written()

    def test_gross_rounding_to_zero_is_rejected(self):
        with self.assertRaises(SettlementValidationError) as ctx:
            create_settlement(gross_amount="0.00001", bank_account=self.bank)

        self.assertEqual(ctx.exception.code, "invalid_amount")
        self._assert_nothing_written()

    def test_link_conflict_is_reported_as_already_settled(self):
        create_settlement(sales=[self.sale_a], bank_account=self.bank)

        # validation sees a stale settled set, the unique sale constraint still holds
        with mock.patch(
            "sales.services.settlement_service.get_settled_sale_ids", return_value=set()
        ):
            with self.assertRaises(SettlementValidationError) as ctx:
                create_settlement(sales=[self.sale_a], bank_account=self.bank)

        self.assertEqual(ctx.exception.code, "already_settled")
        self.assertEqual(CardSettlement.objects.count(), 1)


class SettlementSecondaryEffectTests(TestCase):
    """
    Journal entry and ITBIS record are best-effort: their failures are
    logged and the settlement stands.
    """

    def setUp(self):
        seed_chart()
        self.bank = make_bank_account()
        self.sale = make_sale("1000.00", day=date(2025, 6, 1))

    def test_journal_failure_keeps_settlement(self):
        with mock.patch(
            "sales.services.settlement_service.post_card_settlement_to_ledger",
            side_effect=JournalEntryCreationError("ledger unavailable"),
        ):
            with self.assertLogs("sales.services.settlement_service", level="ERROR"):
                settlement = create_settlement(
                    sales=[self.sale], bank_account=self.bank, settlement_date=date(2025, 6, 3)
                )

        settlement.refresh_from_db()
        self.assertIsNone(settlement.journal_entry)
        self.assertFalse(JournalEntry.objects.exists())
        self.assertEqual(get_settled_sale_ids(), {self.sale.pk})
        self.assertEqual(
            ItbisSummary.objects.get(period="2025-06").itbis_retained_by_cards, Decimal("20.00")
        )

    def test_closed_tax_period_keeps_settlement_and_journal(self):
        ItbisSummary.objects.create(period="2025-06", status=ItbisSummary.Status.CLOSED)

        with self.assertLogs("sales.services.settlement_service", level="ERROR"):
            settlement = create_settlement(
                sales=[self.sale], bank_account=self.bank, settlement_date=date(2025, 6, 3)
            )

        self.assertTrue(CardSettlement.objects.filter(pk=settlement.pk).exists())
        self.assertIsNotNone(settlement.journal_entry)
        self.assertEqual(
            ItbisSummary.objects.get(period="2025-06").itbis_retained_by_cards, Decimal("0.00")
        )

    def test_recalculation_repairs_missed_retention(self):
        with mock.patch(
            "sales.services.settlement_service.record_card_retention",
            side_effect=TaxRecordError("tax store unavailable"),
        ):
            with self.assertLogs("sales.services.settlement_service", level="ERROR"):
                create_settlement(sales=[self.sale], bank_account=self.bank, settlement_date=date(2025, 6, 3))

        summary = recalculate_card_retentions("2025-06")
        self.assertEqual(summary.itbis_retained_by_cards, Decimal("20.00"))
