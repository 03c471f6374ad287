# accounting/tests/test_posting_rules.py

from decimal import Decimal

from django.test import TestCase

from accounting.models.account import Account
from accounting.models.bank_account import BankAccount
from accounting.models.chart import ChartOfAccounts
from accounting.services.account_resolver import get_account
from accounting.services.exceptions import PostingRuleError
from accounting.services.posting_rules_adjustment import (
    build_adjustment_postings,
    shrinkage_semantic_key,
)
from accounting.services.posting_rules_settlement import build_settlement_postings
from accounting.tests.helpers import seed_chart


def _by_code(postings):
    return {p["account"].code: (p["debit"], p["credit"]) for p in postings}


class SettlementPostingRuleTests(TestCase):
    def setUp(self):
        seed_chart()

    def test_standard_settlement_lines(self):
        postings = build_settlement_postings(
            gross_amount=Decimal("1000"),
            commission_amount=Decimal("38"),
            retention_amount=Decimal("20"),
        )
        lines = _by_code(postings)

        self.assertEqual(lines["1010"], (Decimal("942.00"), Decimal("0.00")))
        self.assertEqual(lines["6200"], (Decimal("38.00"), Decimal("0.00")))
        self.assertEqual(lines["1120"], (Decimal("20.00"), Decimal("0.00")))
        self.assertEqual(lines["1110"], (Decimal("0.00"), Decimal("1000.00")))

    def test_sub_cent_amounts_still_balance(self):
        postings = build_settlement_postings(
            gross_amount=Decimal("600.0050"),
            commission_amount=Decimal("22.8002"),
            retention_amount=Decimal("12.0001"),
        )
        debits = sum(p["debit"] for p in postings)
        credits = sum(p["credit"] for p in postings)

        self.assertEqual(debits, credits)
        self.assertEqual(credits, Decimal("600.01"))

    def test_zero_commission_line_is_omitted(self):
        postings = build_settlement_postings(
            gross_amount=Decimal("100"),
            commission_amount=Decimal("0"),
            retention_amount=Decimal("2"),
        )
        self.assertNotIn("6200", _by_code(postings))

    def test_pinned_bank_ledger_account_is_debited(self):
        chart = ChartOfAccounts.objects.get(is_active=True)
        operating = Account.objects.create(
            chart=chart, code="1011", name="Bank - Operating", account_type=Account.ASSET
        )
        bank = BankAccount.objects.create(
            bank_name="Banco Popular",
            account_name="Operating",
            account_number="7788",
            ledger_account=operating,
        )

        postings = build_settlement_postings(
            gross_amount=Decimal("100"),
            commission_amount=Decimal("3.80"),
            retention_amount=Decimal("2"),
            bank_account=bank,
        )
        lines = _by_code(postings)

        self.assertEqual(lines["1011"], (Decimal("94.20"), Decimal("0.00")))
        self.assertNotIn("1010", lines)

    def test_non_positive_gross_is_rejected(self):
        with self.assertRaises(PostingRuleError):
            build_settlement_postings(
                gross_amount=Decimal("0"),
                commission_amount=Decimal("0"),
                retention_amount=Decimal("0"),
            )


class AdjustmentPostingRuleTests(TestCase):
    def setUp(self):
        seed_chart()

    def test_reason_mapping(self):
        self.assertEqual(shrinkage_semantic_key("damage"), "SHRINKAGE_EXPENSE")
        self.assertEqual(shrinkage_semantic_key("expiration"), "EXPIRATION_EXPENSE")
        self.assertEqual(shrinkage_semantic_key("theft"), "THEFT_EXPENSE")
        self.assertEqual(shrinkage_semantic_key("return_supplier"), "SUPPLIER_ADVANCES")
        with self.assertRaises(PostingRuleError):
            shrinkage_semantic_key("gift")

    def test_shrinkage_debits_expense_and_credits_inventory(self):
        postings = build_adjustment_postings(difference=-8, total_cost=Decimal("80"), reason="theft")
        lines = _by_code(postings)

        self.assertEqual(lines[get_account("THEFT_EXPENSE").code], (Decimal("80.00"), Decimal("0.00")))
        self.assertEqual(lines["1200"], (Decimal("0.00"), Decimal("80.00")))

    def test_found_goods_debit_inventory_and_credit_gain(self):
        postings = build_adjustment_postings(difference=5, total_cost=Decimal("50"), reason="found")
        lines = _by_code(postings)

        self.assertEqual(lines["1200"], (Decimal("50.00"), Decimal("0.00")))
        self.assertEqual(lines["4200"], (Decimal("0.00"), Decimal("50.00")))

    def test_zero_difference_is_rejected(self):
        with self.assertRaises(PostingRuleError):
            build_adjustment_postings(difference=0, total_cost=Decimal("10"), reason="damage")
