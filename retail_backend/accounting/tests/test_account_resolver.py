# accounting/tests/test_account_resolver.py

from django.test import TestCase

from accounting.models.account import Account
from accounting.models.chart import ChartOfAccounts
from accounting.services.account_resolver import (
    clear_active_chart_cache,
    get_account,
    get_active_chart,
    get_card_receivable_account,
)
from accounting.services.exceptions import AccountResolutionError
from accounting.tests.helpers import seed_chart


class AccountResolverTests(TestCase):
    def setUp(self):
        clear_active_chart_cache()

    def test_semantic_keys_resolve_to_seeded_codes(self):
        seed_chart()

        self.assertEqual(get_account("BANK").code, "1010")
        self.assertEqual(get_account("inventory").code, "1200")
        self.assertEqual(get_card_receivable_account().code, "1110")
        self.assertEqual(get_account("THEFT_EXPENSE").account_type, Account.EXPENSE)

    def test_unknown_semantic_key_hard_fails(self):
        seed_chart()
        with self.assertRaises(AccountResolutionError):
            get_account("PETTY_CASH")

    def test_missing_account_hard_fails(self):
        seed_chart()
        Account.objects.filter(code="6200").update(is_active=False)
        with self.assertRaises(AccountResolutionError):
            get_account("CARD_COMMISSION_EXPENSE")

    def test_bootstrap_creates_default_chart_when_none_active(self):
        self.assertFalse(ChartOfAccounts.objects.exists())

        chart = get_active_chart()

        self.assertTrue(chart.is_active)
        self.assertEqual(chart.code, "retail_do_standard")
        self.assertEqual(ChartOfAccounts.objects.filter(is_active=True).count(), 1)

    def test_seed_is_idempotent(self):
        seed_chart()
        seed_chart()

        self.assertEqual(ChartOfAccounts.objects.count(), 1)
        self.assertEqual(Account.objects.count(), 17)
