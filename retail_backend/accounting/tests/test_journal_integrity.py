# accounting/tests/test_journal_integrity.py

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry
from accounting.services.account_resolver import get_account
from accounting.services.exceptions import IdempotencyError, JournalEntryCreationError
from accounting.services.journal_entry_service import (
    create_journal_entry,
    get_account_balance,
)
from accounting.tests.helpers import seed_chart


class JournalEntryServiceTests(TestCase):
    def setUp(self):
        seed_chart()
        self.cash = get_account("CASH")
        self.sales = get_account("SALES_REVENUE")

    def _post(self, amount="100.00", **kwargs):
        return create_journal_entry(
            description=kwargs.pop("description", "Test sale"),
            postings=[
                {"account": self.cash, "debit": amount, "credit": "0.00"},
                {"account": self.sales, "debit": "0.00", "credit": amount},
            ],
            **kwargs,
        )

    def test_create_journal_entry_balanced_creates_ledger(self):
        je = self._post(reference_type="TEST", reference_id="A1")

        self.assertIsInstance(je, JournalEntry)
        self.assertEqual(je.reference, "TEST:A1")
        self.assertEqual(je.source_type, JournalEntry.SourceType.MANUAL)

        lines = LedgerEntry.objects.filter(journal_entry=je)
        self.assertEqual(lines.count(), 2)
        self.assertEqual(je.total_debit, Decimal("100.00"))
        self.assertEqual(je.total_credit, Decimal("100.00"))

    def test_unbalanced_raises(self):
        with self.assertRaises(JournalEntryCreationError):
            create_journal_entry(
                description="Bad entry",
                postings=[
                    {"account": self.cash, "debit": "100.00", "credit": "0.00"},
                    {"account": self.sales, "debit": "0.00", "credit": "90.00"},
                ],
            )
        self.assertFalse(JournalEntry.objects.exists())

    def test_empty_postings_raise(self):
        with self.assertRaises(JournalEntryCreationError):
            create_journal_entry(description="Nothing", postings=[])

    def test_two_sided_line_raises(self):
        with self.assertRaises(JournalEntryCreationError):
            create_journal_entry(
                description="Both sides",
                postings=[{"account": self.cash, "debit": "5.00", "credit": "5.00"}],
            )

    def test_duplicate_reference_is_idempotency_error(self):
        self._post(reference_type="TEST", reference_id="DUP")
        with self.assertRaises(IdempotencyError):
            self._post(reference_type="TEST", reference_id="DUP")
        self.assertEqual(JournalEntry.objects.filter(reference="TEST:DUP").count(), 1)

    def test_entry_numbers_are_sequential_per_year(self):
        posted = timezone.make_aware(datetime(2025, 3, 10, 12, 0))
        first = self._post(posted_at=posted)
        second = self._post(posted_at=posted)
        other_year = self._post(posted_at=timezone.make_aware(datetime(2026, 1, 2, 9, 0)))

        self.assertEqual(first.entry_number, "JE-2025-00001")
        self.assertEqual(second.entry_number, "JE-2025-00002")
        self.assertEqual(other_year.entry_number, "JE-2026-00001")

    def test_memo_is_stored_on_lines(self):
        je = create_journal_entry(
            description="With memo",
            postings=[
                {"account": self.cash, "debit": "10.00", "memo": "till"},
                {"account": self.sales, "credit": "10.00", "memo": "counter"},
            ],
        )
        memos = set(je.ledger_entries.values_list("memo", flat=True))
        self.assertEqual(memos, {"till", "counter"})

    def test_journal_entry_is_immutable(self):
        je = self._post()
        je.description = "changed"
        with self.assertRaises(ValidationError):
            je.save()
        with self.assertRaises(ValidationError):
            je.delete()

    def test_ledger_entry_is_immutable(self):
        je = self._post()
        line = je.ledger_entries.first()
        with self.assertRaises(ValidationError):
            line.save()
        with self.assertRaises(ValidationError):
            line.delete()

    def test_account_balance_follows_normal_side(self):
        self._post(amount="100.00")
        self._post(amount="25.50")

        self.assertEqual(get_account_balance(self.cash), Decimal("125.50"))
        self.assertEqual(get_account_balance(self.sales), Decimal("125.50"))
