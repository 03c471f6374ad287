# accounting/tests/test_itbis_service.py

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.models.itbis import ItbisSummary
from accounting.services.exceptions import TaxRecordError
from accounting.services.itbis_service import (
    close_period,
    get_or_create_summary,
    get_period,
    record_card_retention,
    record_other_retention,
    reopen_period,
)

User = get_user_model()


class ItbisServiceTests(TestCase):
    def test_get_period(self):
        self.assertEqual(get_period(date(2025, 7, 3)), "2025-07")
        self.assertEqual(get_period("2025-12-31"), "2025-12")
        with self.assertRaises(TaxRecordError):
            get_period("not-a-date")

    def test_card_retention_accumulates_and_reduces_net_due(self):
        summary = get_or_create_summary("2025-07")
        summary.itbis_collected = Decimal("500.00")
        summary.itbis_paid = Decimal("100.00")
        summary.save()

        record_card_retention(date(2025, 7, 3), Decimal("20"))
        summary = record_card_retention(date(2025, 7, 20), Decimal("12.0001"))

        self.assertEqual(summary.itbis_retained_by_cards, Decimal("32.00"))
        self.assertEqual(summary.total_itbis_retained, Decimal("32.00"))
        self.assertEqual(summary.net_itbis_due, Decimal("368.00"))

    def test_other_retentions_are_tracked_separately(self):
        record_card_retention(date(2025, 8, 1), Decimal("10"))
        summary = record_other_retention(date(2025, 8, 2), Decimal("5"))

        self.assertEqual(summary.itbis_retained_by_cards, Decimal("10.00"))
        self.assertEqual(summary.other_retentions, Decimal("5.00"))
        self.assertEqual(summary.total_itbis_retained, Decimal("15.00"))

    def test_closed_period_rejects_recording(self):
        ItbisSummary.objects.create(period="2025-01", status=ItbisSummary.Status.CLOSED)
        with self.assertRaises(TaxRecordError):
            record_card_retention(date(2025, 1, 15), Decimal("3"))

    def test_negative_amount_rejected(self):
        with self.assertRaises(TaxRecordError):
            record_card_retention(date(2025, 2, 1), Decimal("-1"))

    def test_invalid_period_rejected(self):
        with self.assertRaises(TaxRecordError):
            get_or_create_summary("2025-13")

    def test_close_period_refuses_recording_until_reopened(self):
        record_card_retention(date(2025, 3, 4), Decimal("7"))

        summary = close_period("2025-03")
        self.assertTrue(summary.is_closed)
        with self.assertRaises(TaxRecordError):
            record_card_retention(date(2025, 3, 20), Decimal("3"))

        summary = reopen_period("2025-03")
        self.assertFalse(summary.is_closed)
        summary = record_card_retention(date(2025, 3, 20), Decimal("3"))
        self.assertEqual(summary.itbis_retained_by_cards, Decimal("10.00"))

    def test_close_and_reopen_are_idempotent(self):
        close_period("2025-04")
        self.assertTrue(close_period("2025-04").is_closed)

        reopen_period("2025-04")
        self.assertFalse(reopen_period("2025-04").is_closed)

    def test_close_rejects_invalid_period(self):
        with self.assertRaises(TaxRecordError):
            close_period("2025-00")


class ItbisPeriodStatusApiTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_superuser(
            username="tax_admin", email="tax@example.com", password="password123"
        )
        self.clerk = User.objects.create_user(username="clerk", password="password123")
        self.client = APIClient()

    def test_close_and_reopen(self):
        self.client.force_authenticate(self.admin)

        resp = self.client.post("/api/accounting/itbis-summary/2025-05/close/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["status"], ItbisSummary.Status.CLOSED)

        resp = self.client.post("/api/accounting/itbis-summary/2025-05/reopen/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(ItbisSummary.objects.get(period="2025-05").status, ItbisSummary.Status.OPEN)

    def test_invalid_period_returns_code(self):
        self.client.force_authenticate(self.admin)

        resp = self.client.post("/api/accounting/itbis-summary/2025-13/close/")

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], "invalid_period")

    def test_requires_change_permission(self):
        self.client.force_authenticate(self.clerk)

        resp = self.client.post("/api/accounting/itbis-summary/2025-05/close/")

        self.assertEqual(resp.status_code, 403)
        self.assertFalse(ItbisSummary.objects.exists())
