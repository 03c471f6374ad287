# sales/tests/test_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.tests.helpers import seed_chart
from sales.models import CardSettlement, Sale
from sales.tests.helpers import make_bank_account, make_sale

User = get_user_model()


class CardSettlementApiTests(TestCase):
    def setUp(self):
        seed_chart()
        self.admin = User.objects.create_superuser(
            username="finance_admin", email="finance@example.com", password="password123"
        )
        self.clerk = User.objects.create_user(username="cashier", password="password123")
        self.bank = make_bank_account()
        self.sale = make_sale("1000.00")
        make_sale("75.00", method=Sale.PaymentMethod.CASH)

        self.client = APIClient()

    def test_anonymous_is_rejected(self):
        resp = self.client.get("/api/sales/settlements/candidates/")
        self.assertEqual(resp.status_code, 401)

    def test_candidates_lists_unsettled_card_sales(self):
        self.client.force_authenticate(self.admin)

        resp = self.client.get("/api/sales/settlements/candidates/")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["count"], 1)
        self.assertEqual(Decimal(resp.data["total"]), Decimal("1000.00"))
        self.assertEqual(resp.data["results"][0]["id"], str(self.sale.pk))

    def test_create_settlement(self):
        self.client.force_authenticate(self.admin)

        resp = self.client.post(
            "/api/sales/settlements/",
            {"sale_ids": [str(self.sale.pk)], "bank_account": self.bank.pk, "deposit_reference": "DEP-1"},
            format="json",
        )

        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual(Decimal(resp.data["net_deposit"]), Decimal("942.0000"))
        self.assertEqual(resp.data["sale_ids"], [str(self.sale.pk)])

        candidates = self.client.get("/api/sales/settlements/candidates/")
        self.assertEqual(candidates.data["count"], 0)

    def test_validation_error_returns_code(self):
        self.client.force_authenticate(self.admin)

        resp = self.client.post(
            "/api/sales/settlements/",
            {"sale_ids": [str(self.sale.pk)], "gross_amount": "900.00", "bank_account": self.bank.pk},
            format="json",
        )

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], "mismatch")
        self.assertFalse(CardSettlement.objects.exists())

    def test_missing_bank_account_returns_code(self):
        self.client.force_authenticate(self.admin)

        resp = self.client.post(
            "/api/sales/settlements/",
            {"sale_ids": [str(self.sale.pk)]},
            format="json",
        )

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], "missing_bank_account")

    def test_create_requires_model_permission(self):
        self.client.force_authenticate(self.clerk)

        resp = self.client.post(
            "/api/sales/settlements/",
            {"sale_ids": [str(self.sale.pk)], "bank_account": self.bank.pk},
            format="json",
        )

        self.assertEqual(resp.status_code, 403)
