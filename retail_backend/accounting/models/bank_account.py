# accounting/models/bank_account.py

"""
BANK ACCOUNT

A real-world bank account that receives deposits (card settlements,
transfers). Optionally pinned to a ledger Account; when not pinned,
postings fall back to the chart's semantic BANK account.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models, transaction

from accounting.models.account import Account


class BankAccount(models.Model):
    class AccountType(models.TextChoices):
        CHECKING = "checking", "Checking"
        SAVINGS = "savings", "Savings"
        CREDIT = "credit", "Credit"

    class Currency(models.TextChoices):
        DOP = "DOP", "Dominican Peso"
        USD = "USD", "US Dollar"

    bank_name = models.CharField(max_length=100)
    account_name = models.CharField(max_length=150)
    account_number = models.CharField(
        max_length=34,
        help_text="Last 4 digits or full number",
    )
    account_type = models.CharField(
        max_length=16,
        choices=AccountType.choices,
        default=AccountType.CHECKING,
    )
    currency = models.CharField(
        max_length=3,
        choices=Currency.choices,
        default=Currency.DOP,
    )

    ledger_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bank_accounts",
        help_text="Ledger account debited for deposits (defaults to the chart's Bank account).",
    )

    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-is_default", "bank_name", "account_name"]

    def __str__(self):
        return f"{self.bank_name} - {self.account_name} ({self.account_number})"

    def clean(self):
        self.bank_name = (self.bank_name or "").strip()
        self.account_name = (self.account_name or "").strip()
        if not self.bank_name:
            raise ValidationError({"bank_name": "bank_name is required"})
        if not self.account_name:
            raise ValidationError({"account_name": "account_name is required"})

        if self.ledger_account_id and self.ledger_account.account_type != Account.ASSET:
            raise ValidationError({"ledger_account": "ledger_account must be an ASSET account"})

    def save(self, *args, **kwargs):
        self.full_clean()
        with transaction.atomic():
            if self.is_default:
                BankAccount.objects.exclude(pk=self.pk).filter(is_default=True).update(
                    is_default=False
                )
            super().save(*args, **kwargs)
