"""
======================================================
PATH: accounting/migrations/0001_initial.py
======================================================
MIGRATION: INITIAL ACCOUNTING SCHEMA

Creates:
- ChartOfAccounts / Account (chart-scoped codes)
- JournalEntry / LedgerEntry (immutable double-entry ledger)
- BankAccount (deposit targets for card settlements)
- ItbisSummary (monthly ITBIS position)
"""

from __future__ import annotations

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ChartOfAccounts",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                (
                    "code",
                    models.SlugField(
                        max_length=64,
                        unique=True,
                        help_text="Stable chart key used by resolvers/seeders. Do not change after go-live.",
                    ),
                ),
                (
                    "business_type",
                    models.CharField(
                        max_length=32,
                        choices=[("minimarket", "Mini Market"), ("retail", "General Retail")],
                        db_index=True,
                    ),
                ),
                ("industry", models.CharField(max_length=100, blank=True, default="")),
                ("is_active", models.BooleanField(default=False, db_index=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Chart of Accounts",
                "verbose_name_plural": "Charts of Accounts",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=10)),
                ("name", models.CharField(max_length=150)),
                (
                    "account_type",
                    models.CharField(
                        max_length=20,
                        choices=[
                            ("ASSET", "Asset"),
                            ("LIABILITY", "Liability"),
                            ("EQUITY", "Equity"),
                            ("REVENUE", "Revenue"),
                            ("EXPENSE", "Expense"),
                        ],
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "chart",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="accounts",
                        to="accounting.chartofaccounts",
                    ),
                ),
            ],
            options={
                "verbose_name": "Account",
                "verbose_name_plural": "Accounts",
                "ordering": ["code"],
                "indexes": [
                    models.Index(fields=["chart", "code"], name="acct_chart_code_idx"),
                    models.Index(fields=["chart", "account_type"], name="acct_chart_type_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=["chart", "code"], name="uniq_account_chart_code"),
                    models.CheckConstraint(condition=~models.Q(code=""), name="chk_account_code_not_blank"),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("entry_number", models.CharField(max_length=20, unique=True)),
                (
                    "source_type",
                    models.CharField(
                        max_length=32,
                        choices=[
                            ("card_settlement", "Card Settlement"),
                            ("stock_adjustment", "Stock Adjustment"),
                            ("manual", "Manual"),
                        ],
                        default="manual",
                    ),
                ),
                (
                    "reference",
                    models.CharField(
                        max_length=100,
                        blank=True,
                        null=True,
                        help_text="Source reference (card_settlement:<id>, stock_adjustment:<id>)",
                    ),
                ),
                ("description", models.TextField(help_text="Narrative description of the journal entry")),
                (
                    "posted_at",
                    models.DateTimeField(default=django.utils.timezone.now, help_text="Accounting effective date"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("is_posted", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name": "Journal Entry",
                "verbose_name_plural": "Journal Entries",
                "ordering": ["-posted_at", "-created_at"],
                "indexes": [
                    models.Index(fields=["posted_at"], name="je_posted_at_idx"),
                    models.Index(fields=["source_type"], name="je_source_type_idx"),
                    models.Index(fields=["reference"], name="je_reference_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["reference"],
                        condition=models.Q(reference__isnull=False) & ~models.Q(reference=""),
                        name="uniq_journal_reference_not_blank",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "entry_type",
                    models.CharField(max_length=6, choices=[("DEBIT", "Debit"), ("CREDIT", "Credit")]),
                ),
                (
                    "amount",
                    models.DecimalField(
                        max_digits=14,
                        decimal_places=2,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("memo", models.CharField(max_length=255, blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="accounting.account",
                    ),
                ),
                (
                    "journal_entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="accounting.journalentry",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ledger Entry",
                "verbose_name_plural": "Ledger Entries",
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["account", "entry_type"], name="le_account_type_idx"),
                    models.Index(fields=["journal_entry", "entry_type"], name="le_journal_type_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="BankAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("bank_name", models.CharField(max_length=100)),
                ("account_name", models.CharField(max_length=150)),
                ("account_number", models.CharField(max_length=34, help_text="Last 4 digits or full number")),
                (
                    "account_type",
                    models.CharField(
                        max_length=16,
                        choices=[("checking", "Checking"), ("savings", "Savings"), ("credit", "Credit")],
                        default="checking",
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        max_length=3,
                        choices=[("DOP", "Dominican Peso"), ("USD", "US Dollar")],
                        default="DOP",
                    ),
                ),
                ("is_default", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "ledger_account",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bank_accounts",
                        to="accounting.account",
                        help_text="Ledger account debited for deposits (defaults to the chart's Bank account).",
                    ),
                ),
            ],
            options={
                "ordering": ["-is_default", "bank_name", "account_name"],
            },
        ),
        migrations.CreateModel(
            name="ItbisSummary",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("period", models.CharField(max_length=7, unique=True, help_text="YYYY-MM")),
                ("itbis_collected", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                ("itbis_paid", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                (
                    "itbis_retained_by_cards",
                    models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00")),
                ),
                ("other_retentions", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                (
                    "total_itbis_retained",
                    models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00")),
                ),
                ("net_itbis_due", models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))),
                (
                    "status",
                    models.CharField(
                        max_length=8,
                        choices=[("open", "Open"), ("closed", "Closed")],
                        default="open",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "ITBIS Summary",
                "verbose_name_plural": "ITBIS Summaries",
                "ordering": ["-period"],
            },
        ),
    ]
