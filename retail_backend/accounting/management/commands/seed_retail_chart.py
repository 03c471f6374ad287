# accounting/management/commands/seed_retail_chart.py

from django.core.management.base import BaseCommand
from django.db import transaction

from accounting.models.account import Account
from accounting.models.chart import ChartOfAccounts
from accounting.services.account_resolver import (
    DEFAULT_BOOTSTRAP_CHART,
    clear_active_chart_cache,
)

RETAIL_ACCOUNTS = [
    ("1000", "Cash", Account.ASSET),
    ("1010", "Bank", Account.ASSET),
    ("1100", "Accounts Receivable", Account.ASSET),
    ("1110", "Card Receivables", Account.ASSET),
    ("1120", "ITBIS Retained by Card Processors", Account.ASSET),
    ("1130", "Supplier Advances", Account.ASSET),
    ("1200", "Inventory", Account.ASSET),
    ("2000", "Accounts Payable", Account.LIABILITY),
    ("2100", "ITBIS Payable", Account.LIABILITY),
    ("3000", "Owner's Equity", Account.EQUITY),
    ("4000", "Sales Revenue", Account.REVENUE),
    ("4200", "Inventory Gains", Account.REVENUE),
    ("5000", "Cost of Goods Sold", Account.EXPENSE),
    ("6100", "Shrinkage / Breakage", Account.EXPENSE),
    ("6110", "Expired Goods", Account.EXPENSE),
    ("6120", "Loss / Theft", Account.EXPENSE),
    ("6200", "Card Processing Commissions", Account.EXPENSE),
]


def _activate_only_this_chart(chart: ChartOfAccounts) -> None:
    ChartOfAccounts.objects.exclude(id=chart.id).filter(is_active=True).update(
        is_active=False
    )
    if not chart.is_active:
        chart.is_active = True
        chart.save(update_fields=["is_active"])
    clear_active_chart_cache()


class Command(BaseCommand):
    help = "Seed Chart of Accounts + required accounts for a Dominican retail business"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding General Retail (DR) Chart of Accounts...")

        chart, created = ChartOfAccounts.objects.get_or_create(
            code=DEFAULT_BOOTSTRAP_CHART["code"],
            defaults={
                "name": DEFAULT_BOOTSTRAP_CHART["name"],
                "industry": DEFAULT_BOOTSTRAP_CHART["industry"],
                "business_type": DEFAULT_BOOTSTRAP_CHART["business_type"],
                "is_active": True,
            },
        )

        _activate_only_this_chart(chart)

        created_count = 0
        updated_count = 0

        for code, name, account_type in RETAIL_ACCOUNTS:
            acc, acc_created = Account.objects.get_or_create(
                chart=chart,
                code=code,
                defaults={
                    "name": name,
                    "account_type": account_type,
                    "is_active": True,
                },
            )

            if acc_created:
                created_count += 1
                continue

            needs_update = False
            if acc.name != name:
                acc.name = name
                needs_update = True
            if acc.account_type != account_type:
                acc.account_type = account_type
                needs_update = True
            if not acc.is_active:
                acc.is_active = True
                needs_update = True

            if needs_update:
                acc.save(update_fields=["name", "account_type", "is_active", "updated_at"])
                updated_count += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"General Retail (DR) chart seeded ({created_count} new accounts, {updated_count} updated)."
            )
        )
