# accounting/api/views/__init__.py

"""
accounting.api.views package

Important:
- ViewSets over journal/ledger live in accounting.api.view (singular).
- Do NOT import accounting.api.urls from here to avoid circular imports.
"""

from accounting.api.view import JournalEntryViewSet, LedgerEntryViewSet
from accounting.api.views.accounts import ActiveChartAccountsView
from accounting.api.views.bank_accounts import BankAccountViewSet
from accounting.api.views.itbis import ItbisSummaryView

__all__ = [
    "JournalEntryViewSet",
    "LedgerEntryViewSet",
    "ActiveChartAccountsView",
    "BankAccountViewSet",
    "ItbisSummaryView",
]
