# accounting/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

# Canonical ViewSets live in accounting/api/view.py (singular) in this project.
# We import directly to avoid circular imports through views/__init__.py.
from accounting.api.view import JournalEntryViewSet, LedgerEntryViewSet
from accounting.api.views.accounts import ActiveChartAccountsView
from accounting.api.views.bank_accounts import BankAccountViewSet
from accounting.api.views.itbis import ItbisPeriodStatusView, ItbisSummaryView

router = DefaultRouter()
router.register("journal-entries", JournalEntryViewSet, basename="journal-entry")
router.register("ledger-entries", LedgerEntryViewSet, basename="ledger-entry")
router.register("bank-accounts", BankAccountViewSet, basename="bank-account")

urlpatterns = [
    # Router endpoints
    path("", include(router.urls)),
    # Master data (read-only, chart-aware)
    path("accounts/", ActiveChartAccountsView.as_view(), name="accounts"),
    # Tax position
    path("itbis-summary/", ItbisSummaryView.as_view(), name="itbis-summary"),
    path(
        "itbis-summary/<str:period>/close/",
        ItbisPeriodStatusView.as_view(),
        {"transition": "close"},
        name="itbis-period-close",
    ),
    path(
        "itbis-summary/<str:period>/reopen/",
        ItbisPeriodStatusView.as_view(),
        {"transition": "reopen"},
        name="itbis-period-reopen",
    ),
]
