# accounting/admin.py

from django.contrib import admin

from accounting.models.account import Account
from accounting.models.bank_account import BankAccount
from accounting.models.chart import ChartOfAccounts
from accounting.models.itbis import ItbisSummary
from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry

# ============================================================
# CHART OF ACCOUNTS
# ============================================================


@admin.register(ChartOfAccounts)
class ChartOfAccountsAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "code",
        "business_type",
        "is_active",
        "updated_at",
    )
    list_filter = ("business_type", "is_active")
    search_fields = ("name", "code")
    readonly_fields = ("created_at", "updated_at")
    ordering = ("name",)


# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "account_type",
        "chart",
        "is_active",
    )
    list_filter = ("account_type", "is_active", "chart")
    search_fields = ("code", "name")
    ordering = ("chart", "code")
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        (
            "Account Identity",
            {
                "fields": ("chart", "code", "name", "account_type"),
            },
        ),
        (
            "Status",
            {
                "fields": ("is_active",),
            },
        ),
        (
            "System Fields",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )


# ============================================================
# BANK ACCOUNT
# ============================================================


@admin.register(BankAccount)
class BankAccountAdmin(admin.ModelAdmin):
    list_display = (
        "bank_name",
        "account_name",
        "account_number",
        "currency",
        "ledger_account",
        "is_default",
        "is_active",
    )
    list_filter = ("currency", "account_type", "is_default", "is_active")
    search_fields = ("bank_name", "account_name", "account_number")
    readonly_fields = ("created_at",)


# ============================================================
# ITBIS SUMMARY
# ============================================================


@admin.register(ItbisSummary)
class ItbisSummaryAdmin(admin.ModelAdmin):
    list_display = (
        "period",
        "itbis_collected",
        "itbis_paid",
        "total_itbis_retained",
        "net_itbis_due",
        "status",
    )
    list_filter = ("status",)
    ordering = ("-period",)
    # Derived on save
    readonly_fields = ("total_itbis_retained", "net_itbis_due", "created_at", "updated_at")


# ============================================================
# JOURNAL ENTRY (READ-ONLY)
# ============================================================


class LedgerEntryInline(admin.TabularInline):
    model = LedgerEntry
    extra = 0
    can_delete = False
    fields = ("account", "entry_type", "amount", "memo")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(JournalEntry)
class JournalEntryAdmin(admin.ModelAdmin):
    list_display = (
        "entry_number",
        "source_type",
        "description",
        "reference",
        "posted_at",
        "is_posted",
    )
    list_filter = ("source_type", "is_posted", "posted_at")
    search_fields = ("entry_number", "description", "reference")
    ordering = ("-posted_at",)
    inlines = [LedgerEntryInline]

    readonly_fields = (
        "entry_number",
        "source_type",
        "reference",
        "description",
        "posted_at",
        "is_posted",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# LEDGER ENTRY (STRICTLY IMMUTABLE)
# ============================================================


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "journal_entry",
        "account",
        "entry_type",
        "amount",
        "created_at",
    )
    list_filter = ("entry_type", "account")
    search_fields = ("journal_entry__reference", "journal_entry__entry_number", "account__code")
    ordering = ("created_at",)

    readonly_fields = (
        "journal_entry",
        "account",
        "entry_type",
        "amount",
        "memo",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
