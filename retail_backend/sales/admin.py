# sales/admin.py

from django.contrib import admin

from sales.models import CardSettlement, CardSettlementSale, Sale


# ======================================================
# SALE ADMIN
# ======================================================


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "receipt_number",
        "sold_at",
        "total",
        "payment_method",
        "payment_status",
        "cashier",
    )
    readonly_fields = ("receipt_number", "created_at")
    search_fields = ("receipt_number",)
    list_filter = ("payment_method", "payment_status", "sold_at")


# ======================================================
# CARD SETTLEMENT ADMIN (VIEW-ONLY)
# ======================================================


class CardSettlementSaleInline(admin.TabularInline):
    model = CardSettlementSale
    extra = 0
    fields = ("sale", "amount")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(CardSettlement)
class CardSettlementAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "settlement_date",
        "bank_account",
        "deposit_reference",
        "gross_amount",
        "commission_amount",
        "retention_amount",
        "net_deposit",
        "journal_entry",
    )
    list_filter = ("settlement_date", "bank_account")
    search_fields = ("deposit_reference", "notes")
    inlines = [CardSettlementSaleInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
