# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (audit-safe inventory):

- Products are editable master data, except current_stock.
- Lots, movements, consumptions and adjustments are audit artifacts:
  view-only, never edited or deleted from the admin.
- Stock changes go through the API (receive / adjust), which keeps lots,
  movements and the ledger in step.
"""

from django.contrib import admin

from products.models import CostConsumption, InventoryLot, Product, StockAdjustment, StockMovement


class ReadOnlyAdminMixin:
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class InventoryLotInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = InventoryLot
    extra = 0
    fields = (
        "lot_number",
        "source",
        "purchase_date",
        "expiration_date",
        "original_quantity",
        "remaining_quantity",
        "unit_cost",
        "status",
    )
    readonly_fields = fields
    show_change_link = True


# =====================================================
# PRODUCT
# =====================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "sku",
        "name",
        "category",
        "last_price",
        "selling_price",
        "current_stock",
        "reorder_point",
        "is_active",
    )
    list_filter = ("is_active", "category", "cost_includes_tax")
    search_fields = ("sku", "barcode", "name")
    ordering = ("name",)
    readonly_fields = ("current_stock", "last_stock_update", "created_at", "updated_at")

    inlines = [InventoryLotInline]


# =====================================================
# AUDIT ARTIFACTS (VIEW-ONLY)
# =====================================================

@admin.register(InventoryLot)
class InventoryLotAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "product",
        "lot_number",
        "source",
        "purchase_date",
        "expiration_date",
        "remaining_quantity",
        "original_quantity",
        "unit_cost",
        "status",
    )
    list_filter = ("status", "source", "expiration_date")
    search_fields = ("lot_number", "product__name", "product__sku")
    ordering = ("purchase_date", "created_at")


@admin.register(StockMovement)
class StockMovementAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("movement_date", "product", "movement_type", "quantity", "unit_cost", "total_cost", "reference")
    list_filter = ("movement_type", "movement_date")
    search_fields = ("product__name", "product__sku", "reference")
    ordering = ("-movement_date", "-id")


@admin.register(StockAdjustment)
class StockAdjustmentAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "created_at",
        "product",
        "theoretical_stock",
        "actual_count",
        "difference",
        "reason",
        "total_cost",
        "journal_entry",
    )
    list_filter = ("reason", "created_at")
    search_fields = ("product__name", "product__sku", "notes")


@admin.register(CostConsumption)
class CostConsumptionAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("consumed_on", "product", "lot", "quantity", "unit_cost", "total_cost", "sale", "adjustment")
    list_filter = ("consumed_on",)
    search_fields = ("product__name", "product__sku")
