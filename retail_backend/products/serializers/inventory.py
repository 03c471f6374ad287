# products/serializers/inventory.py

"""
INVENTORY SERIALIZERS

Read side:
- lots, movements (Kardex lines), adjustments, valuation

Write side (input only, the services do the work):
- AdjustmentInputSerializer   -> save_adjustment()
- ReceiveStockInputSerializer -> receive_stock()
"""

from rest_framework import serializers

from products.models import InventoryLot, StockAdjustment, StockMovement


class InventoryLotSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    remaining_value = serializers.DecimalField(max_digits=18, decimal_places=4, read_only=True)
    is_expired = serializers.BooleanField(read_only=True)

    class Meta:
        model = InventoryLot
        fields = [
            "id",
            "product",
            "product_name",
            "lot_number",
            "source",
            "purchase_date",
            "expiration_date",
            "original_quantity",
            "remaining_quantity",
            "unit_cost",
            "unit_cost_inc_tax",
            "tax_rate",
            "remaining_value",
            "status",
            "is_expired",
            "depleted_at",
            "created_at",
        ]
        read_only_fields = fields


class StockMovementSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    performed_by = serializers.CharField(source="performed_by.username", read_only=True, default=None)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "product_name",
            "movement_type",
            "quantity",
            "movement_date",
            "unit_cost",
            "total_cost",
            "lot",
            "sale",
            "adjustment",
            "reference",
            "notes",
            "performed_by",
            "created_at",
        ]
        read_only_fields = fields


class KardexLineSerializer(serializers.Serializer):
    movement = StockMovementSerializer(read_only=True)
    balance = serializers.IntegerField(read_only=True)


class StockAdjustmentSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    journal_entry_number = serializers.CharField(
        source="journal_entry.entry_number", read_only=True, default=None
    )
    performed_by = serializers.CharField(source="performed_by.username", read_only=True, default=None)

    class Meta:
        model = StockAdjustment
        fields = [
            "id",
            "product",
            "product_name",
            "theoretical_stock",
            "actual_count",
            "difference",
            "reason",
            "notes",
            "unit_cost",
            "total_cost",
            "journal_entry",
            "journal_entry_number",
            "performed_by",
            "created_at",
        ]
        read_only_fields = fields


class AdjustmentInputSerializer(serializers.Serializer):
    actual_count = serializers.IntegerField(min_value=0)
    reason = serializers.ChoiceField(choices=StockAdjustment.Reason.choices)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ReceiveStockInputSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=0)
    cost_includes_tax = serializers.BooleanField(required=False, allow_null=True, default=None)
    tax_rate = serializers.DecimalField(
        max_digits=5, decimal_places=4, required=False, allow_null=True, default=None
    )
    lot_number = serializers.CharField(required=False, allow_blank=True, default="")
    expiration_date = serializers.DateField(required=False, allow_null=True, default=None)
    reference = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
