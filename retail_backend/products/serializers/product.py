# products/serializers/product.py

"""
PRODUCT SERIALIZER

Purpose:
- Product master data (sku, name, pricing, cost basis).
- Stock fields are read-only: stock only changes through intake and
  adjustment services, never through a product PATCH.
"""

from decimal import Decimal

from rest_framework import serializers

from products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    cost_ex_tax = serializers.SerializerMethodField(read_only=True)
    effective_cost_tax_rate = serializers.DecimalField(
        max_digits=5, decimal_places=4, read_only=True
    )
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "barcode",
            "name",
            "category",
            "last_price",
            "cost_includes_tax",
            "cost_tax_rate",
            "effective_cost_tax_rate",
            "cost_ex_tax",
            "selling_price",
            "current_stock",
            "reorder_point",
            "is_low_stock",
            "last_stock_update",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "current_stock",
            "last_stock_update",
            "created_at",
            "updated_at",
        ]

    def validate_sku(self, value):
        value = (value or "").strip().upper()
        if not value:
            raise serializers.ValidationError("SKU is required")
        return value

    def validate_selling_price(self, value):
        if value is None or value < 0:
            raise serializers.ValidationError("Selling price must be non-negative")
        return value

    def validate_cost_tax_rate(self, value):
        if value is not None and not (Decimal("0") <= value < Decimal("1")):
            raise serializers.ValidationError("cost_tax_rate must be in [0, 1)")
        return value

    def get_cost_ex_tax(self, obj) -> str:
        return str(obj.cost_ex_tax())
