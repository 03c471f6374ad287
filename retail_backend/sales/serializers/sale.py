# sales/serializers/sale.py

from rest_framework import serializers

from sales.models import Sale


class SaleSerializer(serializers.ModelSerializer):
    """
    Sale header. Financial fields are locked by the model once paid.
    """

    cashier = serializers.CharField(source="cashier.username", read_only=True, default=None)
    is_settled = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = [
            "id",
            "receipt_number",
            "cashier",
            "total",
            "payment_method",
            "payment_status",
            "sold_at",
            "is_settled",
            "created_at",
        ]
        read_only_fields = ["id", "receipt_number", "cashier", "is_settled", "created_at"]

    def validate_total(self, value):
        if value is None or value < 0:
            raise serializers.ValidationError("Total must be non-negative")
        return value

    def get_is_settled(self, obj) -> bool:
        settled_ids = self.context.get("settled_sale_ids")
        if settled_ids is not None:
            return obj.pk in settled_ids
        return obj.settlement_links.exists()
