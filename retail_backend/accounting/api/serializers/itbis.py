# accounting/api/serializers/itbis.py

from rest_framework import serializers

from accounting.models.itbis import ItbisSummary


class ItbisSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = ItbisSummary
        fields = (
            "id",
            "period",
            "itbis_collected",
            "itbis_paid",
            "itbis_retained_by_cards",
            "other_retentions",
            "total_itbis_retained",
            "net_itbis_due",
            "status",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields
