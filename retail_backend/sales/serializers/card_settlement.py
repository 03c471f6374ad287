# sales/serializers/card_settlement.py

"""
CARD SETTLEMENT SERIALIZERS

- CardSettlementSerializer:        read shape (amounts, bank, sale ids)
- CardSettlementCreateSerializer:  input for create_settlement()
- SettlementCandidateSerializer:   unsettled card sales
"""

from rest_framework import serializers

from accounting.models.bank_account import BankAccount
from sales.models import CardSettlement, Sale


class CardSettlementSerializer(serializers.ModelSerializer):
    bank_account_name = serializers.StringRelatedField(source="bank_account", read_only=True)
    journal_entry_number = serializers.CharField(
        source="journal_entry.entry_number", read_only=True, default=None
    )
    sale_ids = serializers.SerializerMethodField()
    created_by = serializers.CharField(source="created_by.username", read_only=True, default=None)

    class Meta:
        model = CardSettlement
        fields = [
            "id",
            "settlement_date",
            "period_start",
            "period_end",
            "gross_amount",
            "commission_rate",
            "commission_amount",
            "retention_rate",
            "retention_amount",
            "net_deposit",
            "bank_account",
            "bank_account_name",
            "deposit_reference",
            "status",
            "journal_entry",
            "journal_entry_number",
            "sale_ids",
            "notes",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields

    def get_sale_ids(self, obj) -> list[str]:
        return [str(link.sale_id) for link in obj.settlement_links.all()]


class CardSettlementCreateSerializer(serializers.Serializer):
    sale_ids = serializers.ListField(
        child=serializers.UUIDField(),
        required=False,
        default=list,
        help_text="Candidate sales to settle. Empty for a manual gross amount.",
    )
    gross_amount = serializers.DecimalField(
        max_digits=14, decimal_places=4, required=False, allow_null=True, default=None
    )
    commission_rate = serializers.DecimalField(
        max_digits=8, decimal_places=6, required=False, allow_null=True, default=None
    )
    retention_rate = serializers.DecimalField(
        max_digits=8, decimal_places=6, required=False, allow_null=True, default=None
    )
    settlement_date = serializers.DateField(required=False, allow_null=True, default=None)
    bank_account = serializers.PrimaryKeyRelatedField(
        queryset=BankAccount.objects.all(), required=False, allow_null=True, default=None
    )
    deposit_reference = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class SettlementCandidateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Sale
        fields = ["id", "receipt_number", "total", "payment_method", "sold_at"]
        read_only_fields = fields
