# accounting/api/serializers/journal_entries.py

from rest_framework import serializers

from accounting.api.serializers.ledger_entries import LedgerEntrySerializer
from accounting.models.journal import JournalEntry


class JournalEntrySerializer(serializers.ModelSerializer):
    lines = LedgerEntrySerializer(source="ledger_entries", many=True, read_only=True)
    total_debit = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    total_credit = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = JournalEntry
        fields = (
            "id",
            "entry_number",
            "source_type",
            "reference",
            "description",
            "posted_at",
            "created_at",
            "is_posted",
            "total_debit",
            "total_credit",
            "lines",
        )
        read_only_fields = fields
