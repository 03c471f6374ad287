# accounting/api/serializers/accounts.py

from rest_framework import serializers

from accounting.models.account import Account
from accounting.services.journal_entry_service import get_account_balance


class AccountListSerializer(serializers.ModelSerializer):
    """
    Read-only serializer for listing accounts in the active chart.
    UI needs: code, name, type, balance (and id for keys).
    """

    balance = serializers.SerializerMethodField()

    class Meta:
        model = Account
        fields = ("id", "code", "name", "account_type", "is_active", "balance")
        read_only_fields = fields

    def get_balance(self, obj) -> str:
        return str(get_account_balance(obj))
