# accounting/api/serializers/bank_accounts.py

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from accounting.models.bank_account import BankAccount


class BankAccountSerializer(serializers.ModelSerializer):
    ledger_account_code = serializers.CharField(
        source="ledger_account.code", read_only=True, default=None
    )

    class Meta:
        model = BankAccount
        fields = (
            "id",
            "bank_name",
            "account_name",
            "account_number",
            "account_type",
            "currency",
            "ledger_account",
            "ledger_account_code",
            "is_default",
            "is_active",
            "notes",
            "created_at",
        )
        read_only_fields = ("id", "ledger_account_code", "created_at")

    def _save(self, instance):
        try:
            instance.save()
        except DjangoValidationError as exc:
            detail = exc.message_dict if hasattr(exc, "error_dict") else exc.messages
            raise serializers.ValidationError(detail) from exc
        return instance

    def create(self, validated_data):
        return self._save(BankAccount(**validated_data))

    def update(self, instance, validated_data):
        for field, value in validated_data.items():
            setattr(instance, field, value)
        return self._save(instance)
