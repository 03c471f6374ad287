# accounting/api/views/bank_accounts.py

"""
Bank accounts receiving card settlement deposits.

Bank accounts are referenced by settlements, so they are deactivated
rather than deleted.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import mixins
from rest_framework.permissions import IsAuthenticated
from rest_framework.viewsets import GenericViewSet

from accounting.api.serializers.bank_accounts import BankAccountSerializer
from accounting.models.bank_account import BankAccount


@extend_schema(tags=["accounting"])
class BankAccountViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    GenericViewSet,
):
    permission_classes = [IsAuthenticated]
    serializer_class = BankAccountSerializer
    queryset = BankAccount.objects.select_related("ledger_account").all()
    filterset_fields = ["is_active", "is_default", "currency", "account_type"]
