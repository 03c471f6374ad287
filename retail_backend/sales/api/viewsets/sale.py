# sales/api/viewsets/sale.py

"""
======================================================
PATH: sales/api/viewsets/sale.py
======================================================
SALE VIEWSET (STAFF)

Purpose:
- Record sales and provide the "Sales History" API.
- List + retrieve with filters (?payment_method=&payment_status=).

Rules:
- Sales are financial records: no update, no delete through the API.
======================================================
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import mixins
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import DjangoModelPermissions, IsAuthenticated
from rest_framework.viewsets import GenericViewSet

from sales.models import Sale
from sales.serializers import SaleSerializer
from sales.services.settlement_service import get_settled_sale_ids


@extend_schema(tags=["sales"])
class SaleViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    GenericViewSet,
):
    serializer_class = SaleSerializer
    permission_classes = [IsAuthenticated, DjangoModelPermissions]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_fields = ["payment_method", "payment_status"]
    search_fields = ["receipt_number"]
    ordering_fields = ["sold_at", "total"]
    queryset = Sale.objects.select_related("cashier").order_by("-sold_at")

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.action == "list":
            context["settled_sale_ids"] = get_settled_sale_ids()
        return context

    def perform_create(self, serializer):
        serializer.save(cashier=self.request.user)
