# products/views/inventory.py

"""
Read-only inventory endpoints.

- lots:        FIFO layers (?product=&status=&source=)
- movements:   the inventory ledger (?product=&movement_type=)
- adjustments: physical count reconciliations (?product=&reason=)
- valuation:   total FIFO inventory value

Writes happen only through the product actions (adjust / receive).
"""

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework.exceptions import PermissionDenied
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import ReadOnlyModelViewSet

from products.models import InventoryLot, StockAdjustment, StockMovement
from products.serializers import (
    InventoryLotSerializer,
    StockAdjustmentSerializer,
    StockMovementSerializer,
)
from products.services.stock_fifo import get_expiring_lots, get_total_inventory_valuation


class _PermissionGatedReadOnlyViewSet(ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    view_permission = ""
    permission_message = "You do not have permission to view this resource."

    def get_queryset(self):
        if not self.request.user.has_perm(self.view_permission):
            raise PermissionDenied(self.permission_message)
        return super().get_queryset()


@extend_schema(tags=["inventory"])
class InventoryLotViewSet(_PermissionGatedReadOnlyViewSet):
    serializer_class = InventoryLotSerializer
    queryset = InventoryLot.objects.select_related("product").order_by("purchase_date", "created_at", "id")
    filterset_fields = ["product", "status", "source"]
    ordering_fields = ["purchase_date", "expiration_date", "created_at"]
    view_permission = "products.view_inventorylot"
    permission_message = "You do not have permission to view lots."

    def get_queryset(self):
        qs = super().get_queryset()
        raw_days = (self.request.query_params.get("expiring_within") or "").strip()
        if raw_days.isdigit():
            qs = qs.filter(pk__in=get_expiring_lots(int(raw_days)).values("pk"))
        return qs


@extend_schema(tags=["inventory"])
class StockMovementViewSet(_PermissionGatedReadOnlyViewSet):
    serializer_class = StockMovementSerializer
    queryset = StockMovement.objects.select_related("product", "performed_by").order_by("-movement_date", "-id")
    filterset_fields = ["product", "movement_type", "lot", "sale", "adjustment"]
    ordering_fields = ["movement_date", "created_at"]
    view_permission = "products.view_stockmovement"
    permission_message = "You do not have permission to view stock movements."


@extend_schema(tags=["inventory"])
class StockAdjustmentViewSet(_PermissionGatedReadOnlyViewSet):
    serializer_class = StockAdjustmentSerializer
    queryset = StockAdjustment.objects.select_related(
        "product", "journal_entry", "performed_by"
    ).order_by("-created_at", "-id")
    filterset_fields = ["product", "reason"]
    ordering_fields = ["created_at", "total_cost"]
    view_permission = "products.view_stockadjustment"
    permission_message = "You do not have permission to view stock adjustments."


@extend_schema(tags=["inventory"])
class InventoryValuationView(APIView):
    """
    GET /api/products/valuation/
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        if not request.user.has_perm("products.view_inventorylot"):
            raise PermissionDenied("You do not have permission to view lots.")

        valuation = get_total_inventory_valuation()
        return Response(
            {
                "total_value": str(valuation["total_value"]),
                "total_units": valuation["total_units"],
                "product_count": valuation["product_count"],
            }
        )
