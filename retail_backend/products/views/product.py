# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Product master data (CRUD, low-stock filter)
- Inventory operations routed through services:
    POST /products/products/{id}/adjust/    physical count adjustment
    POST /products/products/{id}/receive/   purchase receipt (new FIFO lot)
    GET  /products/products/{id}/kardex/    movement history + balances
    GET  /products/products/{id}/lots/      active FIFO lots
    GET  /products/products/{id}/valuation/ FIFO valuation of the product

Stock is never written through the product endpoints themselves.
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import F
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import DjangoModelPermissions, IsAuthenticated
from rest_framework.response import Response

from products.models import Product
from products.serializers import (
    AdjustmentInputSerializer,
    InventoryLotSerializer,
    KardexLineSerializer,
    ProductSerializer,
    ReceiveStockInputSerializer,
    StockMovementSerializer,
)
from products.services.kardex import open_kardex
from products.services.stock_adjustments import StockAdjustmentError, save_adjustment
from products.services.stock_fifo import InventoryLotError, get_active_lots, get_product_inventory_valuation
from products.services.stock_intake import receive_stock


def _require_perm(request, perm: str, message: str) -> None:
    if not request.user.has_perm(perm):
        raise PermissionDenied(message)


def _validation_detail(exc: DjangoValidationError):
    if hasattr(exc, "message_dict"):
        return exc.message_dict
    return {"detail": exc.messages}


@extend_schema(tags=["products"])
class ProductViewSet(viewsets.ModelViewSet):
    """
    Product endpoints.

    Filters:
    - ?is_active=true&category=Beverages
    - ?low_stock=true  (current_stock <= reorder_point)
    - ?search=<sku|barcode|name>
    """

    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, DjangoModelPermissions]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_fields = ["is_active", "category"]
    search_fields = ["sku", "barcode", "name"]
    ordering_fields = ["name", "sku", "current_stock", "created_at"]
    queryset = Product.objects.all().order_by("name")

    def get_permissions(self):
        # inventory actions check their own model permissions
        if self.action in {"adjust", "receive", "kardex", "lots", "valuation"}:
            return [IsAuthenticated()]
        return super().get_permissions()

    def get_queryset(self):
        qs = super().get_queryset()
        low_stock = (self.request.query_params.get("low_stock") or "").strip().lower()
        if low_stock in ("1", "true", "yes"):
            qs = qs.filter(current_stock__lte=F("reorder_point"))
        return qs

    def destroy(self, request, *args, **kwargs):
        product = self.get_object()
        if product.stock_movements.exists():
            return Response(
                {"detail": "Products with stock history cannot be deleted; deactivate them instead."},
                status=status.HTTP_409_CONFLICT,
            )
        return super().destroy(request, *args, **kwargs)

    # -------------------------------------------------
    # ADJUST (physical count)
    # -------------------------------------------------
    @extend_schema(
        request=AdjustmentInputSerializer,
        responses={
            201: StockMovementSerializer,
            400: OpenApiResponse(description="Invalid count, reason, or no difference"),
        },
    )
    @action(detail=True, methods=["post"], url_path="adjust")
    def adjust(self, request, pk=None):
        _require_perm(request, "products.add_stockadjustment", "You do not have permission to adjust stock.")
        product = self.get_object()

        serializer = AdjustmentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            movement = save_adjustment(
                product=product,
                actual_count=data["actual_count"],
                reason=data["reason"],
                notes=data.get("notes", ""),
                user=request.user,
            )
        except StockAdjustmentError as exc:
            return Response({"detail": str(exc), "code": exc.code}, status=status.HTTP_400_BAD_REQUEST)
        except DjangoValidationError as exc:
            return Response(_validation_detail(exc), status=status.HTTP_400_BAD_REQUEST)

        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)

    # -------------------------------------------------
    # RECEIVE (purchase receipt)
    # -------------------------------------------------
    @extend_schema(
        request=ReceiveStockInputSerializer,
        responses={201: StockMovementSerializer},
    )
    @action(detail=True, methods=["post"], url_path="receive")
    def receive(self, request, pk=None):
        _require_perm(request, "products.add_inventorylot", "You do not have permission to receive stock.")
        product = self.get_object()

        serializer = ReceiveStockInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = receive_stock(product=product, user=request.user, **serializer.validated_data)
        except InventoryLotError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except DjangoValidationError as exc:
            return Response(_validation_detail(exc), status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "lot": InventoryLotSerializer(result.lot).data,
                "movement": StockMovementSerializer(result.movement).data,
            },
            status=status.HTTP_201_CREATED,
        )

    # -------------------------------------------------
    # READ-ONLY INVENTORY VIEWS
    # -------------------------------------------------
    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="limit",
                type=int,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Return only the N most recent lines.",
            ),
        ],
        responses={200: KardexLineSerializer(many=True)},
    )
    @action(detail=True, methods=["get"], url_path="kardex")
    def kardex(self, request, pk=None):
        _require_perm(request, "products.view_stockmovement", "You do not have permission to view stock movements.")
        product = self.get_object()

        limit = None
        raw_limit = (request.query_params.get("limit") or "").strip()
        if raw_limit:
            try:
                limit = int(raw_limit)
            except ValueError:
                return Response({"limit": "limit must be an integer"}, status=status.HTTP_400_BAD_REQUEST)
            if limit <= 0:
                return Response({"limit": "limit must be positive"}, status=status.HTTP_400_BAD_REQUEST)

        lines = open_kardex(product, limit=limit)
        return Response(KardexLineSerializer(lines, many=True).data)

    @extend_schema(responses={200: InventoryLotSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="lots")
    def lots(self, request, pk=None):
        _require_perm(request, "products.view_inventorylot", "You do not have permission to view lots.")
        product = self.get_object()
        return Response(InventoryLotSerializer(get_active_lots(product), many=True).data)

    @action(detail=True, methods=["get"], url_path="valuation")
    def valuation(self, request, pk=None):
        _require_perm(request, "products.view_inventorylot", "You do not have permission to view lots.")
        product = self.get_object()
        valuation = get_product_inventory_valuation(product)
        return Response(
            {
                "product_id": valuation["product_id"],
                "total_quantity": valuation["total_quantity"],
                "total_value": str(valuation["total_value"]),
                "avg_cost": str(valuation["avg_cost"]),
                "lots": InventoryLotSerializer(valuation["lots"], many=True).data,
            }
        )
