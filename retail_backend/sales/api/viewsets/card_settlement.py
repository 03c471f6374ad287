# sales/api/viewsets/card_settlement.py

"""
======================================================
PATH: sales/api/viewsets/card_settlement.py
======================================================
CARD SETTLEMENT VIEWSET

Endpoints:
- GET  /api/sales/settlements/              history
- GET  /api/sales/settlements/<id>/         detail (with sale ids)
- POST /api/sales/settlements/              reconcile -> create_settlement()
- GET  /api/sales/settlements/candidates/   unsettled paid card sales

Error contract:
- SettlementValidationError -> 400 {"detail": ..., "code": ...}
- Settlements are immutable: no update, no delete.
======================================================
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import DjangoModelPermissions, IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from sales.models import CardSettlement
from sales.serializers import (
    CardSettlementCreateSerializer,
    CardSettlementSerializer,
    SettlementCandidateSerializer,
)
from sales.services.settlement_service import (
    SettlementValidationError,
    create_settlement,
    get_candidates_total,
    get_settlement_candidates,
)


@extend_schema(tags=["settlements"])
class CardSettlementViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    GenericViewSet,
):
    serializer_class = CardSettlementSerializer
    permission_classes = [IsAuthenticated, DjangoModelPermissions]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ["bank_account", "status", "settlement_date"]
    ordering_fields = ["settlement_date", "created_at", "gross_amount"]
    queryset = (
        CardSettlement.objects.select_related("bank_account", "journal_entry", "created_by")
        .prefetch_related("settlement_links")
        .order_by("-settlement_date", "-id")
    )

    @extend_schema(
        request=CardSettlementCreateSerializer,
        responses={
            201: CardSettlementSerializer,
            400: OpenApiResponse(description="Validation error with a machine-readable code"),
        },
    )
    def create(self, request, *args, **kwargs):
        serializer = CardSettlementCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            settlement = create_settlement(
                sales=data["sale_ids"],
                gross_amount=data["gross_amount"],
                commission_rate=data["commission_rate"],
                retention_rate=data["retention_rate"],
                settlement_date=data["settlement_date"],
                bank_account=data["bank_account"],
                deposit_reference=data["deposit_reference"],
                notes=data["notes"],
                user=request.user,
            )
        except SettlementValidationError as exc:
            return Response({"detail": str(exc), "code": exc.code}, status=status.HTTP_400_BAD_REQUEST)

        return Response(CardSettlementSerializer(settlement).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: SettlementCandidateSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="candidates")
    def candidates(self, request):
        candidates = get_settlement_candidates()
        return Response(
            {
                "count": candidates.count(),
                "total": str(get_candidates_total()),
                "results": SettlementCandidateSerializer(candidates, many=True).data,
            }
        )
