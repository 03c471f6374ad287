# accounting/api/views/itbis.py

"""
GET /api/accounting/itbis-summary/?period=YYYY-MM
POST /api/accounting/itbis-summary/<period>/close/ | reopen/

Returns the ITBIS position for the period (defaults to the current one).
The summary row is opened on first read.
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import BasePermission, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.serializers.itbis import ItbisSummarySerializer
from accounting.services.exceptions import TaxRecordError
from accounting.services.itbis_service import (
    close_period,
    get_current_period,
    get_or_create_summary,
    reopen_period,
)


class ItbisSummaryView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(
                name="period",
                type=str,
                required=False,
                description="Tax period as YYYY-MM (default: current period).",
            )
        ],
        responses=ItbisSummarySerializer,
    )
    def get(self, request, *args, **kwargs):
        period = (request.query_params.get("period") or "").strip() or get_current_period()
        try:
            summary = get_or_create_summary(period)
        except TaxRecordError as exc:
            return Response(
                {"detail": str(exc), "code": "invalid_period"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(ItbisSummarySerializer(summary).data, status=status.HTTP_200_OK)


class CanChangeItbisSummary(BasePermission):
    def has_permission(self, request, view):
        return request.user.has_perm("accounting.change_itbissummary")


class ItbisPeriodStatusView(APIView):
    """Close or reopen a tax period. Closed periods refuse new retentions."""

    permission_classes = [IsAuthenticated, CanChangeItbisSummary]
    transitions = {"close": close_period, "reopen": reopen_period}

    @extend_schema(tags=["accounting"], request=None, responses=ItbisSummarySerializer)
    def post(self, request, period, transition, *args, **kwargs):
        try:
            summary = self.transitions[transition](period)
        except TaxRecordError as exc:
            return Response(
                {"detail": str(exc), "code": "invalid_period"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(ItbisSummarySerializer(summary).data, status=status.HTTP_200_OK)
