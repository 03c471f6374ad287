# sales/api/urls.py

"""
SALES API URLS (CANONICAL)

Provides:
- /api/sales/sales/                      list / create / retrieve
- /api/sales/settlements/                list / create / retrieve
- /api/sales/settlements/candidates/     unsettled paid card sales
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.api.viewsets import CardSettlementViewSet, SaleViewSet

router = DefaultRouter()
router.register(r"sales", SaleViewSet, basename="sales")
router.register(r"settlements", CardSettlementViewSet, basename="settlements")

urlpatterns = [
    path("", include(router.urls)),
]
