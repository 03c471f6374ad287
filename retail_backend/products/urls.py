# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register product and inventory routes under /api/products/
- Product actions:
    /products/products/{id}/adjust/
    /products/products/{id}/receive/
    /products/products/{id}/kardex/
    /products/products/{id}/lots/
    /products/products/{id}/valuation/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import (
    InventoryLotViewSet,
    InventoryValuationView,
    ProductViewSet,
    StockAdjustmentViewSet,
    StockMovementViewSet,
)

router = DefaultRouter()

router.register(r"products", ProductViewSet, basename="products")
router.register(r"lots", InventoryLotViewSet, basename="lots")
router.register(r"movements", StockMovementViewSet, basename="movements")
router.register(r"adjustments", StockAdjustmentViewSet, basename="adjustments")

urlpatterns = [
    path("", include(router.urls)),
    path("valuation/", InventoryValuationView.as_view(), name="inventory-valuation"),
]
