# products/views/__init__.py

"""
Products views package exports.

Purpose:
- Central export point for router imports.
"""

from .inventory import (
    InventoryLotViewSet,
    InventoryValuationView,
    StockAdjustmentViewSet,
    StockMovementViewSet,
)
from .product import ProductViewSet

__all__ = [
    "ProductViewSet",
    "InventoryLotViewSet",
    "StockMovementViewSet",
    "StockAdjustmentViewSet",
    "InventoryValuationView",
]
