# products/serializers/__init__.py

from .inventory import (
    AdjustmentInputSerializer,
    InventoryLotSerializer,
    KardexLineSerializer,
    ReceiveStockInputSerializer,
    StockAdjustmentSerializer,
    StockMovementSerializer,
)
from .product import ProductSerializer

__all__ = [
    "ProductSerializer",
    "InventoryLotSerializer",
    "StockMovementSerializer",
    "KardexLineSerializer",
    "StockAdjustmentSerializer",
    "AdjustmentInputSerializer",
    "ReceiveStockInputSerializer",
]
