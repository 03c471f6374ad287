"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .cost_consumption import CostConsumption
from .inventory_lot import InventoryLot
from .product import Product
from .stock_adjustment import StockAdjustment
from .stock_movement import StockMovement

__all__ = [
    "Product",
    "InventoryLot",
    "CostConsumption",
    "StockAdjustment",
    "StockMovement",
]
