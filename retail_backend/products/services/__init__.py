from .kardex import KardexLine, open_kardex
from .stock_adjustments import StockAdjustmentError, save_adjustment
from .stock_fifo import (
    InsufficientLotsError,
    InventoryLotError,
    add_inventory_lot,
    consume_fifo,
    get_fifo_cost,
)
from .stock_intake import IntakeResult, receive_stock

__all__ = [
    "KardexLine",
    "open_kardex",
    "StockAdjustmentError",
    "save_adjustment",
    "InsufficientLotsError",
    "InventoryLotError",
    "add_inventory_lot",
    "consume_fifo",
    "get_fifo_cost",
    "IntakeResult",
    "receive_stock",
]
