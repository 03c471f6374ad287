"""
PATH: sales/models/__init__.py

Sales models export surface.
"""

from .card_settlement import CardSettlement, CardSettlementSale
from .sale import Sale

__all__ = [
    "Sale",
    "CardSettlement",
    "CardSettlementSale",
]
