from .card_settlement import CardSettlementViewSet
from .sale import SaleViewSet

__all__ = [
    "SaleViewSet",
    "CardSettlementViewSet",
]
