from .card_settlement import (
    CardSettlementCreateSerializer,
    CardSettlementSerializer,
    SettlementCandidateSerializer,
)
from .sale import SaleSerializer

__all__ = [
    "SaleSerializer",
    "CardSettlementSerializer",
    "CardSettlementCreateSerializer",
    "SettlementCandidateSerializer",
]
