from .settlement_service import (
    CardSettlementError,
    SettlementValidationError,
    compute_settlement_amounts,
    create_settlement,
    get_settled_sale_ids,
    get_settlement_candidates,
    validate_settlement_input,
)

__all__ = [
    "CardSettlementError",
    "SettlementValidationError",
    "compute_settlement_amounts",
    "create_settlement",
    "get_settled_sale_ids",
    "get_settlement_candidates",
    "validate_settlement_input",
]
