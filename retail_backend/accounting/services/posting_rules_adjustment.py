# accounting/services/posting_rules_adjustment.py

"""
POSTING RULES - STOCK ADJUSTMENTS (AUTHORITATIVE)

Shrinkage (physical count below theoretical):
- Debit  expense by reason     (total cost)
- Credit Inventory             (total cost)

Found goods (physical count above theoretical):
- Debit  Inventory             (total cost)
- Credit Inventory Gains       (total cost)

Returns to supplier are not an expense: the goods become a claim on the
supplier (Supplier Advances).

This module:
- DOES NOT save journal entries
- DOES NOT touch inventory quantities
- DOES NOT calculate costs (amount is passed in)
"""

from __future__ import annotations

from decimal import Decimal

from accounting.services.account_resolver import (
    get_account,
    get_inventory_account,
    get_inventory_gain_account,
)
from accounting.services.exceptions import PostingRuleError
from accounting.services.money import ZERO, money

# Reason -> semantic key of the account debited on shrinkage.
SHRINKAGE_ACCOUNT_BY_REASON = {
    "damage": "SHRINKAGE_EXPENSE",
    "physical_count": "SHRINKAGE_EXPENSE",
    "correction": "SHRINKAGE_EXPENSE",
    "other": "SHRINKAGE_EXPENSE",
    "found": "SHRINKAGE_EXPENSE",
    "expiration": "EXPIRATION_EXPENSE",
    "theft": "THEFT_EXPENSE",
    "return_supplier": "SUPPLIER_ADVANCES",
}


def shrinkage_semantic_key(reason: str) -> str:
    key = SHRINKAGE_ACCOUNT_BY_REASON.get((reason or "").strip().lower())
    if key is None:
        raise PostingRuleError(f"No shrinkage account mapped for reason {reason!r}")
    return key


def build_adjustment_postings(*, difference: int, total_cost, reason: str) -> list[dict]:
    if difference == 0:
        raise PostingRuleError("Adjustment with zero difference has no accounting effect")

    amount = money(total_cost)
    if amount <= ZERO:
        raise PostingRuleError("Adjustment total cost must be positive to post")

    memo = f"Stock adjustment ({reason})"

    if difference < 0:
        return [
            {
                "account": get_account(shrinkage_semantic_key(reason)),
                "debit": amount,
                "credit": Decimal("0.00"),
                "memo": memo,
            },
            {
                "account": get_inventory_account(),
                "debit": Decimal("0.00"),
                "credit": amount,
                "memo": memo,
            },
        ]

    return [
        {
            "account": get_inventory_account(),
            "debit": amount,
            "credit": Decimal("0.00"),
            "memo": memo,
        },
        {
            "account": get_inventory_gain_account(),
            "debit": Decimal("0.00"),
            "credit": amount,
            "memo": memo,
        },
    ]
