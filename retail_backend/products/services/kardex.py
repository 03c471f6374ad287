# products/services/kardex.py

"""
KARDEX (INVENTORY CARD)

Movement history of a product, newest first, each line carrying the
stock balance right after that movement.

Balances are anchored on Product.current_stock and walked backwards:
    balance(newest)  = current_stock
    balance(older)   = balance(newer) - newer.quantity
"""

from __future__ import annotations

from dataclasses import dataclass

from products.models import Product, StockMovement


@dataclass(frozen=True)
class KardexLine:
    movement: StockMovement
    balance: int


def open_kardex(product: Product, *, limit: int | None = None) -> list[KardexLine]:
    """
    Returns the product's movements newest-first with running balances.
    `limit` truncates the history after balances are computed from the top.
    """
    movements = (
        StockMovement.objects.filter(product=product)
        .select_related("lot", "adjustment", "sale", "performed_by")
        .order_by("-movement_date", "-id")
    )
    if limit is not None:
        movements = movements[: int(limit)]

    balance = int(product.current_stock or 0)
    lines: list[KardexLine] = []

    for movement in movements:
        lines.append(KardexLine(movement=movement, balance=balance))
        balance -= int(movement.quantity)

    return lines
