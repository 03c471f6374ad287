# products/services/stock_intake.py

"""
STOCK INTAKE / PURCHASE RECEIPT (APPLICATION SERVICE)

Purpose:
- Intake stock via a purchase-style receipt.
- Create a FIFO lot at the tax-exclusive unit cost.
- Produce a matching StockMovement(in) ledger record.
- Keep Product.current_stock equal to the sum of lot quantities.
- Keep everything atomic and audit-safe.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from products.models import InventoryLot, Product, StockMovement
from products.services.stock_fifo import add_inventory_lot

logger = logging.getLogger(__name__)

FOURPLACES = Decimal("0.0001")


@dataclass(frozen=True)
class IntakeResult:
    lot: InventoryLot
    movement: StockMovement


def _to_cost(value) -> Decimal:
    if value is None or value == "":
        raise ValidationError("unit_cost is required")
    try:
        cost = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValidationError("unit_cost must be a valid decimal") from exc
    if cost < Decimal("0"):
        raise ValidationError("unit_cost cannot be negative")
    return cost.quantize(FOURPLACES, rounding=ROUND_HALF_UP)


@transaction.atomic
def receive_stock(
    *,
    product: Product,
    quantity,
    unit_cost,
    cost_includes_tax: bool | None = None,
    tax_rate=None,
    lot_number: str = "",
    expiration_date=None,
    reference: str = "",
    notes: str = "",
    user=None,
) -> IntakeResult:
    """
    unit_cost is the cost per unit as invoiced; cost_includes_tax defaults
    to the product's own flag and tax_rate to its cost tax rate.
    """
    if product is None:
        raise ValidationError("Product is required")

    if isinstance(quantity, bool):
        raise ValidationError("quantity must be a whole number")
    try:
        qty = int(quantity)
    except (TypeError, ValueError) as exc:
        raise ValidationError("quantity must be a whole number") from exc
    if qty <= 0:
        raise ValidationError("quantity must be greater than zero")

    invoiced_cost = _to_cost(unit_cost)

    locked = Product.objects.select_for_update().get(pk=product.pk)

    includes_tax = locked.cost_includes_tax if cost_includes_tax is None else bool(cost_includes_tax)
    rate = Decimal(str(tax_rate)) if tax_rate is not None else locked.effective_cost_tax_rate

    cost_ex_tax = invoiced_cost / (Decimal("1") + rate) if includes_tax else invoiced_cost
    cost_ex_tax = cost_ex_tax.quantize(FOURPLACES, rounding=ROUND_HALF_UP)

    lot = add_inventory_lot(
        product=locked,
        quantity=qty,
        unit_cost_ex_tax=cost_ex_tax,
        tax_rate=rate,
        source=InventoryLot.Source.PURCHASE,
        lot_number=lot_number,
        expiration_date=expiration_date,
    )

    movement = StockMovement.objects.create(
        product=locked,
        movement_type=StockMovement.MovementType.IN,
        quantity=qty,
        unit_cost=cost_ex_tax,
        lot=lot,
        reference=(reference or "").strip(),
        notes=(notes or "").strip(),
        performed_by=user,
    )

    locked.current_stock = int(locked.current_stock or 0) + qty
    locked.last_price = invoiced_cost
    locked.cost_includes_tax = includes_tax
    locked.last_stock_update = timezone.localdate()
    locked.save(
        update_fields=[
            "current_stock",
            "last_price",
            "cost_includes_tax",
            "last_stock_update",
            "updated_at",
        ]
    )

    logger.info(
        "Stock received",
        extra={
            "product_id": str(locked.pk),
            "lot_id": lot.pk,
            "quantity": qty,
            "unit_cost_ex_tax": str(cost_ex_tax),
        },
    )

    product.refresh_from_db()
    return IntakeResult(lot=lot, movement=movement)
