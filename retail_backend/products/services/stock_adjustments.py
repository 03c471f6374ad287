# products/services/stock_adjustments.py

"""
STOCK ADJUSTMENTS SERVICE (PHYSICAL COUNT RECONCILIATION)

Purpose:
- Reconcile a physical count against Product.current_stock.
- Keep FIFO lots in step (consume on shrinkage, new lot on found goods).
- Enforce auditability via an immutable StockMovement row.
- Post the value of the discrepancy to the ledger.

PATH:
1) validate (count, reason, non-zero difference)  -> StockAdjustmentError
2) StockAdjustment record + lot consumption / creation
3) StockMovement(adjustment, signed quantity)
4) Product.current_stock = actual_count
5) journal entry (best-effort, own savepoint)

GUARANTEES:
- Steps 1-4 are one transaction: they all land or none do.
- A failing journal entry never undoes the stock change; it is logged and
  the adjustment is left without a journal_entry (repairable later).
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone

from accounting.services.exceptions import AccountingServiceError
from accounting.services.posting import post_stock_adjustment_to_ledger
from products.models import InventoryLot, Product, StockAdjustment, StockMovement
from products.services.stock_fifo import add_inventory_lot, consume_fifo, get_fifo_cost

logger = logging.getLogger(__name__)

FOURPLACES = Decimal("0.0001")


class StockAdjustmentError(Exception):
    """Validation error for adjustments. Nothing is written when raised."""

    def __init__(self, message: str, *, code: str = "invalid"):
        super().__init__(message)
        self.code = code


def _to_count(value) -> int:
    if value is None or value == "":
        raise StockAdjustmentError("actual_count is required", code="invalid_count")

    if isinstance(value, bool):
        # guardrail: bool is an int subclass in Python
        raise StockAdjustmentError("actual_count must be an integer", code="invalid_count")

    if isinstance(value, float) and not value.is_integer():
        raise StockAdjustmentError("actual_count must be a whole number", code="invalid_count")

    try:
        count = int(value)
    except (TypeError, ValueError):
        raise StockAdjustmentError("actual_count must be an integer", code="invalid_count")

    if count < 0:
        raise StockAdjustmentError("actual_count cannot be negative", code="invalid_count")

    return count


def _to_reason(value) -> str:
    reason = (value or "").strip().lower()
    if reason not in StockAdjustment.Reason.values:
        raise StockAdjustmentError(
            f"Invalid adjustment reason {value!r}. Allowed: {', '.join(StockAdjustment.Reason.values)}",
            code="invalid_reason",
        )
    return reason


def _attach_journal_entry(adjustment: StockAdjustment) -> None:
    """
    Best-effort secondary effect: failures are logged and swallowed.
    """
    try:
        with transaction.atomic():
            entry = post_stock_adjustment_to_ledger(adjustment)
            if entry is not None:
                adjustment.journal_entry = entry
                adjustment.save(update_fields=["journal_entry"])
    except (AccountingServiceError, ValidationError, DatabaseError, ValueError):
        logger.exception(
            "Stock adjustment journal entry failed; adjustment kept without ledger link",
            extra={"adjustment_id": adjustment.pk, "product_id": str(adjustment.product_id)},
        )


@transaction.atomic
def save_adjustment(
    *,
    product: Product,
    actual_count,
    reason,
    notes: str = "",
    user=None,
) -> StockMovement:
    """
    Adjust a product's stock to a physical count.

    difference = actual_count - current_stock
      < 0 -> shrinkage: consume |difference| units FIFO, expense by reason
      > 0 -> found goods: new adjustment lot at the FIFO unit cost, gain
    """
    if product is None:
        raise StockAdjustmentError("product is required", code="invalid_product")

    count = _to_count(actual_count)
    reason = _to_reason(reason)
    notes = (notes or "").strip()

    # lock row for concurrency safety
    locked = Product.objects.select_for_update().get(pk=product.pk)

    theoretical = int(locked.current_stock or 0)
    difference = count - theoretical
    if difference == 0:
        raise StockAdjustmentError(
            f"Physical count matches system stock ({theoretical}); nothing to adjust.",
            code="no_difference",
        )

    unit_cost = Decimal(get_fifo_cost(locked)).quantize(FOURPLACES, rounding=ROUND_HALF_UP)
    total_cost = (Decimal(abs(difference)) * unit_cost).quantize(FOURPLACES, rounding=ROUND_HALF_UP)

    adjustment = StockAdjustment.objects.create(
        product=locked,
        theoretical_stock=theoretical,
        actual_count=count,
        difference=difference,
        reason=reason,
        notes=notes,
        unit_cost=unit_cost,
        total_cost=total_cost,
        performed_by=user,
    )

    lot = None
    if difference < 0:
        consume_fifo(product=locked, quantity=abs(difference), adjustment=adjustment)
    else:
        lot = add_inventory_lot(
            product=locked,
            quantity=difference,
            unit_cost_ex_tax=unit_cost,
            tax_rate=locked.effective_cost_tax_rate,
            source=InventoryLot.Source.ADJUSTMENT,
            lot_number=f"ADJ-{adjustment.pk}",
        )

    movement = StockMovement.objects.create(
        product=locked,
        movement_type=StockMovement.MovementType.ADJUSTMENT,
        quantity=difference,
        unit_cost=unit_cost,
        total_cost=total_cost,
        lot=lot,
        adjustment=adjustment,
        reference=f"ADJ-{adjustment.pk}",
        notes=notes or f"Physical count adjustment ({reason})",
        performed_by=user,
    )

    locked.current_stock = count
    locked.last_stock_update = timezone.localdate()
    locked.save(update_fields=["current_stock", "last_stock_update", "updated_at"])

    logger.info(
        "Stock adjusted",
        extra={
            "product_id": str(locked.pk),
            "adjustment_id": adjustment.pk,
            "theoretical_stock": theoretical,
            "actual_count": count,
            "difference": difference,
            "reason": reason,
            "total_cost": str(total_cost),
        },
    )

    _attach_journal_entry(adjustment)

    product.refresh_from_db()
    return movement
