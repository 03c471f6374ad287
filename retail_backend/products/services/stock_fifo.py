# products/services/stock_fifo.py

"""
FIFO COSTING ENGINE

Purpose:
- Maintain FIFO cost layers (InventoryLot) per product.
- Consume stock oldest-lot-first and record one CostConsumption per slice.
- Provide FIFO / weighted-average cost lookups and lot valuation.
- Expiration queries and the legacy migration helper (initial lots).

Rules:
- Quantities are integer units.
- Lots are ordered by purchase_date, then creation order.
- Lots never go negative; stock that has no lot history is consumed in
  tolerant mode at the product's fallback cost (legacy consumption).

THIS MODULE DOES NOT:
- Touch Product.current_stock (workflows do)
- Write StockMovement rows (workflows do)
- Post to the ledger
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction
from django.db.models import DecimalField, ExpressionWrapper, F, Sum
from django.utils import timezone

from products.models import CostConsumption, InventoryLot, Product

logger = logging.getLogger(__name__)

FOURPLACES = Decimal("0.0001")
ZERO = Decimal("0")


# ============================================================
# DOMAIN ERRORS
# ============================================================


class InventoryLotError(Exception):
    """Raised when a lot cannot be created or changed."""


class InsufficientLotsError(InventoryLotError):
    """Raised in strict mode when lots cannot cover the requested quantity."""


@dataclass(frozen=True)
class FifoConsumptionResult:
    quantity: int
    total_cost: Decimal
    consumptions: list = field(default_factory=list)

    @property
    def avg_unit_cost(self) -> Decimal:
        if self.quantity <= 0:
            return ZERO
        return (self.total_cost / Decimal(self.quantity)).quantize(FOURPLACES, rounding=ROUND_HALF_UP)

    @property
    def legacy_quantity(self) -> int:
        return sum(c.quantity for c in self.consumptions if c.lot_id is None)


def _to_int_qty(value, *, field_name="quantity") -> int:
    """
    Quantity normalizer.
    HARD RULE: quantities are integer units in this system.
    """
    if isinstance(value, bool):
        raise InventoryLotError(f"{field_name} must be a whole integer unit")

    if isinstance(value, int):
        return value

    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())

    raise InventoryLotError(f"{field_name} must be a whole integer unit")


def _cost4(value) -> Decimal:
    return Decimal(str(value)).quantize(FOURPLACES, rounding=ROUND_HALF_UP)


# ============================================================
# LOT MANAGEMENT
# ============================================================


def add_inventory_lot(
    *,
    product: Product,
    quantity,
    unit_cost_ex_tax,
    tax_rate=None,
    source: str = InventoryLot.Source.PURCHASE,
    lot_number: str = "",
    purchase_date=None,
    expiration_date=None,
) -> InventoryLot:
    """
    Create a new FIFO lot when goods arrive (purchase, found goods, initial load).
    """
    if product is None:
        raise InventoryLotError("product is required")

    qty = _to_int_qty(quantity)
    if qty <= 0:
        raise InventoryLotError("Lot quantity must be greater than zero")

    unit_cost = _cost4(unit_cost_ex_tax)
    if unit_cost < ZERO:
        raise InventoryLotError("Lot unit cost cannot be negative")

    rate = Decimal(str(tax_rate)) if tax_rate is not None else product.effective_cost_tax_rate

    lot = InventoryLot.objects.create(
        product=product,
        lot_number=(lot_number or "").strip(),
        source=source,
        purchase_date=purchase_date or timezone.localdate(),
        expiration_date=expiration_date,
        original_quantity=qty,
        remaining_quantity=qty,
        unit_cost=unit_cost,
        tax_rate=rate,
    )

    logger.info(
        "FIFO lot created",
        extra={
            "product_id": str(product.pk),
            "lot_id": lot.pk,
            "quantity": qty,
            "unit_cost": str(unit_cost),
            "source": source,
        },
    )
    return lot


def get_active_lots(product: Product):
    """
    Active lots with stock, FIFO order (oldest first).
    """
    return InventoryLot.objects.filter(
        product=product,
        status=InventoryLot.Status.ACTIVE,
        remaining_quantity__gt=0,
    ).order_by("purchase_date", "created_at", "id")


def get_fifo_cost(product: Product) -> Decimal:
    """
    Unit cost of the oldest available lot; falls back to the product's
    tax-exclusive cost when no lot is available.
    """
    oldest = get_active_lots(product).first()
    if oldest is not None:
        return Decimal(oldest.unit_cost)
    return product.cost_ex_tax()


def get_weighted_average_cost(product: Product) -> Decimal:
    lots = list(get_active_lots(product))
    if not lots:
        return product.cost_ex_tax()

    total_qty = sum(lot.remaining_quantity for lot in lots)
    total_value = sum((lot.remaining_value for lot in lots), ZERO)
    if total_qty <= 0:
        return ZERO
    return (total_value / Decimal(total_qty)).quantize(FOURPLACES, rounding=ROUND_HALF_UP)


def get_available_quantity(product: Product) -> int:
    """
    Lot quantity when the product has lots; current_stock for legacy products.
    """
    lots = get_active_lots(product)
    if lots.exists():
        return int(lots.aggregate(total=Sum("remaining_quantity"))["total"] or 0)
    return int(product.current_stock or 0)


# ============================================================
# FIFO CONSUMPTION
# ============================================================


@transaction.atomic
def consume_fifo(
    *,
    product: Product,
    quantity,
    adjustment=None,
    sale=None,
    strict: bool = False,
) -> FifoConsumptionResult:
    """
    Consume `quantity` units oldest-lot-first.

    strict=False (default): any shortfall is recorded as a legacy consumption
    (lot=NULL) at the product's fallback cost and logged.
    strict=True: a shortfall raises InsufficientLotsError and nothing is written.
    """
    if product is None:
        raise InventoryLotError("product is required")

    qty = _to_int_qty(quantity)
    if qty <= 0:
        raise InventoryLotError("Consumption quantity must be greater than zero")

    lots = list(get_active_lots(product).select_for_update())
    available = sum(int(lot.remaining_quantity) for lot in lots)

    if strict and available < qty:
        raise InsufficientLotsError(
            f"Insufficient FIFO lots for {product.name}. Requested: {qty}, Available: {available}"
        )

    today = timezone.localdate()
    remaining = qty
    total_cost = ZERO
    consumptions: list[CostConsumption] = []

    for lot in lots:
        if remaining <= 0:
            break

        take = min(remaining, int(lot.remaining_quantity))
        if take <= 0:
            continue

        unit_cost = Decimal(lot.unit_cost)
        slice_cost = unit_cost * Decimal(take)

        consumptions.append(
            CostConsumption.objects.create(
                product=product,
                lot=lot,
                adjustment=adjustment,
                sale=sale,
                quantity=take,
                unit_cost=unit_cost,
                total_cost=slice_cost,
                consumed_on=today,
            )
        )

        lot.remaining_quantity = int(lot.remaining_quantity) - take
        lot.save(update_fields=["remaining_quantity", "status", "depleted_at"])

        total_cost += slice_cost
        remaining -= take

    if remaining > 0:
        fallback_cost = product.cost_ex_tax()
        legacy_cost = fallback_cost * Decimal(remaining)

        consumptions.append(
            CostConsumption.objects.create(
                product=product,
                lot=None,
                adjustment=adjustment,
                sale=sale,
                quantity=remaining,
                unit_cost=fallback_cost,
                total_cost=legacy_cost,
                consumed_on=today,
            )
        )
        total_cost += legacy_cost

        logger.warning(
            "FIFO: insufficient lots, used fallback cost for remaining units",
            extra={
                "product_id": str(product.pk),
                "requested": qty,
                "from_lots": qty - remaining,
                "legacy_quantity": remaining,
                "fallback_cost": str(fallback_cost),
            },
        )

    return FifoConsumptionResult(quantity=qty, total_cost=total_cost, consumptions=consumptions)


# ============================================================
# EXPIRATION MANAGEMENT
# ============================================================


def get_expiring_lots(days_until_expiry: int = 7):
    today = timezone.localdate()
    return get_lots_with_stock().filter(
        expiration_date__isnull=False,
        expiration_date__gte=today,
        expiration_date__lte=today + timedelta(days=int(days_until_expiry)),
    ).order_by("expiration_date", "id")


def get_expired_lots():
    return get_lots_with_stock().filter(
        expiration_date__isnull=False,
        expiration_date__lt=timezone.localdate(),
    ).order_by("expiration_date", "id")


def get_lots_with_stock():
    return InventoryLot.objects.select_related("product").filter(
        status=InventoryLot.Status.ACTIVE,
        remaining_quantity__gt=0,
    )


@transaction.atomic
def mark_lot_expired(lot: InventoryLot) -> InventoryLot:
    """
    Take the lot out of FIFO rotation. Quantities are untouched: writing the
    stock off is an adjustment with reason=expiration.
    """
    locked = InventoryLot.objects.select_for_update().get(pk=lot.pk)
    if locked.status == InventoryLot.Status.EXPIRED:
        return locked

    locked.status = InventoryLot.Status.EXPIRED
    locked.depleted_at = timezone.now()
    locked.save(update_fields=["status", "depleted_at"])

    logger.info("FIFO lot marked expired", extra={"lot_id": locked.pk})
    return locked


# ============================================================
# VALUATION
# ============================================================

_LOT_VALUE = ExpressionWrapper(
    F("remaining_quantity") * F("unit_cost"),
    output_field=DecimalField(max_digits=18, decimal_places=4),
)


def get_product_inventory_valuation(product: Product) -> dict:
    lots = list(get_active_lots(product))
    total_quantity = sum(lot.remaining_quantity for lot in lots)
    total_value = sum((lot.remaining_value for lot in lots), ZERO)
    avg_cost = (total_value / Decimal(total_quantity)) if total_quantity else ZERO

    return {
        "product_id": str(product.pk),
        "total_quantity": total_quantity,
        "total_value": _cost4(total_value),
        "avg_cost": _cost4(avg_cost),
        "lots": lots,
    }


def get_total_inventory_valuation() -> dict:
    qs = get_lots_with_stock()
    totals = qs.aggregate(total_value=Sum(_LOT_VALUE), total_units=Sum("remaining_quantity"))

    return {
        "total_value": _cost4(totals["total_value"] or ZERO),
        "total_units": int(totals["total_units"] or 0),
        "product_count": qs.values("product_id").distinct().count(),
    }


# ============================================================
# MIGRATION HELPERS
# ============================================================


@transaction.atomic
def create_initial_lots_for_existing_products() -> int:
    """
    One-off: give every stocked product without lot history an initial lot
    for its current stock at its tax-exclusive cost.
    """
    created = 0
    products = Product.objects.filter(current_stock__gt=0, lots__isnull=True).distinct()

    for product in products:
        add_inventory_lot(
            product=product,
            quantity=int(product.current_stock),
            unit_cost_ex_tax=product.cost_ex_tax(),
            tax_rate=product.effective_cost_tax_rate,
            source=InventoryLot.Source.INITIAL,
            lot_number="INITIAL",
            purchase_date=product.last_stock_update or timezone.localdate(),
        )
        created += 1

    logger.info("Initial FIFO lots created", extra={"lots_created": created})
    return created
