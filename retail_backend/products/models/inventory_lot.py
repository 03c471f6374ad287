# products/models/inventory_lot.py

"""
INVENTORY LOT (FIFO COST LAYER)

Represents ONE batch of stock received at a specific unit cost.

CANONICAL MODEL:
- Lots are consumed oldest-first (purchase_date, then creation order)
- original_quantity and unit costs are immutable after creation
- remaining_quantity is mutated ONLY via services
- status is derived from remaining_quantity unless the lot was expired
- Non-deletable once referenced by a consumption or movement (audit safety)
"""

from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from .product import Product

FOURPLACES = Decimal("0.0001")


class InventoryLot(models.Model):
    class Source(models.TextChoices):
        PURCHASE = "purchase", "Purchase"
        ADJUSTMENT = "adjustment", "Adjustment"
        INITIAL = "initial", "Initial Load"

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        DEPLETED = "depleted", "Depleted"
        EXPIRED = "expired", "Expired"

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="lots",
    )

    lot_number = models.CharField(max_length=64, blank=True, default="")
    source = models.CharField(max_length=16, choices=Source.choices, default=Source.PURCHASE)

    purchase_date = models.DateField(default=timezone.localdate)
    expiration_date = models.DateField(null=True, blank=True)

    original_quantity = models.PositiveIntegerField(help_text="Quantity received (immutable)")
    remaining_quantity = models.PositiveIntegerField(
        help_text="Remaining quantity (service-managed only)",
    )

    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        help_text="Unit cost excluding ITBIS (immutable).",
    )
    unit_cost_inc_tax = models.DecimalField(max_digits=12, decimal_places=4)
    tax_rate = models.DecimalField(max_digits=5, decimal_places=4)

    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)
    depleted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["purchase_date", "created_at", "id"]
        indexes = [
            models.Index(fields=["product", "status", "purchase_date"], name="lot_product_fifo_idx"),
            models.Index(fields=["expiration_date"], name="lot_expiration_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(original_quantity__gt=0),
                name="chk_lot_original_qty_gt_zero",
            ),
            models.CheckConstraint(
                condition=Q(remaining_quantity__lte=F("original_quantity")),
                name="chk_lot_remaining_lte_original",
            ),
        ]

    # -------------------------------------------------
    # VALIDATION
    # -------------------------------------------------

    def clean(self):
        if self.original_quantity is None or self.original_quantity <= 0:
            raise ValidationError({"original_quantity": "original_quantity must be greater than zero"})

        if self.remaining_quantity is None or self.remaining_quantity < 0:
            raise ValidationError({"remaining_quantity": "remaining_quantity cannot be negative"})

        if self.remaining_quantity > self.original_quantity:
            raise ValidationError(
                {"remaining_quantity": "remaining_quantity cannot exceed original_quantity"}
            )

        if self.unit_cost is None or Decimal(self.unit_cost) < 0:
            raise ValidationError({"unit_cost": "unit_cost cannot be negative"})

        if self.tax_rate is None or not (Decimal("0") <= Decimal(self.tax_rate) < Decimal("1")):
            raise ValidationError({"tax_rate": "tax_rate must be in [0, 1)"})

    # -------------------------------------------------
    # IMMUTABILITY + DERIVED STATE
    # -------------------------------------------------

    def save(self, *args, **kwargs):
        if not self._state.adding:
            original = InventoryLot.objects.only("original_quantity", "unit_cost").get(pk=self.pk)
            if self.original_quantity != original.original_quantity:
                raise ValidationError({"original_quantity": "original_quantity is immutable"})
            if Decimal(self.unit_cost) != original.unit_cost:
                raise ValidationError({"unit_cost": "unit_cost is immutable"})

        if self.unit_cost_inc_tax is None:
            self.unit_cost_inc_tax = (
                Decimal(self.unit_cost) * (Decimal("1") + Decimal(self.tax_rate))
            ).quantize(FOURPLACES, rounding=ROUND_HALF_UP)

        if self.status != self.Status.EXPIRED:
            if int(self.remaining_quantity or 0) > 0:
                self.status = self.Status.ACTIVE
                self.depleted_at = None
            else:
                self.status = self.Status.DEPLETED
                self.depleted_at = self.depleted_at or timezone.now()

        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.consumptions.exists() or self.stock_movements.exists():
            raise ValidationError("Cannot delete InventoryLot: it has consumption/movement history.")
        return super().delete(*args, **kwargs)

    # -------------------------------------------------
    # READ-ONLY HELPERS
    # -------------------------------------------------

    @property
    def remaining_value(self) -> Decimal:
        return Decimal(self.unit_cost) * Decimal(int(self.remaining_quantity or 0))

    @property
    def is_expired(self) -> bool:
        return bool(self.expiration_date and self.expiration_date < timezone.localdate())

    def __str__(self):
        label = self.lot_number or f"#{self.pk}"
        return f"{self.product.name} | Lot {label} | {self.remaining_quantity}/{self.original_quantity}"
