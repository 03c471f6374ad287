# products/models/stock_movement.py

"""
CANONICAL INVENTORY LEDGER

Immutable inventory ledger entry (Kardex line).

GUARANTEES:
- Append-only (no updates, no deletes)
- quantity is a signed, non-zero delta:
    in          -> positive
    out         -> negative
    adjustment  -> either sign
- Running balance for a product = chronological sum of its movements
"""

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from .inventory_lot import InventoryLot
from .product import Product
from .stock_adjustment import StockAdjustment


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        IN = "in", "Stock In"
        OUT = "out", "Stock Out"
        ADJUSTMENT = "adjustment", "Adjustment"

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="stock_movements"
    )

    movement_type = models.CharField(max_length=10, choices=MovementType.choices)

    quantity = models.IntegerField(help_text="Signed delta (+ in, - out)")

    movement_date = models.DateTimeField(default=timezone.now)

    unit_cost = models.DecimalField(max_digits=12, decimal_places=4, null=True, blank=True)
    total_cost = models.DecimalField(max_digits=14, decimal_places=4, null=True, blank=True)

    lot = models.ForeignKey(
        InventoryLot,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_movements",
    )
    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_movements",
    )
    adjustment = models.ForeignKey(
        StockAdjustment,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="movements",
    )

    reference = models.CharField(max_length=100, blank=True, default="", help_text="Receipt / invoice number")
    notes = models.TextField(blank=True, default="")

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-movement_date", "-id"]
        indexes = [
            models.Index(fields=["product", "movement_date"], name="movement_product_date_idx"),
            models.Index(fields=["movement_type"], name="movement_type_idx"),
        ]

    def clean(self):
        if self.quantity is None or self.quantity == 0:
            raise ValidationError({"quantity": "quantity must be a non-zero delta"})

        if self.movement_type == self.MovementType.IN and self.quantity < 0:
            raise ValidationError({"quantity": "in movements require a positive quantity"})
        if self.movement_type == self.MovementType.OUT and self.quantity > 0:
            raise ValidationError({"quantity": "out movements require a negative quantity"})

        if self.lot_id and self.lot.product_id != self.product_id:
            raise ValidationError({"lot": "Lot does not belong to product"})

        if self.adjustment_id and self.adjustment.product_id != self.product_id:
            raise ValidationError({"adjustment": "Adjustment does not belong to product"})

        if self.unit_cost is not None and Decimal(self.unit_cost) < 0:
            raise ValidationError({"unit_cost": "unit_cost cannot be negative"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        if self.total_cost is None and self.unit_cost is not None:
            self.total_cost = Decimal(self.unit_cost) * Decimal(abs(int(self.quantity or 0)))

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.movement_type} | {self.quantity:+d}"
