# products/models/cost_consumption.py

"""
COST CONSUMPTION (FIFO AUDIT TRAIL)

One row per lot slice consumed by a sale or adjustment.

GUARANTEES:
- Append-only (no updates, no deletes)
- lot is NULL only for legacy consumption (stock with no lot history),
  costed at the product's fallback cost
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from .inventory_lot import InventoryLot
from .product import Product


class CostConsumption(models.Model):
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="cost_consumptions",
    )
    lot = models.ForeignKey(
        InventoryLot,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="consumptions",
    )
    adjustment = models.ForeignKey(
        "products.StockAdjustment",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="consumptions",
    )
    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="cost_consumptions",
    )

    quantity = models.PositiveIntegerField()
    unit_cost = models.DecimalField(max_digits=12, decimal_places=4)
    total_cost = models.DecimalField(max_digits=14, decimal_places=4)

    consumed_on = models.DateField(default=timezone.localdate)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["product", "consumed_on"], name="consumption_product_date_idx"),
        ]

    @property
    def is_legacy(self) -> bool:
        return self.lot_id is None

    def clean(self):
        if self.quantity is None or self.quantity <= 0:
            raise ValidationError({"quantity": "quantity must be greater than zero"})

        if self.lot_id and self.lot.product_id != self.product_id:
            raise ValidationError({"lot": "Lot does not belong to product"})

        expected = Decimal(self.unit_cost) * Decimal(self.quantity)
        if Decimal(self.total_cost) != expected.quantize(Decimal("0.0001")):
            raise ValidationError({"total_cost": "total_cost must equal quantity x unit_cost"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("CostConsumption records are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("CostConsumption records are immutable and cannot be deleted")

    def __str__(self):
        source = f"lot {self.lot_id}" if self.lot_id else "legacy stock"
        return f"{self.quantity} x {self.unit_cost} from {source}"
