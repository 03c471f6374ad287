# products/models/stock_adjustment.py

"""
STOCK ADJUSTMENT (PHYSICAL COUNT RECONCILIATION)

Records one reconciliation of a physical count against theoretical stock.

GUARANTEES:
- difference = actual_count - theoretical_stock, never zero
- total_cost = |difference| x unit_cost
- Immutable once created, except attaching the journal entry ONCE
- Never deleted
"""

from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .product import Product

FOURPLACES = Decimal("0.0001")


class StockAdjustment(models.Model):
    class Reason(models.TextChoices):
        PHYSICAL_COUNT = "physical_count", "Physical Count"
        DAMAGE = "damage", "Damage"
        THEFT = "theft", "Theft"
        EXPIRATION = "expiration", "Expiration"
        RETURN_SUPPLIER = "return_supplier", "Return to Supplier"
        FOUND = "found", "Found"
        CORRECTION = "correction", "Correction"
        OTHER = "other", "Other"

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="adjustments",
    )

    theoretical_stock = models.IntegerField()
    actual_count = models.PositiveIntegerField()
    difference = models.IntegerField()

    reason = models.CharField(max_length=20, choices=Reason.choices)
    notes = models.TextField(blank=True, default="")

    unit_cost = models.DecimalField(max_digits=12, decimal_places=4)
    total_cost = models.DecimalField(max_digits=14, decimal_places=4)

    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_adjustments",
    )

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_adjustments",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["product", "created_at"], name="adjustment_product_idx"),
            models.Index(fields=["reason"], name="adjustment_reason_idx"),
        ]

    def __str__(self):
        return f"{self.product.name} {self.difference:+d} ({self.reason})"

    @property
    def is_shrinkage(self) -> bool:
        return self.difference < 0

    def clean(self):
        if self.actual_count is None or self.actual_count < 0:
            raise ValidationError({"actual_count": "actual_count must be a non-negative integer"})

        if self.difference != self.actual_count - self.theoretical_stock:
            raise ValidationError({"difference": "difference must equal actual_count - theoretical_stock"})

        if self.difference == 0:
            raise ValidationError({"difference": "An adjustment requires a non-zero difference"})

        if self.unit_cost is None or Decimal(self.unit_cost) < 0:
            raise ValidationError({"unit_cost": "unit_cost cannot be negative"})

        expected = (Decimal(abs(self.difference)) * Decimal(self.unit_cost)).quantize(
            FOURPLACES, rounding=ROUND_HALF_UP
        )
        if Decimal(self.total_cost) != expected:
            raise ValidationError({"total_cost": "total_cost must equal |difference| x unit_cost"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            update_fields = kwargs.get("update_fields")
            if update_fields is None or set(update_fields) != {"journal_entry"}:
                raise ValidationError("StockAdjustment records are immutable (journal_entry may be attached once)")

            previous = (
                StockAdjustment.objects.filter(pk=self.pk)
                .values_list("journal_entry_id", flat=True)
                .first()
            )
            if previous is not None:
                raise ValidationError("StockAdjustment already has a journal entry attached")
            return super().save(*args, **kwargs)

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("StockAdjustment records are immutable and cannot be deleted")
