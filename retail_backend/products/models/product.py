# products/models/product.py

import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

FOURPLACES = Decimal("0.0001")


class Product(models.Model):
    """
    Represents a sellable product.

    STOCK MODEL (IMPORTANT):
    - current_stock is the denormalized on-hand total (mutated by services only)
    - Cost layers live in InventoryLot; remaining lot quantities sum to current_stock
    - Every change to current_stock is mirrored by a StockMovement

    COST MODEL:
    - last_price is the most recent purchase cost as printed on the invoice
    - cost_includes_tax says whether last_price carries ITBIS
    - cost_ex_tax() is the authoritative cost basis for lots and COGS
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=64, unique=True, db_index=True)
    barcode = models.CharField(max_length=64, blank=True, default="", db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    category = models.CharField(max_length=100, blank=True, default="")

    # Purchase cost (as invoiced)
    last_price = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        default=Decimal("0.0000"),
        help_text="Most recent purchase cost per unit.",
    )
    cost_includes_tax = models.BooleanField(default=True)
    cost_tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        null=True,
        blank=True,
        help_text="ITBIS rate on cost (0.18, 0.16, 0). Empty means the default rate.",
    )

    selling_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    current_stock = models.IntegerField(default=0)
    reorder_point = models.PositiveIntegerField(default=0)
    last_stock_update = models.DateField(null=True, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="product_name_idx"),
            models.Index(fields=["category"], name="product_category_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        self.sku = (self.sku or "").strip()
        self.name = (self.name or "").strip()
        if not self.sku:
            raise ValidationError({"sku": "sku is required"})
        if not self.name:
            raise ValidationError({"name": "name is required"})

        if self.last_price is not None and Decimal(self.last_price) < 0:
            raise ValidationError({"last_price": "last_price cannot be negative"})
        if self.selling_price is not None and Decimal(self.selling_price) < 0:
            raise ValidationError({"selling_price": "selling_price cannot be negative"})

        if self.cost_tax_rate is not None:
            rate = Decimal(self.cost_tax_rate)
            if rate < 0 or rate >= 1:
                raise ValidationError({"cost_tax_rate": "cost_tax_rate must be in [0, 1)"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    # -------------------------------------------------
    # COST HELPERS
    # -------------------------------------------------

    @property
    def effective_cost_tax_rate(self) -> Decimal:
        if self.cost_tax_rate is not None:
            return Decimal(self.cost_tax_rate)
        return Decimal(str(settings.DEFAULT_COST_TAX_RATE))

    def cost_ex_tax(self) -> Decimal:
        """
        Tax-exclusive unit cost derived from last_price.
        """
        cost = Decimal(self.last_price or 0)
        if self.cost_includes_tax:
            cost = cost / (Decimal("1") + self.effective_cost_tax_rate)
        return cost.quantize(FOURPLACES, rounding=ROUND_HALF_UP)

    @property
    def is_low_stock(self) -> bool:
        return int(self.current_stock or 0) <= int(self.reorder_point or 0)
