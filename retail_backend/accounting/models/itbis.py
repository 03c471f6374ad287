# accounting/models/itbis.py

"""
ITBIS SUMMARY (per period)

Monthly ITBIS (Dominican VAT) position:
- collected on sales (payable to DGII)
- paid on purchases (credit)
- retained by third parties (card processors, large customers)

net_itbis_due = collected - paid - retained

Totals are DERIVED on every save (never user-controlled).
"""

from __future__ import annotations

import re
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

PERIOD_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

ZERO = Decimal("0.00")


class ItbisSummary(models.Model):
    class Status(models.TextChoices):
        OPEN = "open", "Open"
        CLOSED = "closed", "Closed"

    period = models.CharField(max_length=7, unique=True, help_text="YYYY-MM")

    itbis_collected = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    itbis_paid = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)

    itbis_retained_by_cards = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    other_retentions = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)
    total_itbis_retained = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)

    net_itbis_due = models.DecimalField(max_digits=14, decimal_places=2, default=ZERO)

    status = models.CharField(max_length=8, choices=Status.choices, default=Status.OPEN)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-period"]
        verbose_name = "ITBIS Summary"
        verbose_name_plural = "ITBIS Summaries"

    def __str__(self):
        return f"ITBIS {self.period} (net due {self.net_itbis_due})"

    @property
    def is_closed(self) -> bool:
        return self.status == self.Status.CLOSED

    def recompute_totals(self) -> None:
        self.total_itbis_retained = Decimal(self.itbis_retained_by_cards) + Decimal(
            self.other_retentions
        )
        self.net_itbis_due = (
            Decimal(self.itbis_collected)
            - Decimal(self.itbis_paid)
            - self.total_itbis_retained
        )

    def clean(self):
        if not PERIOD_RE.match(self.period or ""):
            raise ValidationError({"period": "period must be formatted as YYYY-MM"})

    def save(self, *args, **kwargs):
        self.recompute_totals()
        self.full_clean()
        return super().save(*args, **kwargs)
