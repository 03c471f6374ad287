# sales/models/card_settlement.py

"""
CARD SETTLEMENT (DEPOSIT RECONCILIATION)

Ties a set of paid card sales to one bank deposit, net of the processor's
commission and the ITBIS it withholds.

GUARANTEES:
- net_deposit = gross_amount - commission_amount - retention_amount (exact)
- A sale belongs to at most one settlement (unique CardSettlementSale.sale)
- Immutable once created, except attaching the journal entry ONCE
- Never deleted
"""

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class CardSettlement(models.Model):
    class Status(models.TextChoices):
        RECONCILED = "reconciled", "Reconciled"

    settlement_date = models.DateField(default=timezone.localdate)
    period_start = models.DateField()
    period_end = models.DateField()

    gross_amount = models.DecimalField(max_digits=14, decimal_places=4)
    commission_rate = models.DecimalField(max_digits=8, decimal_places=6)
    commission_amount = models.DecimalField(max_digits=14, decimal_places=4)
    retention_rate = models.DecimalField(
        max_digits=8,
        decimal_places=6,
        help_text="ITBIS withheld by the card processor, as a fraction of gross.",
    )
    retention_amount = models.DecimalField(max_digits=14, decimal_places=4)
    net_deposit = models.DecimalField(max_digits=14, decimal_places=4)

    bank_account = models.ForeignKey(
        "accounting.BankAccount",
        on_delete=models.PROTECT,
        related_name="card_settlements",
    )
    deposit_reference = models.CharField(max_length=100, blank=True, default="")

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.RECONCILED)

    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="card_settlements",
    )

    sales = models.ManyToManyField(
        "sales.Sale",
        through="sales.CardSettlementSale",
        related_name="card_settlements",
        blank=True,
    )

    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="card_settlements",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-settlement_date", "-id"]
        indexes = [
            models.Index(fields=["settlement_date"], name="settlement_date_idx"),
        ]

    def __str__(self):
        label = self.deposit_reference or f"#{self.pk}"
        return f"Card settlement {label} | {self.settlement_date} | net {self.net_deposit}"

    @property
    def sale_ids(self) -> list:
        return list(self.settlement_links.values_list("sale_id", flat=True))

    def clean(self):
        if self.gross_amount is None or Decimal(self.gross_amount) <= 0:
            raise ValidationError({"gross_amount": "gross_amount must be greater than zero"})

        for field in ("commission_rate", "retention_rate"):
            rate = getattr(self, field)
            if rate is None or not (Decimal("0") <= Decimal(rate) < Decimal("1")):
                raise ValidationError({field: f"{field} must be in [0, 1)"})

        expected = Decimal(self.gross_amount) - Decimal(self.commission_amount) - Decimal(self.retention_amount)
        if Decimal(self.net_deposit) != expected:
            raise ValidationError(
                {"net_deposit": "net_deposit must equal gross_amount - commission_amount - retention_amount"}
            )

        if self.period_start and self.period_end and self.period_start > self.period_end:
            raise ValidationError({"period_end": "period_end cannot be before period_start"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            update_fields = kwargs.get("update_fields")
            if update_fields is None or set(update_fields) != {"journal_entry"}:
                raise ValidationError("CardSettlement records are immutable (journal_entry may be attached once)")

            previous = (
                CardSettlement.objects.filter(pk=self.pk)
                .values_list("journal_entry_id", flat=True)
                .first()
            )
            if previous is not None:
                raise ValidationError("CardSettlement already has a journal entry attached")
            return super().save(*args, **kwargs)

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("CardSettlement records are immutable and cannot be deleted")


class CardSettlementSale(models.Model):
    """
    One settled sale. The unique sale constraint makes settlements a
    partition over card sales.
    """

    settlement = models.ForeignKey(
        CardSettlement,
        on_delete=models.PROTECT,
        related_name="settlement_links",
    )
    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        related_name="settlement_links",
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Sale total at settlement time.",
    )

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["sale"], name="uniq_settled_sale"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Settled sale links are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Settled sale links are immutable and cannot be deleted")

    def __str__(self):
        return f"Settlement {self.settlement_id} <- sale {self.sale_id}"
