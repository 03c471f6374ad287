# sales/models/sale.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    Represents a completed POS transaction.

    GUARANTEES:
    - Immutable financial record once paid (pending -> paid is the only
      transition allowed)
    - Paid sales are never deleted
    - Card settlement linkage lives on CardSettlementSale, not on the sale
    """

    class PaymentMethod(models.TextChoices):
        CASH = "cash", "Cash"
        CREDIT_CARD = "credit_card", "Credit Card"
        DEBIT_CARD = "debit_card", "Debit Card"
        BANK_TRANSFER = "bank_transfer", "Bank Transfer"

    class PaymentStatus(models.TextChoices):
        PAID = "paid", "Paid"
        PENDING = "pending", "Pending"

    CARD_METHODS = (PaymentMethod.CREDIT_CARD, PaymentMethod.DEBIT_CARD)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    receipt_number = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated receipt number",
    )

    cashier = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
        help_text="Cashier / staff who processed the sale",
    )

    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH,
    )
    payment_status = models.CharField(
        max_length=10,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PAID,
    )

    sold_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-sold_at"]
        indexes = [
            models.Index(fields=["sold_at"], name="sale_sold_at_idx"),
            models.Index(fields=["payment_method", "payment_status"], name="sale_method_status_idx"),
        ]

    _IMMUTABLE_FIELDS_AFTER_PAYMENT = (
        "receipt_number",
        "cashier_id",
        "total",
        "payment_method",
        "payment_status",
        "sold_at",
    )

    @property
    def is_card(self) -> bool:
        return self.payment_method in self.CARD_METHODS

    @property
    def is_paid(self) -> bool:
        return self.payment_status == self.PaymentStatus.PAID

    def clean(self):
        if self.total is None or Decimal(self.total) < 0:
            raise ValidationError({"total": "total cannot be negative"})

    def _validate_immutable(self, previous: "Sale"):
        if previous.payment_status != self.PaymentStatus.PAID:
            return

        for field in self._IMMUTABLE_FIELDS_AFTER_PAYMENT:
            if getattr(self, field) != getattr(previous, field):
                raise ValidationError(
                    f"Sale is immutable once paid. Field '{field.removesuffix('_id')}' cannot be changed."
                )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            previous = Sale.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        if not self.receipt_number:
            prefix = timezone.localtime(self.sold_at).strftime("RC%Y%m%d")
            self.receipt_number = f"{prefix}-{uuid.uuid4().hex[:8].upper()}"

        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.is_paid:
            raise ValidationError("Paid sales are financial records and cannot be deleted")
        return super().delete(*args, **kwargs)

    def __str__(self):
        return f"{self.receipt_number} | {self.total}"
