# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY MODEL

A single accounting transaction (journal header).

Guarantees:
- Immutable once created (no updates, no deletes)
- Sequential human number per year (JE-YYYY-NNNNN), assigned by the engine
- Idempotency via reference uniqueness (when reference is provided)
- posted_at is the accounting effective date
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone


class JournalEntry(models.Model):
    class SourceType(models.TextChoices):
        CARD_SETTLEMENT = "card_settlement", "Card Settlement"
        STOCK_ADJUSTMENT = "stock_adjustment", "Stock Adjustment"
        MANUAL = "manual", "Manual"

    entry_number = models.CharField(max_length=20, unique=True)

    source_type = models.CharField(
        max_length=32,
        choices=SourceType.choices,
        default=SourceType.MANUAL,
    )

    reference = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        help_text="Source reference (card_settlement:<id>, stock_adjustment:<id>)",
    )

    description = models.TextField(help_text="Narrative description of the journal entry")

    posted_at = models.DateTimeField(
        default=timezone.now,
        help_text="Accounting effective date",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    is_posted = models.BooleanField(default=True)

    class Meta:
        ordering = ["-posted_at", "-created_at"]
        indexes = [
            models.Index(fields=["posted_at"], name="je_posted_at_idx"),
            models.Index(fields=["source_type"], name="je_source_type_idx"),
            models.Index(fields=["reference"], name="je_reference_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["reference"],
                condition=Q(reference__isnull=False) & ~Q(reference=""),
                name="uniq_journal_reference_not_blank",
            )
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        return f"{self.entry_number} - {self.posted_at.date()}"

    @property
    def total_debit(self):
        return sum(
            (le.amount for le in self.ledger_entries.all() if le.entry_type == "DEBIT"),
            start=0,
        )

    @property
    def total_credit(self):
        return sum(
            (le.amount for le in self.ledger_entries.all() if le.entry_type == "CREDIT"),
            start=0,
        )

    def clean(self):
        if self.reference is not None:
            self.reference = str(self.reference).strip() or None

        self.description = (self.description or "").strip()
        if not self.description:
            raise ValidationError("Journal entry description is required")

        if self.posted_at and timezone.is_naive(self.posted_at):
            self.posted_at = timezone.make_aware(self.posted_at, timezone.get_current_timezone())

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("JournalEntry records are immutable once created")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalEntry records are immutable and cannot be deleted")
