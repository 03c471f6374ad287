# accounting/services/posting.py

"""
======================================================
PATH: accounting/services/posting.py
======================================================
POSTING ADAPTER

Build postings and call create_journal_entry (the engine).

This module should remain a thin adapter:
- It DOES NOT do workflows (orchestrators do).
- It DOES map business events -> accounting postings.
- It ALWAYS calls create_journal_entry (engine) for immutability + idempotency.

POSTING TOGGLE:
- settings.ACCOUNTING_POSTING_ENABLED = False skips posting (returns None)
  so stock/settlement flows can run without a seeded chart.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time

from django.conf import settings
from django.utils import timezone

from accounting.models.journal import JournalEntry
from accounting.services.journal_entry_service import create_journal_entry
from accounting.services.money import ZERO, money
from accounting.services.posting_rules_adjustment import build_adjustment_postings
from accounting.services.posting_rules_settlement import build_settlement_postings

logger = logging.getLogger(__name__)

# Alias for callers that post manual entries
post_journal_entry = create_journal_entry


def posting_enabled() -> bool:
    return bool(getattr(settings, "ACCOUNTING_POSTING_ENABLED", True))


def _end_of_day_aware(d: date) -> datetime:
    dt = datetime.combine(d, time(23, 59, 59))
    return timezone.make_aware(dt, timezone.get_current_timezone())


def _posted_at_for(value) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            return timezone.make_aware(value, timezone.get_current_timezone())
        return value
    if isinstance(value, date):
        return _end_of_day_aware(value)
    return None


# ============================================================
# CARD SETTLEMENT
# ============================================================


def post_card_settlement_to_ledger(settlement) -> JournalEntry | None:
    """
    Dr Bank (net) / Dr Commission / Dr ITBIS Retained / Cr Card Receivables (gross).
    Reference: card_settlement:<id>
    """
    if settlement is None or settlement.pk is None:
        raise ValueError("A persisted settlement is required")

    if not posting_enabled():
        logger.info(
            "Accounting posting disabled; skipping settlement journal",
            extra={"settlement_id": settlement.pk},
        )
        return None

    reference = (settlement.deposit_reference or "").strip()
    description = f"Card settlement #{settlement.pk}"
    if reference:
        description = f"{description} - {reference}"
    description = f"{description} (gross {money(settlement.gross_amount)})"

    postings = build_settlement_postings(
        gross_amount=settlement.gross_amount,
        commission_amount=settlement.commission_amount,
        retention_amount=settlement.retention_amount,
        bank_account=settlement.bank_account,
    )

    return create_journal_entry(
        description=description,
        postings=postings,
        reference_type="card_settlement",
        reference_id=str(settlement.pk),
        posted_at=_posted_at_for(settlement.settlement_date),
        source_type=JournalEntry.SourceType.CARD_SETTLEMENT,
    )


# ============================================================
# STOCK ADJUSTMENT
# ============================================================


def post_stock_adjustment_to_ledger(adjustment) -> JournalEntry | None:
    """
    Shrinkage: Dr expense-by-reason / Cr Inventory.
    Found goods: Dr Inventory / Cr Inventory Gains.
    Reference: stock_adjustment:<id>
    """
    if adjustment is None or adjustment.pk is None:
        raise ValueError("A persisted adjustment is required")

    if not posting_enabled():
        logger.info(
            "Accounting posting disabled; skipping adjustment journal",
            extra={"adjustment_id": adjustment.pk},
        )
        return None

    amount = money(adjustment.total_cost)
    if amount <= ZERO:
        logger.warning(
            "Stock adjustment has no cost to post",
            extra={"adjustment_id": adjustment.pk, "total_cost": str(adjustment.total_cost)},
        )
        return None

    postings = build_adjustment_postings(
        difference=adjustment.difference,
        total_cost=amount,
        reason=adjustment.reason,
    )

    direction = "shrinkage" if adjustment.difference < 0 else "found goods"
    description = (
        f"Stock adjustment #{adjustment.pk} ({direction}, {adjustment.reason}) "
        f"{adjustment.product.name}: {adjustment.difference:+d} units"
    )

    return create_journal_entry(
        description=description,
        postings=postings,
        reference_type="stock_adjustment",
        reference_id=str(adjustment.pk),
        posted_at=_posted_at_for(adjustment.created_at),
        source_type=JournalEntry.SourceType.STOCK_ADJUSTMENT,
    )
