# accounting/services/itbis_service.py

"""
======================================================
PATH: accounting/services/itbis_service.py
======================================================
ITBIS TAX-RETENTION RECORDER

Tracks ITBIS withheld by third parties per monthly period (YYYY-MM):
- card processors (recorded by card settlements)
- other withholding agents

net_itbis_due = collected - paid - retained (derived by the model on save)

Closed periods are read-only: recording into one raises TaxRecordError.
close_period / reopen_period move a period between open and closed.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal

from django.apps import apps
from django.db import transaction
from django.utils import timezone

from accounting.models.itbis import PERIOD_RE, ItbisSummary
from accounting.services.exceptions import TaxRecordError
from accounting.services.money import ZERO, money, to_decimal

logger = logging.getLogger(__name__)


def get_period(value: date | datetime | str) -> str:
    """
    YYYY-MM for a date, datetime (local time) or ISO date string.
    """
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value.strip()[:10])
        except ValueError as exc:
            raise TaxRecordError(f"Invalid date: {value!r}") from exc

    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        value = value.date()

    if not isinstance(value, date):
        raise TaxRecordError(f"Invalid date: {value!r}")

    return f"{value.year:04d}-{value.month:02d}"


def get_current_period() -> str:
    return get_period(timezone.localdate())


def get_or_create_summary(period: str) -> ItbisSummary:
    period = (period or "").strip()
    if not PERIOD_RE.match(period):
        raise TaxRecordError(f"Invalid period {period!r}; expected YYYY-MM")

    summary, created = ItbisSummary.objects.get_or_create(period=period)
    if created:
        logger.info("ITBIS summary opened", extra={"period": period})
    return summary


def _parse_amount(amount) -> Decimal:
    try:
        value = money(to_decimal(amount, field="amount"))
    except ValueError as exc:
        raise TaxRecordError(str(exc)) from exc

    if value < ZERO:
        raise TaxRecordError("Retention amount cannot be negative")
    return value


def _locked_open_summary(period: str) -> ItbisSummary:
    get_or_create_summary(period)
    summary = ItbisSummary.objects.select_for_update().get(period=period)
    if summary.is_closed:
        raise TaxRecordError(f"ITBIS period {period} is closed")
    return summary


@transaction.atomic
def record_card_retention(on_date, amount) -> ItbisSummary:
    """
    Add ITBIS withheld by a card processor to the period of on_date.
    """
    value = _parse_amount(amount)
    period = get_period(on_date)
    summary = _locked_open_summary(period)

    summary.itbis_retained_by_cards = money(summary.itbis_retained_by_cards + value)
    summary.save()

    logger.info(
        "Card ITBIS retention recorded",
        extra={"period": period, "amount": str(value)},
    )
    return summary


@transaction.atomic
def record_other_retention(on_date, amount) -> ItbisSummary:
    value = _parse_amount(amount)
    period = get_period(on_date)
    summary = _locked_open_summary(period)

    summary.other_retentions = money(summary.other_retentions + value)
    summary.save()

    logger.info(
        "Other ITBIS retention recorded",
        extra={"period": period, "amount": str(value)},
    )
    return summary


@transaction.atomic
def recalculate_card_retentions(period: str) -> ItbisSummary:
    """
    Rebuild itbis_retained_by_cards from persisted settlements dated in the
    period. Repairs summaries after a swallowed recording failure.
    """
    summary = _locked_open_summary(period)
    year, month = (int(p) for p in period.split("-"))

    # Resolved lazily: sales depends on accounting, not the other way round.
    CardSettlement = apps.get_model("sales", "CardSettlement")
    retentions = CardSettlement.objects.filter(
        settlement_date__year=year,
        settlement_date__month=month,
    ).values_list("retention_amount", flat=True)

    # Per-settlement cents, matching what record_card_retention accumulates.
    total = sum((money(r) for r in retentions), ZERO)

    previous = summary.itbis_retained_by_cards
    summary.itbis_retained_by_cards = money(total)
    summary.save()

    if previous != summary.itbis_retained_by_cards:
        logger.warning(
            "Card ITBIS retentions recalculated",
            extra={
                "period": period,
                "previous": str(previous),
                "recalculated": str(summary.itbis_retained_by_cards),
            },
        )
    return summary


# ============================================================
# PERIOD STATUS
# ============================================================


@transaction.atomic
def close_period(period: str) -> ItbisSummary:
    """
    Close the period for recording. Closing a closed period is a no-op.
    """
    get_or_create_summary(period)
    summary = ItbisSummary.objects.select_for_update().get(period=period)
    if summary.is_closed:
        return summary

    summary.status = ItbisSummary.Status.CLOSED
    summary.save()

    logger.info("ITBIS period closed", extra={"period": period})
    return summary


@transaction.atomic
def reopen_period(period: str) -> ItbisSummary:
    """Reopen a closed period for corrections."""
    get_or_create_summary(period)
    summary = ItbisSummary.objects.select_for_update().get(period=period)
    if not summary.is_closed:
        return summary

    summary.status = ItbisSummary.Status.OPEN
    summary.save()

    logger.warning("ITBIS period reopened", extra={"period": period})
    return summary
