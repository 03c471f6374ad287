# accounting/services/journal_entry_service.py

"""
======================================================
PATH: accounting/services/journal_entry_service.py
======================================================
JOURNAL ENTRY SERVICE (ACCOUNTING ENGINE)

This module is the ONLY place allowed to:
- Create JournalEntry
- Create LedgerEntry
- Enforce debit == credit
- Guarantee atomicity
- Enforce idempotency via reference (prevents double-posting)
- Assign sequential entry numbers (JE-YYYY-NNNNN)

Everything else (settlements, stock adjustments) must pass through here.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import IntegrityError, transaction
from django.db.models import Q, Sum
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry
from accounting.services.exceptions import (
    IdempotencyError,
    JournalEntryCreationError,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
MIN_LINE_AMOUNT = Decimal("0.01")

ENTRY_NUMBER_PREFIX = "JE"


def _money(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0.00")

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise JournalEntryCreationError(f"Invalid money value: {value!r}") from exc

    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _as_aware_dt(dt: datetime | None) -> datetime:
    if dt is None:
        return timezone.now()
    if timezone.is_naive(dt):
        return timezone.make_aware(dt, timezone.get_current_timezone())
    return dt


def _normalize_reference(
    reference_type: str | None, reference_id: str | None
) -> str | None:
    if not reference_type or not reference_id:
        return None

    rt = str(reference_type).strip()
    rid = str(reference_id).strip()
    if not rt or not rid:
        return None

    return f"{rt}:{rid}"


def _normalize_source_type(source_type: str | None) -> str:
    value = (source_type or JournalEntry.SourceType.MANUAL).strip()
    if value not in JournalEntry.SourceType.values:
        raise JournalEntryCreationError(f"Invalid source_type: {source_type!r}")
    return value


def _infer_chart_from_postings(normalized_postings: list[dict]) -> object:
    first_account = normalized_postings[0]["account"]
    chart = getattr(first_account, "chart", None)
    if chart is None:
        raise JournalEntryCreationError("Posting accounts must belong to a chart")

    for line in normalized_postings[1:]:
        acc = line["account"]
        if getattr(acc, "chart_id", None) != getattr(chart, "id", None):
            raise JournalEntryCreationError(
                "All postings must belong to the same chart. Cross-chart journal entries are not allowed."
            )

    return chart


def next_entry_number(posted_at: datetime) -> str:
    """
    Sequential per calendar year of posted_at: JE-2025-00001, JE-2025-00002...

    Must be called inside the engine transaction; the unique constraint on
    entry_number is the final guard against concurrent writers.
    """
    year = timezone.localtime(posted_at).year
    prefix = f"{ENTRY_NUMBER_PREFIX}-{year}-"

    last = (
        JournalEntry.objects.select_for_update()
        .filter(entry_number__startswith=prefix)
        .order_by("-entry_number")
        .values_list("entry_number", flat=True)
        .first()
    )

    seq = 1
    if last:
        try:
            seq = int(last.rsplit("-", 1)[-1]) + 1
        except ValueError as exc:
            raise JournalEntryCreationError(
                f"Malformed entry number in ledger: {last!r}"
            ) from exc

    return f"{prefix}{seq:05d}"


@transaction.atomic
def create_journal_entry(
    *,
    description: str,
    postings: list,
    reference_type: str | None = None,
    reference_id: str | None = None,
    posted_at: datetime | None = None,
    source_type: str | None = None,
):
    """
    postings: [{"account": Account, "debit": x, "credit": y, "memo": "..."}]
    """
    if not postings:
        raise JournalEntryCreationError(
            "Journal entry must contain at least one posting"
        )

    description = (description or "").strip()
    if not description:
        raise JournalEntryCreationError("Journal entry description is required")

    reference = _normalize_reference(reference_type, reference_id)
    source_type = _normalize_source_type(source_type)

    total_debits = Decimal("0.00")
    total_credits = Decimal("0.00")
    normalized_postings: list[dict] = []

    for line in postings:
        if not isinstance(line, dict):
            raise JournalEntryCreationError("Each posting must be an object/dict")

        account = line.get("account")
        if account is None:
            raise JournalEntryCreationError("Posting missing account")

        if not getattr(account, "is_active", True):
            raise JournalEntryCreationError(
                f"Account {getattr(account, 'code', 'UNKNOWN')} is inactive"
            )

        debit = _money(line.get("debit"))
        credit = _money(line.get("credit"))

        if debit < 0 or credit < 0:
            raise JournalEntryCreationError("Debit or credit cannot be negative")

        if debit > 0 and credit > 0:
            raise JournalEntryCreationError(
                "A posting cannot have both debit and credit"
            )

        if debit == 0 and credit == 0:
            raise JournalEntryCreationError(
                "A posting must have either debit or credit"
            )

        if debit > 0 and debit < MIN_LINE_AMOUNT:
            raise JournalEntryCreationError(f"Debit amount too small: {debit}")
        if credit > 0 and credit < MIN_LINE_AMOUNT:
            raise JournalEntryCreationError(f"Credit amount too small: {credit}")

        total_debits += debit
        total_credits += credit

        normalized_postings.append(
            {
                "account": account,
                "debit": debit,
                "credit": credit,
                "memo": (line.get("memo") or "").strip()[:255],
            }
        )

    if total_debits != total_credits:
        raise JournalEntryCreationError(
            f"Journal entry not balanced: debits={total_debits} credits={total_credits}"
        )

    _infer_chart_from_postings(normalized_postings)
    posted_at_dt = _as_aware_dt(posted_at)

    # Clear error before DB constraint race handling
    if reference and JournalEntry.objects.filter(reference=reference).exists():
        raise IdempotencyError(
            f"Journal entry already exists for reference {reference}"
        )

    try:
        with transaction.atomic():
            journal_entry = JournalEntry.objects.create(
                entry_number=next_entry_number(posted_at_dt),
                source_type=source_type,
                description=description,
                reference=reference,
                posted_at=posted_at_dt,
                is_posted=True,
            )
    except IntegrityError as exc:
        if reference and JournalEntry.objects.filter(reference=reference).exists():
            raise IdempotencyError(
                f"Journal entry already exists for reference {reference}"
            ) from exc
        raise JournalEntryCreationError(
            f"Failed to create journal entry: {exc}"
        ) from exc

    ledger_entries: list[LedgerEntry] = []
    for line in normalized_postings:
        debit = line["debit"]
        credit = line["credit"]

        if debit > 0:
            ledger_entries.append(
                LedgerEntry(
                    journal_entry=journal_entry,
                    account=line["account"],
                    entry_type=LedgerEntry.DEBIT,
                    amount=debit,
                    memo=line["memo"],
                )
            )

        if credit > 0:
            ledger_entries.append(
                LedgerEntry(
                    journal_entry=journal_entry,
                    account=line["account"],
                    entry_type=LedgerEntry.CREDIT,
                    amount=credit,
                    memo=line["memo"],
                )
            )

    LedgerEntry.objects.bulk_create(ledger_entries)

    logger.info(
        "Journal entry posted",
        extra={
            "entry_number": journal_entry.entry_number,
            "source_type": source_type,
            "reference": reference,
            "total": str(total_debits),
        },
    )
    return journal_entry


def get_account_balance(account: Account, *, as_of: datetime | None = None) -> Decimal:
    """
    Signed balance in the account's normal direction.
    Debit-normal accounts: debits - credits. Others: credits - debits.
    """
    qs = LedgerEntry.objects.filter(account=account, journal_entry__is_posted=True)
    if as_of is not None:
        qs = qs.filter(journal_entry__posted_at__lte=_as_aware_dt(as_of))

    totals = qs.aggregate(
        debits=Sum("amount", filter=Q(entry_type=LedgerEntry.DEBIT)),
        credits=Sum("amount", filter=Q(entry_type=LedgerEntry.CREDIT)),
    )
    debits = totals["debits"] or Decimal("0.00")
    credits = totals["credits"] or Decimal("0.00")

    if account.is_debit_normal:
        return _money(debits - credits)
    return _money(credits - debits)
