# sales/services/settlement_service.py

"""
CARD SETTLEMENT RECONCILER (APPLICATION SERVICE)

Purpose:
- Offer paid card sales that no settlement has claimed yet (candidates).
- Reconcile a selection of them (or a manually entered gross) against one
  bank deposit, net of the processor's commission and ITBIS retention.
- Post the settlement to the ledger and record the retention for tax.

PATH:
1) validate (amount, bank account, rates, sales, mismatch) -> SettlementValidationError
2) CardSettlement + CardSettlementSale rows                  (must succeed)
3) journal entry, attached to the settlement                 (best-effort)
4) ITBIS card retention for the settlement period            (best-effort)

Hard rules:
- Arithmetic is exact (Decimal); amounts are stored with 4 places, rates
  with 6, so net_deposit = gross - commission - retention holds exactly.
- The settled set is rebuilt from persisted settlements on every load.
  The unique sale constraint backs it up at database level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone

from accounting.models.bank_account import BankAccount
from accounting.services.exceptions import AccountingServiceError
from accounting.services.itbis_service import record_card_retention
from accounting.services.money import ZERO, amount4, rate6, to_decimal, within_tolerance
from accounting.services.posting import post_card_settlement_to_ledger
from sales.models import CardSettlement, CardSettlementSale, Sale

logger = logging.getLogger(__name__)


# ============================================================
# DOMAIN ERRORS
# ============================================================


class CardSettlementError(Exception):
    """Base error for card settlement workflows."""


class SettlementValidationError(CardSettlementError):
    """
    Input rejected before anything is written.
    code: invalid_amount | missing_bank_account | mismatch | invalid_rate
          | already_settled | invalid_sale
    """

    def __init__(self, message: str, *, code: str):
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class SettlementAmounts:
    gross_amount: Decimal
    commission_rate: Decimal
    commission_amount: Decimal
    retention_rate: Decimal
    retention_amount: Decimal
    net_deposit: Decimal


# ============================================================
# CANDIDATES
# ============================================================


def get_settled_sale_ids() -> set:
    """Every sale id claimed by a persisted settlement."""
    return set(CardSettlementSale.objects.values_list("sale_id", flat=True))


def _card_sales():
    return Sale.objects.filter(
        payment_method__in=Sale.CARD_METHODS,
        payment_status=Sale.PaymentStatus.PAID,
    )


def get_settlement_candidates():
    """
    Paid card sales not yet included in any settlement, oldest first.
    """
    return _card_sales().exclude(pk__in=get_settled_sale_ids()).order_by("sold_at", "id")


def get_candidates_total() -> Decimal:
    total = get_settlement_candidates().aggregate(total=Sum("total"))["total"]
    return Decimal(total or ZERO)


# ============================================================
# COMPUTATION
# ============================================================


def _rate(value, *, default, field: str) -> Decimal:
    raw = default if value is None or value == "" else value
    try:
        rate = rate6(to_decimal(raw, field=field))
    except ValueError as exc:
        raise SettlementValidationError(str(exc), code="invalid_rate") from exc

    if not (Decimal("0") <= rate < Decimal("1")):
        raise SettlementValidationError(f"{field} must be a fraction in [0, 1)", code="invalid_rate")
    return rate


def compute_settlement_amounts(gross_amount, commission_rate=None, retention_rate=None) -> SettlementAmounts:
    """
    commission = gross x commission_rate
    retention  = gross x retention_rate
    net        = gross - commission - retention

    Rates default to settings.CARD_COMMISSION_RATE / CARD_ITBIS_RETENTION_RATE.
    """
    try:
        gross = amount4(gross_amount)
    except ValueError as exc:
        raise SettlementValidationError(str(exc), code="invalid_amount") from exc

    c_rate = _rate(commission_rate, default=settings.CARD_COMMISSION_RATE, field="commission_rate")
    r_rate = _rate(retention_rate, default=settings.CARD_ITBIS_RETENTION_RATE, field="retention_rate")

    commission = amount4(gross * c_rate)
    retention = amount4(gross * r_rate)

    return SettlementAmounts(
        gross_amount=gross,
        commission_rate=c_rate,
        commission_amount=commission,
        retention_rate=r_rate,
        retention_amount=retention,
        net_deposit=gross - commission - retention,
    )


# ============================================================
# VALIDATION
# ============================================================


def _load_selected_sales(sales, *, lock: bool) -> list[Sale]:
    """
    Resolve the selection (Sale instances or ids) in the order given,
    dropping duplicates.
    """
    pk_field = Sale._meta.pk
    sale_ids = []
    for item in sales or ():
        try:
            sale_id = pk_field.to_python(getattr(item, "pk", item))
        except ValidationError as exc:
            raise SettlementValidationError(f"Invalid sale identifier {item!r}", code="invalid_sale") from exc
        if sale_id not in sale_ids:
            sale_ids.append(sale_id)

    if not sale_ids:
        return []

    qs = Sale.objects.filter(pk__in=sale_ids)
    if lock:
        # lock rows for concurrency safety
        qs = qs.select_for_update()
    found = {s.pk: s for s in qs}

    missing = [str(sid) for sid in sale_ids if sid not in found]
    if missing:
        raise SettlementValidationError(f"Unknown sale(s): {', '.join(missing)}", code="invalid_sale")

    return [found[sid] for sid in sale_ids]


def validate_settlement_input(
    *,
    sales=(),
    gross_amount=None,
    bank_account=None,
    commission_rate=None,
    retention_rate=None,
    lock: bool = False,
) -> tuple[list[Sale], SettlementAmounts]:
    """
    Returns (selected sales, computed amounts) or raises SettlementValidationError.

    gross_amount defaults to the sum of the selected sales' totals.
    With a selection, |gross - selected total| must be within
    settings.SETTLEMENT_TOLERANCE.
    """
    selected = _load_selected_sales(sales, lock=lock)
    selected_total = sum((Decimal(s.total) for s in selected), ZERO)

    if gross_amount is None or gross_amount == "":
        if not selected:
            raise SettlementValidationError(
                "gross_amount is required when no sales are selected", code="invalid_amount"
            )
        gross_amount = selected_total

    try:
        gross = amount4(to_decimal(gross_amount, field="gross_amount"))
    except ValueError as exc:
        raise SettlementValidationError(str(exc), code="invalid_amount") from exc

    # checked at stored precision: 0.00001 rounds to zero
    if gross <= 0:
        raise SettlementValidationError("gross_amount must be greater than zero", code="invalid_amount")

    if bank_account is None:
        raise SettlementValidationError("A bank account must be selected", code="missing_bank_account")
    if not bank_account.is_active:
        raise SettlementValidationError("The selected bank account is inactive", code="missing_bank_account")

    amounts = compute_settlement_amounts(gross, commission_rate, retention_rate)

    settled = get_settled_sale_ids()
    for sale in selected:
        if not (sale.is_card and sale.is_paid):
            raise SettlementValidationError(
                f"Sale {sale.receipt_number} is not a paid card sale", code="invalid_sale"
            )
        if sale.pk in settled:
            raise SettlementValidationError(
                f"Sale {sale.receipt_number} is already included in a settlement", code="already_settled"
            )

    if selected and not within_tolerance(gross, selected_total, settings.SETTLEMENT_TOLERANCE):
        raise SettlementValidationError(
            f"Gross amount {gross} does not match the selected sales total {selected_total}",
            code="mismatch",
        )

    return selected, amounts


# ============================================================
# SECONDARY EFFECTS (BEST-EFFORT)
# ============================================================


def _attach_journal_entry(settlement: CardSettlement) -> None:
    try:
        with transaction.atomic():
            entry = post_card_settlement_to_ledger(settlement)
            if entry is not None:
                settlement.journal_entry = entry
                settlement.save(update_fields=["journal_entry"])
    except (AccountingServiceError, ValidationError, DatabaseError, ValueError):
        logger.exception(
            "Card settlement journal entry failed; settlement kept without ledger link",
            extra={"settlement_id": settlement.pk},
        )


def _record_retention(settlement: CardSettlement) -> None:
    if Decimal(settlement.retention_amount) <= 0:
        return

    try:
        with transaction.atomic():
            record_card_retention(settlement.settlement_date, settlement.retention_amount)
    except (AccountingServiceError, ValidationError, DatabaseError, ValueError):
        logger.exception(
            "Card ITBIS retention could not be recorded; recalculate the period to repair",
            extra={
                "settlement_id": settlement.pk,
                "settlement_date": str(settlement.settlement_date),
                "retention_amount": str(settlement.retention_amount),
            },
        )


# ============================================================
# CREATE
# ============================================================


@transaction.atomic
def create_settlement(
    *,
    bank_account: BankAccount | None,
    sales=(),
    gross_amount=None,
    commission_rate=None,
    retention_rate=None,
    settlement_date=None,
    deposit_reference: str = "",
    notes: str = "",
    user=None,
) -> CardSettlement:
    """
    Reconcile the selected card sales (or a manual gross) against a deposit.

    Only the settlement record must succeed; the journal entry and the ITBIS
    record are logged and skipped on failure.
    """
    selected, amounts = validate_settlement_input(
        sales=sales,
        gross_amount=gross_amount,
        bank_account=bank_account,
        commission_rate=commission_rate,
        retention_rate=retention_rate,
        lock=True,
    )

    settlement_date = settlement_date or timezone.localdate()
    if selected:
        sale_dates = [timezone.localtime(s.sold_at).date() for s in selected]
        period_start, period_end = min(sale_dates), max(sale_dates)
    else:
        period_start = period_end = settlement_date

    settlement = CardSettlement.objects.create(
        settlement_date=settlement_date,
        period_start=period_start,
        period_end=period_end,
        gross_amount=amounts.gross_amount,
        commission_rate=amounts.commission_rate,
        commission_amount=amounts.commission_amount,
        retention_rate=amounts.retention_rate,
        retention_amount=amounts.retention_amount,
        net_deposit=amounts.net_deposit,
        bank_account=bank_account,
        deposit_reference=(deposit_reference or "").strip(),
        notes=(notes or "").strip(),
        created_by=user,
    )

    for sale in selected:
        try:
            with transaction.atomic():
                CardSettlementSale.objects.create(settlement=settlement, sale=sale, amount=sale.total)
        except (IntegrityError, ValidationError) as exc:
            # a concurrent settlement claimed the sale after validation
            raise SettlementValidationError(
                f"Sale {sale.receipt_number} is already included in a settlement", code="already_settled"
            ) from exc

    logger.info(
        "Card settlement reconciled",
        extra={
            "settlement_id": settlement.pk,
            "sales": len(selected),
            "gross_amount": str(amounts.gross_amount),
            "commission_amount": str(amounts.commission_amount),
            "retention_amount": str(amounts.retention_amount),
            "net_deposit": str(amounts.net_deposit),
        },
    )

    _attach_journal_entry(settlement)
    _record_retention(settlement)

    return settlement
