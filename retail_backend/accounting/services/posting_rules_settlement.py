# accounting/services/posting_rules_settlement.py

"""
POSTING RULES - CARD SETTLEMENTS (AUTHORITATIVE)

Defines HOW a processor deposit maps to accounting intent.

Accounting Effect:
- Debit  Bank                       (net deposit)
- Debit  Card Commission Expense    (commission)
- Debit  ITBIS Retained             (retention)
- Credit Card Receivables           (gross)

Rounding:
- Settlement figures are stored at 4 places; the ledger works in cents.
- Each line is rounded to cents and the bank line is DERIVED as
  gross - commission - retention, so the entry always balances.

THIS MODULE DOES NOT:
- Write to the database
- Create JournalEntry directly
"""

from __future__ import annotations

from decimal import Decimal

from accounting.models.account import Account
from accounting.services.account_resolver import (
    get_bank_account,
    get_card_commission_account,
    get_card_receivable_account,
    get_itbis_retained_account,
)
from accounting.services.exceptions import PostingRuleError
from accounting.services.money import ZERO, money


def resolve_deposit_account(bank_account) -> Account:
    """
    Ledger account debited for the deposit: the bank account's pinned
    ledger account when present, else the chart's semantic BANK account.
    """
    ledger_account = getattr(bank_account, "ledger_account", None)
    if ledger_account is not None:
        return ledger_account
    return get_bank_account()


def build_settlement_postings(
    *,
    gross_amount,
    commission_amount,
    retention_amount,
    bank_account=None,
) -> list[dict]:
    gross = money(gross_amount)
    commission = money(commission_amount)
    retention = money(retention_amount)

    if gross <= ZERO:
        raise PostingRuleError("Settlement gross amount must be positive")
    if commission < ZERO or retention < ZERO:
        raise PostingRuleError("Commission and retention cannot be negative")

    net = gross - commission - retention
    if net < ZERO:
        raise PostingRuleError(
            f"Settlement deductions exceed gross: gross={gross} deductions={commission + retention}"
        )

    postings: list[dict] = []

    if net > ZERO:
        postings.append(
            {
                "account": resolve_deposit_account(bank_account),
                "debit": net,
                "credit": Decimal("0.00"),
                "memo": "Net card deposit",
            }
        )

    if commission > ZERO:
        postings.append(
            {
                "account": get_card_commission_account(),
                "debit": commission,
                "credit": Decimal("0.00"),
                "memo": "Card processing commission",
            }
        )

    if retention > ZERO:
        postings.append(
            {
                "account": get_itbis_retained_account(),
                "debit": retention,
                "credit": Decimal("0.00"),
                "memo": "ITBIS retained by card processor",
            }
        )

    postings.append(
        {
            "account": get_card_receivable_account(),
            "debit": Decimal("0.00"),
            "credit": gross,
            "memo": "Card receivables settled",
        }
    )

    return postings
