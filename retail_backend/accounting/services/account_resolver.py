# accounting/services/account_resolver.py

"""
PATH: accounting/services/account_resolver.py

ACCOUNT RESOLVER (AUTHORITATIVE)

This module answers ONE question:
"Which account should be used for this purpose?"

It is chart-aware: different charts may use different codes
for the same semantic account (e.g., Inventory code differs).

Design goals:
- deterministic
- chart-safe
- hard-fail on missing setup (so we don't post to wrong accounts)

Bootstrap rule:
- If no active chart exists, activate an existing one or create the default
  (idempotent).
- If multiple active charts exist, hard-fail (do NOT auto-fix silently).
"""

from __future__ import annotations

import logging
from functools import lru_cache

from django.core.exceptions import MultipleObjectsReturned, ObjectDoesNotExist
from django.db import transaction

from accounting.models.account import Account
from accounting.models.chart import ChartOfAccounts
from accounting.services.exceptions import AccountResolutionError

logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# SEMANTIC CODES BY CHART KEY
# ------------------------------------------------------------

DEFAULT_CODES = {
    "CASH": "1000",
    "BANK": "1010",
    "AR": "1100",
    "CARD_RECEIVABLE": "1110",
    "ITBIS_RETAINED": "1120",
    "SUPPLIER_ADVANCES": "1130",
    "INVENTORY": "1200",
    "ACCOUNTS_PAYABLE": "2000",
    "VAT_PAYABLE": "2100",
    "SALES_REVENUE": "4000",
    "INVENTORY_GAIN": "4200",
    "COGS": "5000",
    "SHRINKAGE_EXPENSE": "6100",
    "EXPIRATION_EXPENSE": "6110",
    "THEFT_EXPENSE": "6120",
    "CARD_COMMISSION_EXPENSE": "6200",
}

CHART_CODE_MAP = {
    "retail_do_standard": DEFAULT_CODES,
    # Mini markets book card receivables and gains under the same numbering.
    "minimarket_do_standard": DEFAULT_CODES,
}

DEFAULT_BOOTSTRAP_CHART = {
    "name": "General Retail (DR)",
    "code": "retail_do_standard",
    "business_type": ChartOfAccounts.BUSINESS_RETAIL,
    "industry": "Retail",
}


def _norm(s) -> str:
    if s is None:
        return ""
    return " ".join(str(s).strip().lower().split())


def _codes_for_chart(chart: ChartOfAccounts) -> dict:
    key = _norm(getattr(chart, "code", None))
    if key in CHART_CODE_MAP:
        return CHART_CODE_MAP[key]
    return DEFAULT_CODES


# ------------------------------------------------------------
# BOOTSTRAP
# ------------------------------------------------------------


def _ensure_single_active_chart() -> ChartOfAccounts:
    """
    - exactly one active -> return it
    - none active -> activate an existing chart if present, else create one
    - multiple active -> hard-fail
    """
    with transaction.atomic():
        active_qs = ChartOfAccounts.objects.select_for_update().filter(is_active=True)
        active_count = active_qs.count()

        if active_count == 1:
            return active_qs.first()

        if active_count > 1:
            raise AccountResolutionError(
                "Multiple active Charts of Accounts found. Only one active chart is allowed."
            )

        existing = ChartOfAccounts.objects.select_for_update().order_by("id").first()
        if existing:
            existing.is_active = True
            existing.save(update_fields=["is_active"])

            logger.warning(
                "Chart bootstrap: activated existing ChartOfAccounts id=%s name=%s",
                existing.id,
                existing.name,
            )
            return existing

        chart = ChartOfAccounts.objects.create(is_active=True, **DEFAULT_BOOTSTRAP_CHART)
        logger.warning(
            "Chart bootstrap: created default ChartOfAccounts id=%s name=%s",
            chart.id,
            chart.name,
        )
        return chart


# ------------------------------------------------------------
# ACTIVE CHART
# ------------------------------------------------------------


@lru_cache(maxsize=1)
def get_active_chart() -> ChartOfAccounts:
    """
    Cached resolver for the *single* active chart.

    NOTE:
    If you toggle active charts outside ChartOfAccounts.save(), call
    clear_active_chart_cache().
    """
    try:
        return ChartOfAccounts.objects.get(is_active=True)
    except ObjectDoesNotExist:
        chart = _ensure_single_active_chart()
        clear_active_chart_cache()
        return chart
    except MultipleObjectsReturned as exc:
        raise AccountResolutionError(
            "Multiple active Charts of Accounts found. Only one active chart is allowed."
        ) from exc


def clear_active_chart_cache() -> None:
    get_active_chart.cache_clear()


# ------------------------------------------------------------
# INTERNAL RESOLUTION HELPERS
# ------------------------------------------------------------


def _resolve_code(*, semantic_key: str, chart: ChartOfAccounts) -> str:
    semantic_key = (semantic_key or "").strip().upper()
    if not semantic_key:
        raise AccountResolutionError("semantic_key is required")

    code = (_codes_for_chart(chart).get(semantic_key) or "").strip()
    if not code:
        raise AccountResolutionError(
            f"Missing mapping for semantic key '{semantic_key}' in chart '{chart.name}'. "
            "Update CHART_CODE_MAP and ensure the seed command creates the account code."
        )
    return code


def get_account_by_code(*, code: str, chart: ChartOfAccounts | None = None) -> Account:
    chart = chart or get_active_chart()
    code = (code or "").strip()
    if not code:
        raise AccountResolutionError("Account code is required")

    try:
        return Account.objects.get(chart=chart, code=code, is_active=True)
    except ObjectDoesNotExist as exc:
        raise AccountResolutionError(
            f"Account with code={code} not found (or inactive) in active chart '{chart.name}'. "
            "Run `manage.py seed_retail_chart` (or add the account manually)."
        ) from exc


# ------------------------------------------------------------
# PUBLIC RESOLVERS
# ------------------------------------------------------------


def get_account(semantic_key: str) -> Account:
    chart = get_active_chart()
    return get_account_by_code(
        chart=chart, code=_resolve_code(semantic_key=semantic_key, chart=chart)
    )


def get_bank_account() -> Account:
    return get_account("BANK")


def get_inventory_account() -> Account:
    return get_account("INVENTORY")


def get_card_receivable_account() -> Account:
    return get_account("CARD_RECEIVABLE")


def get_card_commission_account() -> Account:
    return get_account("CARD_COMMISSION_EXPENSE")


def get_itbis_retained_account() -> Account:
    return get_account("ITBIS_RETAINED")


def get_inventory_gain_account() -> Account:
    return get_account("INVENTORY_GAIN")
