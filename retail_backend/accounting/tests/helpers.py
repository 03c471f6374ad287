# accounting/tests/helpers.py

from io import StringIO

from django.core.management import call_command

from accounting.services.account_resolver import clear_active_chart_cache


def seed_chart() -> None:
    """Seed the retail chart and drop any chart cached by a previous test."""
    clear_active_chart_cache()
    call_command("seed_retail_chart", stdout=StringIO())
