# sales/tests/helpers.py

from datetime import datetime
from decimal import Decimal

from django.utils import timezone

from accounting.models.bank_account import BankAccount
from sales.models import Sale


def make_bank_account(**overrides) -> BankAccount:
    values = {
        "bank_name": "Banco Popular",
        "account_name": "Operating",
        "account_number": "4411",
    }
    values.update(overrides)
    return BankAccount.objects.create(**values)


def make_sale(total, *, method=Sale.PaymentMethod.CREDIT_CARD, status=Sale.PaymentStatus.PAID, day=None) -> Sale:
    sold_at = timezone.now()
    if day is not None:
        sold_at = timezone.make_aware(datetime.combine(day, datetime.min.time().replace(hour=12)))
    return Sale.objects.create(
        total=Decimal(str(total)),
        payment_method=method,
        payment_status=status,
        sold_at=sold_at,
    )
