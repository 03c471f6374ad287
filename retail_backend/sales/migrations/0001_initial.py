import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounting", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "receipt_number",
                    models.CharField(
                        blank=True, help_text="System-generated receipt number", max_length=64, unique=True
                    ),
                ),
                ("total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("cash", "Cash"),
                            ("credit_card", "Credit Card"),
                            ("debit_card", "Debit Card"),
                            ("bank_transfer", "Bank Transfer"),
                        ],
                        default="cash",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("paid", "Paid"), ("pending", "Pending")],
                        default="paid",
                        max_length=10,
                    ),
                ),
                ("sold_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "cashier",
                    models.ForeignKey(
                        blank=True,
                        help_text="Cashier / staff who processed the sale",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-sold_at"],
                "indexes": [
                    models.Index(fields=["sold_at"], name="sale_sold_at_idx"),
                    models.Index(fields=["payment_method", "payment_status"], name="sale_method_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CardSettlement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("settlement_date", models.DateField(default=django.utils.timezone.localdate)),
                ("period_start", models.DateField()),
                ("period_end", models.DateField()),
                ("gross_amount", models.DecimalField(decimal_places=4, max_digits=14)),
                ("commission_rate", models.DecimalField(decimal_places=6, max_digits=8)),
                ("commission_amount", models.DecimalField(decimal_places=4, max_digits=14)),
                (
                    "retention_rate",
                    models.DecimalField(
                        decimal_places=6,
                        help_text="ITBIS withheld by the card processor, as a fraction of gross.",
                        max_digits=8,
                    ),
                ),
                ("retention_amount", models.DecimalField(decimal_places=4, max_digits=14)),
                ("net_deposit", models.DecimalField(decimal_places=4, max_digits=14)),
                ("deposit_reference", models.CharField(blank=True, default="", max_length=100)),
                (
                    "status",
                    models.CharField(choices=[("reconciled", "Reconciled")], default="reconciled", max_length=16),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "bank_account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="card_settlements",
                        to="accounting.bankaccount",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="card_settlements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "journal_entry",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="card_settlements",
                        to="accounting.journalentry",
                    ),
                ),
            ],
            options={
                "ordering": ["-settlement_date", "-id"],
                "indexes": [
                    models.Index(fields=["settlement_date"], name="settlement_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CardSettlementSale",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "amount",
                    models.DecimalField(decimal_places=2, help_text="Sale total at settlement time.", max_digits=12),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="settlement_links",
                        to="sales.sale",
                    ),
                ),
                (
                    "settlement",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="settlement_links",
                        to="sales.cardsettlement",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(fields=["sale"], name="uniq_settled_sale"),
                ],
            },
        ),
        migrations.AddField(
            model_name="cardsettlement",
            name="sales",
            field=models.ManyToManyField(
                blank=True,
                related_name="card_settlements",
                through="sales.CardSettlementSale",
                to="sales.sale",
            ),
        ),
    ]
