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
        ("sales", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("sku", models.CharField(db_index=True, max_length=64, unique=True)),
                ("barcode", models.CharField(blank=True, db_index=True, default="", max_length=64)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("category", models.CharField(blank=True, default="", max_length=100)),
                (
                    "last_price",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("0.0000"),
                        help_text="Most recent purchase cost per unit.",
                        max_digits=12,
                    ),
                ),
                ("cost_includes_tax", models.BooleanField(default=True)),
                (
                    "cost_tax_rate",
                    models.DecimalField(
                        blank=True,
                        decimal_places=4,
                        help_text="ITBIS rate on cost (0.18, 0.16, 0). Empty means the default rate.",
                        max_digits=5,
                        null=True,
                    ),
                ),
                ("selling_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("current_stock", models.IntegerField(default=0)),
                ("reorder_point", models.PositiveIntegerField(default=0)),
                ("last_stock_update", models.DateField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["name"], name="product_name_idx"),
                    models.Index(fields=["category"], name="product_category_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="InventoryLot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("lot_number", models.CharField(blank=True, default="", max_length=64)),
                (
                    "source",
                    models.CharField(
                        choices=[("purchase", "Purchase"), ("adjustment", "Adjustment"), ("initial", "Initial Load")],
                        default="purchase",
                        max_length=16,
                    ),
                ),
                ("purchase_date", models.DateField(default=django.utils.timezone.localdate)),
                ("expiration_date", models.DateField(blank=True, null=True)),
                ("original_quantity", models.PositiveIntegerField(help_text="Quantity received (immutable)")),
                (
                    "remaining_quantity",
                    models.PositiveIntegerField(help_text="Remaining quantity (service-managed only)"),
                ),
                (
                    "unit_cost",
                    models.DecimalField(
                        decimal_places=4, help_text="Unit cost excluding ITBIS (immutable).", max_digits=12
                    ),
                ),
                ("unit_cost_inc_tax", models.DecimalField(decimal_places=4, max_digits=12)),
                ("tax_rate", models.DecimalField(decimal_places=4, max_digits=5)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("depleted", "Depleted"), ("expired", "Expired")],
                        default="active",
                        max_length=10,
                    ),
                ),
                ("depleted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="lots",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["purchase_date", "created_at", "id"],
                "indexes": [
                    models.Index(fields=["product", "status", "purchase_date"], name="lot_product_fifo_idx"),
                    models.Index(fields=["expiration_date"], name="lot_expiration_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(original_quantity__gt=0),
                        name="chk_lot_original_qty_gt_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(remaining_quantity__lte=models.F("original_quantity")),
                        name="chk_lot_remaining_lte_original",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockAdjustment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("theoretical_stock", models.IntegerField()),
                ("actual_count", models.PositiveIntegerField()),
                ("difference", models.IntegerField()),
                (
                    "reason",
                    models.CharField(
                        choices=[
                            ("physical_count", "Physical Count"),
                            ("damage", "Damage"),
                            ("theft", "Theft"),
                            ("expiration", "Expiration"),
                            ("return_supplier", "Return to Supplier"),
                            ("found", "Found"),
                            ("correction", "Correction"),
                            ("other", "Other"),
                        ],
                        max_length=20,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("unit_cost", models.DecimalField(decimal_places=4, max_digits=12)),
                ("total_cost", models.DecimalField(decimal_places=4, max_digits=14)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "journal_entry",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_adjustments",
                        to="accounting.journalentry",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_adjustments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="adjustments",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["product", "created_at"], name="adjustment_product_idx"),
                    models.Index(fields=["reason"], name="adjustment_reason_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CostConsumption",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.PositiveIntegerField()),
                ("unit_cost", models.DecimalField(decimal_places=4, max_digits=12)),
                ("total_cost", models.DecimalField(decimal_places=4, max_digits=14)),
                ("consumed_on", models.DateField(default=django.utils.timezone.localdate)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "adjustment",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="consumptions",
                        to="products.stockadjustment",
                    ),
                ),
                (
                    "lot",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="consumptions",
                        to="products.inventorylot",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="cost_consumptions",
                        to="products.product",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="cost_consumptions",
                        to="sales.sale",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["product", "consumed_on"], name="consumption_product_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "movement_type",
                    models.CharField(
                        choices=[("in", "Stock In"), ("out", "Stock Out"), ("adjustment", "Adjustment")],
                        max_length=10,
                    ),
                ),
                ("quantity", models.IntegerField(help_text="Signed delta (+ in, - out)")),
                ("movement_date", models.DateTimeField(default=django.utils.timezone.now)),
                ("unit_cost", models.DecimalField(blank=True, decimal_places=4, max_digits=12, null=True)),
                ("total_cost", models.DecimalField(blank=True, decimal_places=4, max_digits=14, null=True)),
                (
                    "reference",
                    models.CharField(blank=True, default="", help_text="Receipt / invoice number", max_length=100),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "adjustment",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="movements",
                        to="products.stockadjustment",
                    ),
                ),
                (
                    "lot",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to="products.inventorylot",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_movements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to="products.product",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to="sales.sale",
                    ),
                ),
            ],
            options={
                "ordering": ["-movement_date", "-id"],
                "indexes": [
                    models.Index(fields=["product", "movement_date"], name="movement_product_date_idx"),
                    models.Index(fields=["movement_type"], name="movement_type_idx"),
                ],
            },
        ),
    ]
