import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=50)),
                ("entity", models.CharField(max_length=50)),
                ("entity_id", models.IntegerField()),
                ("performed_by", models.CharField(max_length=150)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("extra_data", models.JSONField(blank=True, null=True)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                (
                    "category",
                    models.CharField(
                        choices=[("phones", "Teléfonos"), ("accessories", "Accesorios"), ("laptops", "Laptops")],
                        default="phones",
                        max_length=20,
                    ),
                ),
                ("brand", models.CharField(blank=True, max_length=100)),
                ("cost_price", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("selling_price", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("stock_quantity", models.PositiveIntegerField(default=0)),
                ("active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.CharField(blank=True, max_length=150)),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.UniqueConstraint(fields=("name", "category"), name="unique_product_name_per_category")
                ],
            },
        ),
        migrations.CreateModel(
            name="Warranty",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("phone_name", models.CharField(max_length=255)),
                ("customer_name", models.CharField(max_length=255)),
                ("customer_email", models.EmailField(max_length=254)),
                ("customer_phone", models.CharField(max_length=50)),
                ("store_name", models.CharField(max_length=255)),
                ("color", models.CharField(max_length=100)),
                ("storage", models.CharField(max_length=50)),
                ("price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("imei_number", models.CharField(max_length=50)),
                ("warranty_period", models.IntegerField(help_text="Duración de la garantía en meses")),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Activa"), ("expired", "Vencida"), ("unknown", "Desconocida")],
                        default="active",
                        max_length=10,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.CharField(blank=True, max_length=150)),
            ],
            options={
                "verbose_name_plural": "warranties",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("product_name", models.CharField(blank=True, max_length=255)),
                ("customer_name", models.CharField(blank=True, max_length=255)),
                ("customer_phone", models.CharField(blank=True, max_length=50)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("selling_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("cost_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("offers", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("total_amount", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("ganji", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("sale_date", models.DateTimeField()),
                ("reference_store", models.CharField(blank=True, max_length=255)),
                (
                    "category",
                    models.CharField(
                        blank=True,
                        choices=[("phones", "Teléfonos"), ("accessories", "Accesorios"), ("laptops", "Laptops")],
                        max_length=20,
                    ),
                ),
                ("phone_name", models.CharField(blank=True, max_length=255)),
                ("imei", models.CharField(blank=True, max_length=50)),
                ("color", models.CharField(blank=True, max_length=100)),
                ("storage", models.CharField(blank=True, max_length=50)),
                ("warranty_months", models.IntegerField(blank=True, null=True)),
                ("has_warranty", models.BooleanField(default=False)),
                ("warranty_start", models.DateTimeField(blank=True, null=True)),
                ("warranty_end", models.DateTimeField(blank=True, null=True)),
                (
                    "warranty_status",
                    models.CharField(
                        blank=True,
                        choices=[("active", "Activa"), ("expired", "Vencida"), ("unknown", "Desconocida")],
                        max_length=10,
                        null=True,
                    ),
                ),
                ("warranty_details", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.CharField(blank=True, max_length=150)),
                (
                    "product",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to="shop.product",
                    ),
                ),
                (
                    "salesman",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "warranty",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to="shop.warranty",
                    ),
                ),
            ],
            options={
                "ordering": ["-sale_date"],
                "indexes": [
                    models.Index(fields=["salesman", "sale_date"], name="shop_sale_salesma_6f0b2e_idx"),
                    models.Index(fields=["has_warranty", "warranty_status"], name="shop_sale_has_war_9c4d1a_idx"),
                ],
            },
        ),
    ]
