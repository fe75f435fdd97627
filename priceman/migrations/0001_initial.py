import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ProductRecord",
            fields=[
                ("id", models.BigIntegerField(primary_key=True, serialize=False, verbose_name="id")),
                ("name", models.CharField(max_length=255, verbose_name="nome")),
                ("category", models.CharField(db_index=True, max_length=128, verbose_name="categoria")),
                ("base_price", models.DecimalField(decimal_places=2, max_digits=12, verbose_name="preço base")),
                (
                    "variation_price",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=12, null=True, verbose_name="preço de variação"
                    ),
                ),
                (
                    "purchase_price",
                    models.DecimalField(decimal_places=2, default=0, max_digits=12, verbose_name="custo"),
                ),
                (
                    "discount_value",
                    models.DecimalField(decimal_places=2, default=0, max_digits=12, verbose_name="desconto"),
                ),
                (
                    "discount_type",
                    models.CharField(
                        choices=[("Percentage", "percentual"), ("FixedAmount", "valor fixo")],
                        default="Percentage",
                        max_length=16,
                        verbose_name="tipo de desconto",
                    ),
                ),
                (
                    "seasonal_discount",
                    models.DecimalField(decimal_places=2, default=0, max_digits=12, verbose_name="desconto sazonal"),
                ),
                (
                    "seasonal_discount_type",
                    models.CharField(
                        choices=[("Percentage", "percentual"), ("FixedAmount", "valor fixo")],
                        default="Percentage",
                        max_length=16,
                        verbose_name="tipo de desconto sazonal",
                    ),
                ),
                (
                    "seasonal_discount_active",
                    models.BooleanField(default=True, verbose_name="desconto sazonal ativo"),
                ),
                (
                    "seasonal_start",
                    models.DateField(blank=True, null=True, verbose_name="início do desconto sazonal"),
                ),
                (
                    "seasonal_end",
                    models.DateField(blank=True, null=True, verbose_name="fim do desconto sazonal"),
                ),
                (
                    "effective_price",
                    models.DecimalField(decimal_places=2, default=0, max_digits=12, verbose_name="preço efetivo"),
                ),
                (
                    "profit_margin",
                    models.DecimalField(decimal_places=2, default=0, max_digits=14, verbose_name="margem (%)"),
                ),
                (
                    "min_selling_price",
                    models.DecimalField(
                        decimal_places=2, default=0, max_digits=12, verbose_name="preço mínimo de venda"
                    ),
                ),
                ("stock", models.PositiveIntegerField(default=0, verbose_name="estoque")),
                ("min_stock", models.PositiveIntegerField(default=5, verbose_name="estoque mínimo")),
                ("barcode", models.CharField(max_length=64, unique=True, verbose_name="código de barras")),
                ("is_visible", models.BooleanField(default=True, verbose_name="visível")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, verbose_name="criado em")),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now, verbose_name="atualizado em")),
            ],
            options={
                "verbose_name": "produto",
                "verbose_name_plural": "produtos",
                "ordering": ("id",),
            },
        ),
        migrations.CreateModel(
            name="ProductSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=64, unique=True, verbose_name="nome")),
                ("last_value", models.BigIntegerField(default=0, verbose_name="último valor")),
            ],
            options={
                "verbose_name": "sequência de produto",
                "verbose_name_plural": "sequências de produto",
            },
        ),
    ]
