from __future__ import annotations

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from priceman.types import DiscountType


class ProductRecord(models.Model):
    """
    Linha persistida de um Product.

    O id é emitido por ProductSequence (nunca reutilizado após delete),
    por isso não é auto-incremento. Campos derivados são cache gravado
    pelos serviços; não edite-os diretamente.
    """

    id = models.BigIntegerField(_("id"), primary_key=True)
    name = models.CharField(_("nome"), max_length=255)
    category = models.CharField(_("categoria"), max_length=128, db_index=True)

    base_price = models.DecimalField(_("preço base"), max_digits=12, decimal_places=2)
    variation_price = models.DecimalField(
        _("preço de variação"), max_digits=12, decimal_places=2, null=True, blank=True
    )
    purchase_price = models.DecimalField(_("custo"), max_digits=12, decimal_places=2, default=0)

    discount_value = models.DecimalField(_("desconto"), max_digits=12, decimal_places=2, default=0)
    discount_type = models.CharField(
        _("tipo de desconto"),
        max_length=16,
        choices=DiscountType.choices,
        default=DiscountType.PERCENTAGE,
    )

    seasonal_discount = models.DecimalField(
        _("desconto sazonal"), max_digits=12, decimal_places=2, default=0
    )
    seasonal_discount_type = models.CharField(
        _("tipo de desconto sazonal"),
        max_length=16,
        choices=DiscountType.choices,
        default=DiscountType.PERCENTAGE,
    )
    seasonal_discount_active = models.BooleanField(_("desconto sazonal ativo"), default=True)
    seasonal_start = models.DateField(_("início do desconto sazonal"), null=True, blank=True)
    seasonal_end = models.DateField(_("fim do desconto sazonal"), null=True, blank=True)

    effective_price = models.DecimalField(_("preço efetivo"), max_digits=12, decimal_places=2, default=0)
    profit_margin = models.DecimalField(_("margem (%)"), max_digits=14, decimal_places=2, default=0)
    min_selling_price = models.DecimalField(
        _("preço mínimo de venda"), max_digits=12, decimal_places=2, default=0
    )

    stock = models.PositiveIntegerField(_("estoque"), default=0)
    min_stock = models.PositiveIntegerField(_("estoque mínimo"), default=5)
    barcode = models.CharField(_("código de barras"), max_length=64, unique=True)
    is_visible = models.BooleanField(_("visível"), default=True)

    created_at = models.DateTimeField(_("criado em"), default=timezone.now)
    updated_at = models.DateTimeField(_("atualizado em"), default=timezone.now)

    class Meta:
        app_label = "priceman"
        verbose_name = _("produto")
        verbose_name_plural = _("produtos")
        ordering = ("id",)

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"
