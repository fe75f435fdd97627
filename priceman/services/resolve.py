"""
PriceResolver — Resolve o preço efetivo de um produto.

Hierarquia (cada estágio só sobrescreve o anterior se presente/ativo):
1. base_price
2. variation_price (se > 0)
3. desconto padrão (discount_value/discount_type)
4. desconto sazonal (se > 0, ativo e dentro do período)
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

from django.utils import timezone

from priceman.conf import get_priceman_setting
from priceman.monetary import HUNDRED, ZERO, percent_of, round2, to_decimal
from priceman.types import DerivedFields, DiscountType, Product


class PriceResolver:
    """
    Funções puras de preço e margem.

    Nenhum método muta o produto recebido.
    """

    @staticmethod
    def list_price(product: Product) -> Decimal:
        """Preço de tabela (antes de descontos): variação sobrescreve a base."""
        variation = product.variation_price
        if variation is not None and variation > ZERO:
            return variation
        return product.base_price

    @staticmethod
    def apply_discount(price: Decimal, value: Decimal, discount_type: str) -> Decimal:
        if value <= ZERO:
            return price
        if discount_type == DiscountType.PERCENTAGE:
            return price * (1 - value / HUNDRED)
        return max(ZERO, price - value)

    @staticmethod
    def seasonal_discount_applies(product: Product, today: date | None = None) -> bool:
        if product.seasonal_discount <= ZERO or not product.seasonal_discount_active:
            return False
        if product.seasonal_start is None and product.seasonal_end is None:
            return True
        today = today or timezone.localdate()
        if product.seasonal_start is not None and today < product.seasonal_start:
            return False
        if product.seasonal_end is not None and today > product.seasonal_end:
            return False
        return True

    @staticmethod
    def seasonal_discount_scheduled(product: Product, today: date | None = None) -> bool:
        """Desconto sazonal configurado e ainda não expirado (vigente ou agendado)."""
        if product.seasonal_discount <= ZERO or not product.seasonal_discount_active:
            return False
        if product.seasonal_end is None:
            return True
        return product.seasonal_end >= (today or timezone.localdate())

    @staticmethod
    def resolve_price(product: Product, today: date | None = None) -> Decimal:
        """
        Calcula o preço efetivo de venda.

        Args:
            product: Produto (não é alterado)
            today: Data de referência para o período sazonal (default: hoje)

        Returns:
            Preço >= 0 arredondado para centavos
        """
        price = PriceResolver.list_price(product)
        price = PriceResolver.apply_discount(price, product.discount_value, product.discount_type)
        if PriceResolver.seasonal_discount_applies(product, today):
            price = PriceResolver.apply_discount(
                price, product.seasonal_discount, product.seasonal_discount_type
            )
        return round2(max(ZERO, price))

    @staticmethod
    def lowest_price(product: Product, today: date | None = None) -> Decimal:
        """
        Menor preço que o produto pode atingir a partir de ``today``.

        Igual a resolve_price, exceto que um desconto sazonal agendado é
        aplicado mesmo antes de o período começar.
        """
        price = PriceResolver.list_price(product)
        price = PriceResolver.apply_discount(price, product.discount_value, product.discount_type)
        if PriceResolver.seasonal_discount_scheduled(product, today):
            price = PriceResolver.apply_discount(
                price, product.seasonal_discount, product.seasonal_discount_type
            )
        return round2(max(ZERO, price))

    @staticmethod
    def margin_percent(sell_price: Decimal, cost_price: Decimal, *, exact: bool = False) -> Decimal:
        """Margem sobre o custo em %. Com exact=True não arredonda (usado nas regras de piso)."""
        if cost_price <= ZERO:
            return ZERO if exact else round2(ZERO)
        margin = (sell_price - cost_price) / cost_price * HUNDRED
        return margin if exact else round2(margin)

    @staticmethod
    def min_selling_price(cost_price: Decimal) -> Decimal:
        if cost_price <= ZERO:
            return round2(ZERO)
        multiplier = to_decimal(get_priceman_setting("MIN_SELLING_MULTIPLIER"), field="MIN_SELLING_MULTIPLIER")
        return round2(cost_price * multiplier)

    @staticmethod
    def compute_derived_fields(product: Product, today: date | None = None) -> DerivedFields:
        effective = PriceResolver.resolve_price(product, today)
        return DerivedFields(
            effective_price=effective,
            profit_margin=PriceResolver.margin_percent(effective, product.purchase_price),
            min_selling_price=PriceResolver.min_selling_price(product.purchase_price),
        )

    @staticmethod
    def with_derived_fields(product: Product, today: date | None = None) -> Product:
        """Retorna uma cópia do produto com o cache de preço recalculado."""
        derived = PriceResolver.compute_derived_fields(product, today)
        return replace(
            product,
            effective_price=derived.effective_price,
            profit_margin=derived.profit_margin,
            min_selling_price=derived.min_selling_price,
        )

    @staticmethod
    def discount_amount(price: Decimal, value: Decimal, discount_type: str) -> Decimal:
        """Valor absoluto descontado de ``price``."""
        if discount_type == DiscountType.PERCENTAGE:
            return percent_of(price, value)
        return min(price, value)

    # -------------------------------------------------------------------------
    # Métricas de exibição
    # -------------------------------------------------------------------------

    @staticmethod
    def financial_health(product: Product) -> dict:
        """Classifica a margem: excellent > 30, good > 20, fair > 10, senão poor."""
        margin = PriceResolver.compute_derived_fields(product).profit_margin
        if margin > 30:
            health = "excellent"
        elif margin > 20:
            health = "good"
        elif margin > 10:
            health = "fair"
        else:
            health = "poor"
        return {
            "health": health,
            "margin": margin,
            "recommendation": (
                "Consider increasing price or reducing cost" if margin < 10 else "Healthy profit margin"
            ),
        }

    @staticmethod
    def display_metrics(product: Product) -> dict:
        derived = PriceResolver.compute_derived_fields(product)
        return {
            "effective_price": derived.effective_price,
            "profit_margin": derived.profit_margin,
            "min_selling_price": derived.min_selling_price,
            "stock_status": "low" if product.stock <= product.min_stock else "normal",
            "price_status": "valid" if product.base_price > ZERO else "invalid",
        }
