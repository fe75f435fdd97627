"""
PriceValidator — Regras de guarda aplicadas antes de qualquer mutação de preço.

Ordem das regras (a primeira falha vence na validação de item único):
1. preço de tabela > 0 (e preço com todos os descontos > 0)
2. custo >= 0
3. preço de tabela > custo (quando há custo)
4. teto de desconto (percentual <= 90, fixo < preço base)
5. preço com desconto > custo
6. margem com desconto >= mínimo configurado (sem arredondar)
   Descontos sazonais agendados entram em 1, 5 e 6 antes de o período começar.
7. price guards (somente lote): clamp ou rejeição por margem
8. hierarquia: preço duplicado na categoria é conflito; sobreposições são avisos
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Iterator, Mapping

from django.utils import timezone

from priceman.conf import get_priceman_setting
from priceman.exceptions import ValidationError
from priceman.monetary import HUNDRED, ZERO, round2, to_decimal
from priceman.services.resolve import PriceResolver
from priceman.types import (
    TARGET_FIELDS,
    BulkUpdateRequest,
    ConflictResolution,
    DiscountType,
    HierarchyReport,
    PriceGuards,
    Product,
    Strategy,
    UpdateType,
    ValidationResult,
)


logger = logging.getLogger(__name__)

_CANDIDATE_ID_KEYS = ("product_id", "productId")


def _ranges_overlap(
    a_start: date | None, a_end: date | None, b_start: date | None, b_end: date | None
) -> bool:
    lo_a, hi_a = a_start or date.min, a_end or date.max
    lo_b, hi_b = b_start or date.min, b_end or date.max
    return lo_a <= hi_b and lo_b <= hi_a


class PriceValidator:
    """
    Valida estados de preço propostos.

    Args:
        min_margin: Margem mínima em % (default: PRICEMAN["MIN_MARGIN_PERCENT"])
        max_percentage_discount: Teto de desconto percentual
            (default: PRICEMAN["MAX_PERCENTAGE_DISCOUNT"])
    """

    def __init__(
        self,
        *,
        min_margin: Decimal | int | str | None = None,
        max_percentage_discount: Decimal | int | str | None = None,
    ) -> None:
        if min_margin is None:
            min_margin = get_priceman_setting("MIN_MARGIN_PERCENT")
        if max_percentage_discount is None:
            max_percentage_discount = get_priceman_setting("MAX_PERCENTAGE_DISCOUNT")
        self.min_margin = to_decimal(min_margin, field="min_margin")
        self.max_percentage_discount = to_decimal(max_percentage_discount, field="max_percentage_discount")

    # -------------------------------------------------------------------------
    # Regras
    # -------------------------------------------------------------------------

    @staticmethod
    def as_product(candidate: Product | Mapping[str, Any]) -> Product:
        if isinstance(candidate, Product):
            return candidate
        data = {k: v for k, v in candidate.items() if k not in _CANDIDATE_ID_KEYS}
        return Product.from_data(data, allow_read_only=True)

    def iter_violations(self, product: Product, today: date | None = None) -> Iterator[tuple[str, str]]:
        """Gera (code, message) para cada regra violada, na ordem das regras."""
        list_price = PriceResolver.list_price(product)
        cost = product.purchase_price

        # 1
        if product.base_price <= ZERO or list_price <= ZERO or (
            product.variation_price is not None and product.variation_price < ZERO
        ):
            yield "invalid_price", "Price must be greater than 0"

        # 2
        if cost < ZERO:
            yield "negative_cost", "Cost cannot be negative"

        # 3
        if cost > ZERO and list_price <= cost:
            yield "below_cost", "Selling price must exceed cost"

        # 4
        discounts = (
            ("Discount", product.discount_value, product.discount_type),
            ("Seasonal discount", product.seasonal_discount, product.seasonal_discount_type),
        )
        for label, value, discount_type in discounts:
            if value < ZERO:
                yield "invalid_discount", f"{label} cannot be negative"
            elif value == ZERO:
                continue
            elif discount_type == DiscountType.PERCENTAGE and value > self.max_percentage_discount:
                yield "excessive_discount", (
                    f"{label} cannot exceed {self.max_percentage_discount}%"
                )
            elif discount_type == DiscountType.FIXED_AMOUNT and value >= product.base_price:
                yield "excessive_discount", f"{label} must be less than the base price"

        # Pior caso: desconto sazonal agendado já aplicado
        lowest = PriceResolver.lowest_price(product, today)

        # 1 (após descontos)
        if list_price > ZERO and lowest <= ZERO:
            yield "invalid_price", "Discounted price must be greater than 0"

        if cost <= ZERO:
            return

        # 5
        if lowest < list_price and lowest <= cost:
            yield "discount_below_cost", "Discounted price at or below cost"

        # 6
        if lowest > cost and PriceResolver.margin_percent(lowest, cost, exact=True) < self.min_margin:
            yield "margin_below_minimum", (
                f"Margin below minimum sustainable threshold of {self.min_margin}%"
            )

    def validate_price_update(
        self, candidate: Product | Mapping[str, Any], today: date | None = None
    ) -> ValidationResult:
        """
        Validação fail-fast de um estado de preço proposto.

        Entradas não numéricas viram resultado inválido, nunca exceção.
        """
        try:
            product = self.as_product(candidate)
            violation = next(self.iter_violations(product, today), None)
        except ValidationError as e:
            return ValidationResult(is_valid=False, error=e.message, code=e.code)
        if violation is None:
            return ValidationResult(is_valid=True)
        code, message = violation
        return ValidationResult(is_valid=False, error=message, code=code)

    def ensure_valid(self, product: Product, today: date | None = None) -> None:
        """
        Raises:
            ValidationError: Na primeira regra violada
        """
        violation = next(self.iter_violations(product, today), None)
        if violation is not None:
            code, message = violation
            raise ValidationError(
                code=code,
                message=message,
                context={"product_id": product.id, "name": product.name},
            )

    def collect_violations(self, product: Product, today: date | None = None) -> list[tuple[str, str]]:
        """Avalia todas as regras (modo lote)."""
        return list(self.iter_violations(product, today))

    # -------------------------------------------------------------------------
    # Price guards
    # -------------------------------------------------------------------------

    @staticmethod
    def apply_price_guards(candidate: Decimal, cost: Decimal, guards: PriceGuards) -> Decimal:
        """
        Aplica piso/teto administrativos a um preço candidato.

        Com enforce_margin, um candidato abaixo de cost × (1 + min_margin/100)
        é rejeitado em vez de ajustado.

        Raises:
            ValidationError: code="guard_margin"
        """
        if not guards.enabled:
            return candidate
        if guards.enforce_margin and cost > ZERO:
            floor = cost * (1 + guards.min_margin / HUNDRED)
            if candidate < floor:
                raise ValidationError(
                    code="guard_margin",
                    message=(
                        f"Price {round2(candidate)} is below the guarded floor {round2(floor)} "
                        f"({guards.min_margin}% over cost)"
                    ),
                    context={"candidate": str(candidate), "floor": str(round2(floor))},
                )
        if guards.min_price is not None:
            candidate = max(candidate, guards.min_price)
        if guards.max_price is not None:
            candidate = min(candidate, guards.max_price)
        return candidate

    # -------------------------------------------------------------------------
    # Hierarquia
    # -------------------------------------------------------------------------

    def validate_pricing_hierarchy(
        self,
        product_data: Product | Mapping[str, Any],
        all_products: Iterable[Product | Mapping[str, Any]],
        exclude_id: int | None = None,
        today: date | None = None,
    ) -> HierarchyReport:
        """
        Valida o produto contra todas as regras e compara com a categoria.

        Conflicts bloqueiam; warnings são apenas informativos.
        """
        today = today or timezone.localdate()
        try:
            product = self.as_product(product_data)
            conflicts = [
                {"type": code, "details": message}
                for code, message in self.collect_violations(product, today)
            ]
            others = [self.as_product(p) for p in all_products]
        except ValidationError as e:
            return HierarchyReport(is_valid=False, conflicts=[{"type": e.code, "details": e.message}])

        if exclude_id is None:
            exclude_id = product.id
        siblings = [
            p for p in others
            if p.category == product.category and (exclude_id is None or p.id != exclude_id)
        ]

        warnings: list[str] = []
        if PriceResolver.seasonal_discount_scheduled(product, today):
            for sibling in siblings:
                if PriceResolver.seasonal_discount_scheduled(sibling, today) and _ranges_overlap(
                    product.seasonal_start, product.seasonal_end,
                    sibling.seasonal_start, sibling.seasonal_end,
                ):
                    warnings.append(
                        f"Seasonal discount overlaps with active seasonal discount on {sibling.name}"
                    )

        if product.discount_value > ZERO and any(s.discount_value > ZERO for s in siblings):
            warnings.append("Multiple products in this category have active discounts")

        list_price = PriceResolver.list_price(product)
        for sibling in siblings:
            if abs(PriceResolver.list_price(sibling) - list_price) < Decimal("0.01"):
                conflicts.append({"type": "duplicate_price", "details": f"Same price as {sibling.name}"})

        if warnings:
            logger.debug("validate_pricing_hierarchy: %d warning(s) for %s", len(warnings), product.name)

        return HierarchyReport(is_valid=not conflicts, conflicts=conflicts, warnings=warnings)

    # -------------------------------------------------------------------------
    # Pedidos em lote
    # -------------------------------------------------------------------------

    def validate_bulk_request(self, request: BulkUpdateRequest) -> None:
        """
        Rejeita pedidos mal formados antes de qualquer item ser tocado.

        Raises:
            ValidationError: Pedido inválido
        """

        def fail(code: str, message: str) -> None:
            raise ValidationError(code=code, message=message, context={"request": "bulk_update"})

        if request.update_type not in UpdateType.values:
            fail("invalid_update_type", f"Unknown update type: {request.update_type}")

        if request.apply_to not in ("all", "selected_rows"):
            fail("invalid_apply_to", f"Unknown selection mode: {request.apply_to}")
        if request.apply_to == "selected_rows" and not request.selected_ids:
            fail("empty_selection", "No products selected")
        if request.stock_threshold < 0:
            fail("invalid_threshold", "Stock threshold cannot be negative")

        guards = request.price_guards
        if guards.enabled:
            if guards.min_price is not None and guards.max_price is not None and guards.min_price > guards.max_price:
                fail("invalid_guards", "Price guard minimum cannot exceed maximum")
            if guards.min_margin < ZERO:
                fail("invalid_guards", "Price guard margin cannot be negative")

        if request.update_type == UpdateType.SEASONAL_DISCOUNT:
            if request.discount_value is None or request.discount_value <= ZERO:
                fail("missing_value", "Discount value is required")
            if request.discount_type == DiscountType.PERCENTAGE and request.discount_value > self.max_percentage_discount:
                fail("excessive_discount", f"Seasonal discount cannot exceed {self.max_percentage_discount}%")
            if request.conflict_resolution not in ConflictResolution.values:
                fail("invalid_conflict_resolution", f"Unknown conflict resolution: {request.conflict_resolution}")
            if request.start_date and request.end_date and request.start_date > request.end_date:
                fail("invalid_range", "Discount start date must not be after end date")
            return

        if not request.strategy:
            fail("missing_strategy", "Update strategy is required")
        if request.strategy not in Strategy.values:
            fail("unknown_strategy", f"Unknown update strategy: {request.strategy}")
        if request.target_field not in TARGET_FIELDS:
            fail("invalid_target", f"Cannot bulk update field: {request.target_field}")
        if request.strategy == Strategy.RANGE:
            if request.min_price is None or request.max_price is None:
                fail("missing_range", "Min and max prices are required for range strategy")
            if request.min_price < ZERO or request.min_price > request.max_price:
                fail("invalid_range", "Range minimum must be between 0 and the maximum")
        elif request.value is None:
            fail("missing_value", "Update value is required")

    def bulk_validate_price_updates(self, updates: Iterable[Mapping[str, Any]]) -> list[dict]:
        results = []
        for update in updates:
            outcome = self.validate_price_update(update)
            results.append({
                "product_id": update.get("product_id", update.get("productId")),
                "is_valid": outcome.is_valid,
                "error": outcome.error,
            })
        return results
