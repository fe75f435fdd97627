"""
BulkPriceUpdater — Aplica uma estratégia de preço a um subconjunto do catálogo.

Cada item é independente: falha em um item não desfaz os demais.
Estados por item: Selected → CandidateComputed → {Skipped | Rejected | Committed}.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Mapping

from django.utils import timezone

from priceman.conf import get_priceman_setting
from priceman.exceptions import ValidationError
from priceman.monetary import CENT, HUNDRED, ZERO, round2
from priceman.protocols import ProductRepository
from priceman.services.resolve import PriceResolver
from priceman.services.validate import PriceValidator
from priceman.types import (
    BulkUpdateReport,
    BulkUpdateRequest,
    Conflict,
    ConflictResolution,
    Product,
    Strategy,
    UpdateResult,
    UpdateType,
)


logger = logging.getLogger(__name__)


SKIPPED = "skipped"
REJECTED = "rejected"
COMMITTED = "committed"


@dataclass
class _Outcome:
    state: str
    result: UpdateResult | None = None
    conflict: Conflict | None = None


def _rejected(product: Product, code: str, reason: str, details: list[str] | None = None) -> _Outcome:
    return _Outcome(
        state=REJECTED,
        conflict=Conflict(
            product_id=product.id,
            product_name=product.name,
            reason=reason,
            code=code,
            details=details or [reason],
        ),
    )


class BulkPriceUpdater:
    """
    Serviço de atualização de preços em lote.

    Pipeline por item:
    1. Calcula o candidato pela estratégia
    2. Aplica price guards (pode rejeitar)
    3. Arredonda para centavos
    4. Pula se a mudança for < 0.01
    5. Valida o estado hipotético (todas as regras)
    6. Commit: recalcula campos derivados, carimba updated_at, upsert
    7. Falha: registra conflito e segue para o próximo item

    A coleção inteira fica sob ``repository.exclusive()`` durante a operação.
    """

    def __init__(
        self,
        repository: ProductRepository,
        validator: PriceValidator | None = None,
        *,
        report_limit: int | None = None,
    ) -> None:
        self.repository = repository
        self.validator = validator or PriceValidator()
        if report_limit is None:
            report_limit = get_priceman_setting("REPORT_RESULTS_LIMIT")
        self.report_limit = int(report_limit)

    # -------------------------------------------------------------------------
    # Seleção e estratégia
    # -------------------------------------------------------------------------

    @staticmethod
    def matches(product: Product, request: BulkUpdateRequest) -> bool:
        """Filtros compostos com AND: categoria, estoque baixo, ids selecionados."""
        if request.category != "all" and product.category != request.category:
            return False
        if request.low_stock_only and product.stock > request.stock_threshold:
            return False
        if request.apply_to == "selected_rows" and product.id not in request.selected_ids:
            return False
        return True

    @staticmethod
    def compute_candidate(original: Decimal, request: BulkUpdateRequest) -> Decimal:
        if request.strategy == Strategy.PERCENTAGE:
            return original * (1 + request.value / HUNDRED)
        if request.strategy == Strategy.FIXED:
            return original + request.value
        if request.strategy == Strategy.RANGE:
            return min(max(original, request.min_price), request.max_price)
        raise ValidationError(
            code="unknown_strategy",
            message=f"Unknown update strategy: {request.strategy}",
        )

    # -------------------------------------------------------------------------
    # Execução
    # -------------------------------------------------------------------------

    def run(
        self,
        request: BulkUpdateRequest | Mapping[str, Any],
        *,
        should_cancel: Callable[[], bool] | None = None,
    ) -> BulkUpdateReport:
        """
        Executa a atualização em lote.

        Args:
            request: BulkUpdateRequest ou dict equivalente
            should_cancel: Consultado entre itens; itens restantes contam como pulados

        Returns:
            BulkUpdateReport com contagens, conflitos e os primeiros resultados

        Raises:
            ValidationError: Pedido mal formado (nenhum item é tocado)
        """
        if not isinstance(request, BulkUpdateRequest):
            request = BulkUpdateRequest.from_data(
                request, default_threshold=get_priceman_setting("LOW_STOCK_THRESHOLD")
            )
        self.validator.validate_bulk_request(request)

        today = timezone.localdate()
        updated_count = 0
        skipped_count = 0
        cancelled = False
        conflicts: list[Conflict] = []
        results: list[UpdateResult] = []

        with self.repository.exclusive():
            targets = self.repository.list(lambda p: self.matches(p, request))
            logger.info(
                "bulk_update: %s over %d product(s) (strategy=%s, target=%s)",
                request.update_type, len(targets), request.strategy, request.target_field,
            )

            for index, product in enumerate(targets):
                if should_cancel is not None and should_cancel():
                    cancelled = True
                    skipped_count += len(targets) - index
                    logger.warning("bulk_update: cancelled with %d item(s) left", len(targets) - index)
                    break

                if request.update_type == UpdateType.SEASONAL_DISCOUNT:
                    outcome = self._process_seasonal(product, request, today)
                else:
                    outcome = self._process_price(product, request, today)

                if outcome.state == COMMITTED:
                    updated_count += 1
                    results.append(outcome.result)
                elif outcome.state == REJECTED:
                    conflicts.append(outcome.conflict)
                    logger.warning(
                        "bulk_update: product %s rejected (%s): %s",
                        product.id, outcome.conflict.code, outcome.conflict.reason,
                    )
                else:
                    skipped_count += 1

        summary = (
            f"{updated_count} of {len(targets)} product(s) updated, "
            f"{len(conflicts)} conflict(s), {skipped_count} skipped"
        )
        if cancelled:
            summary += " (cancelled)"
        logger.info("bulk_update: %s", summary)

        return BulkUpdateReport(
            updated_count=updated_count,
            total_filtered=len(targets),
            skipped_count=skipped_count,
            conflicts=conflicts,
            update_results=results[: self.report_limit],
            summary=summary,
            price_guards_applied=request.price_guards.enabled,
            cancelled=cancelled,
        )

    def _commit(self, product: Product, today: date) -> Product:
        stamped = replace(product, updated_at=timezone.now())
        return self.repository.upsert(PriceResolver.with_derived_fields(stamped, today))

    def _process_price(self, product: Product, request: BulkUpdateRequest, today: date) -> _Outcome:
        target = request.target_field
        original = getattr(product, target)
        candidate = self.compute_candidate(original, request)

        # Margem garantida só faz sentido quando o preço de venda muda
        guard_cost = product.purchase_price if target == "base_price" else ZERO
        try:
            candidate = self.validator.apply_price_guards(candidate, guard_cost, request.price_guards)
        except ValidationError as e:
            return _rejected(product, e.code, e.message)

        candidate = round2(candidate)
        if abs(candidate - original) < CENT:
            logger.debug("bulk_update: product %s unchanged at %s", product.id, original)
            return _Outcome(state=SKIPPED)

        hypothetical = replace(product, **{target: candidate})
        violations = self.validator.collect_violations(hypothetical, today)
        if violations:
            code, reason = violations[0]
            return _rejected(product, code, reason, [message for _, message in violations])

        self._commit(hypothetical, today)
        return _Outcome(
            state=COMMITTED,
            result=UpdateResult(
                product_id=product.id,
                product_name=product.name,
                old_price=original,
                new_price=candidate,
                change=candidate - original,
                target_field=target,
            ),
        )

    def _process_seasonal(self, product: Product, request: BulkUpdateRequest, today: date) -> _Outcome:
        new_value = request.discount_value
        new_type = request.discount_type

        # Desconto agendado para o futuro também conta como existente
        if PriceResolver.seasonal_discount_scheduled(product, today):
            if request.conflict_resolution == ConflictResolution.SKIP:
                return _rejected(
                    product, "seasonal_conflict", "Product already has an active seasonal discount"
                )
            if request.conflict_resolution == ConflictResolution.MERGE:
                # Compara em valor monetário para suportar tipos diferentes
                reference = PriceResolver.apply_discount(
                    PriceResolver.list_price(product), product.discount_value, product.discount_type
                )
                existing_amount = PriceResolver.discount_amount(
                    reference, product.seasonal_discount, product.seasonal_discount_type
                )
                new_amount = PriceResolver.discount_amount(reference, new_value, new_type)
                if existing_amount >= new_amount:
                    return _rejected(
                        product,
                        "seasonal_conflict",
                        f"Existing seasonal discount ({product.seasonal_discount} "
                        f"{product.seasonal_discount_type}) is not smaller than the new one",
                    )

        hypothetical = replace(
            product,
            seasonal_discount=new_value,
            seasonal_discount_type=new_type,
            seasonal_discount_active=True,
            seasonal_start=request.start_date,
            seasonal_end=request.end_date,
        )
        unchanged = (
            product.seasonal_discount == new_value
            and product.seasonal_discount_type == new_type
            and product.seasonal_discount_active
            and product.seasonal_start == request.start_date
            and product.seasonal_end == request.end_date
        )
        if unchanged:
            return _Outcome(state=SKIPPED)

        violations = self.validator.collect_violations(hypothetical, today)
        if violations:
            code, reason = violations[0]
            return _rejected(product, code, reason, [message for _, message in violations])

        old_price = PriceResolver.resolve_price(product, today)
        stored = self._commit(hypothetical, today)
        return _Outcome(
            state=COMMITTED,
            result=UpdateResult(
                product_id=product.id,
                product_name=product.name,
                old_price=old_price,
                new_price=stored.effective_price,
                change=stored.effective_price - old_price,
                target_field="seasonal_discount",
            ),
        )
