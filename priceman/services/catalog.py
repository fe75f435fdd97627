"""
ProductService — Fachada do catálogo sobre um repositório injetado.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Mapping

from django.utils import timezone

from priceman.exceptions import NotFoundError, ValidationError
from priceman.ids import generate_barcode
from priceman.monetary import ZERO, to_decimal
from priceman.protocols import ProductRepository
from priceman.services.bulk import BulkPriceUpdater
from priceman.services.resolve import PriceResolver
from priceman.services.validate import PriceValidator
from priceman.types import (
    BulkUpdateReport,
    BulkUpdateRequest,
    HierarchyReport,
    Product,
    ValidationResult,
    normalize_discount_type,
)


logger = logging.getLogger(__name__)

CUSTOMER = "customer"


class ProductService:
    """
    Operações de catálogo: criação, edição, remoção, consulta e preços em lote.

    Uso:
        from priceman.adapters.memory import InMemoryProductRepository

        service = ProductService(InMemoryProductRepository())
        product = service.create_product({"name": "Coffee", "category": "drinks", "base_price": "12.50"})
    """

    def __init__(self, repository: ProductRepository, validator: PriceValidator | None = None) -> None:
        self.repository = repository
        self.validator = validator or PriceValidator()
        self.bulk_updater = BulkPriceUpdater(repository, self.validator)

    # -------------------------------------------------------------------------
    # Escrita
    # -------------------------------------------------------------------------

    def create_product(self, fields: Mapping[str, Any]) -> Product:
        """
        Cria um produto.

        Raises:
            ValidationError: Campo obrigatório ausente ou regra de preço violada
        """
        draft = Product.from_data(fields)

        if not draft.name:
            raise ValidationError(code="missing_name", message="Product name is required")
        if draft.base_price <= ZERO:
            raise ValidationError(code="invalid_price", message="Valid price is required")
        if not draft.category:
            raise ValidationError(code="missing_category", message="Category is required")

        self.validator.ensure_valid(draft)

        with self.repository.exclusive():
            if draft.barcode:
                self._ensure_unique_barcode(draft.barcode)
            else:
                draft = replace(draft, barcode=generate_barcode())
            now = timezone.now()
            product = replace(draft, id=self.repository.next_id(), created_at=now, updated_at=now)
            stored = self.repository.upsert(PriceResolver.with_derived_fields(product))

        logger.info("create_product: id=%s name=%s effective_price=%s", stored.id, stored.name, stored.effective_price)
        return stored

    def update_product(self, product_id: int, fields: Mapping[str, Any]) -> Product:
        """
        Aplica campos parciais a um produto existente.

        Raises:
            NotFoundError: Produto inexistente
            ValidationError: Campo somente-leitura ou regra de preço violada
        """
        with self.repository.exclusive():
            current = self._get_or_raise(product_id)
            candidate = current.merged(fields)

            if not candidate.name:
                raise ValidationError(code="missing_name", message="Product name is required")
            if not candidate.category:
                raise ValidationError(code="missing_category", message="Category is required")
            if candidate.barcode != current.barcode:
                if not candidate.barcode:
                    raise ValidationError(code="missing_barcode", message="Barcode cannot be blank")
                self._ensure_unique_barcode(candidate.barcode, exclude_id=product_id)

            self.validator.ensure_valid(candidate)

            candidate = replace(candidate, updated_at=timezone.now())
            stored = self.repository.upsert(PriceResolver.with_derived_fields(candidate))

        logger.info("update_product: id=%s fields=%s", product_id, sorted(fields))
        return stored

    def delete_product(self, product_id: int) -> None:
        with self.repository.exclusive():
            if not self.repository.delete(product_id):
                raise NotFoundError(
                    code="not_found",
                    message=f"Product not found: {product_id}",
                    context={"product_id": product_id},
                )
        logger.info("delete_product: id=%s", product_id)

    def add_seasonal_discount(
        self,
        product_id: int,
        value: Decimal | int | str,
        discount_type: str = "Percentage",
        start_date: date | str | None = None,
        end_date: date | str | None = None,
    ) -> Product:
        return self.update_product(product_id, {
            "seasonal_discount": value,
            "seasonal_discount_type": normalize_discount_type(discount_type),
            "seasonal_discount_active": True,
            "seasonal_start": start_date,
            "seasonal_end": end_date,
        })

    def bulk_update_prices(
        self,
        request: BulkUpdateRequest | Mapping[str, Any],
        *,
        should_cancel: Callable[[], bool] | None = None,
    ) -> BulkUpdateReport:
        return self.bulk_updater.run(request, should_cancel=should_cancel)

    # -------------------------------------------------------------------------
    # Leitura
    # -------------------------------------------------------------------------

    def _get_or_raise(self, product_id: int) -> Product:
        product = self.repository.get(product_id)
        if product is None:
            raise NotFoundError(
                code="not_found",
                message=f"Product not found: {product_id}",
                context={"product_id": product_id},
            )
        return product

    def _ensure_unique_barcode(self, barcode: str, exclude_id: int | None = None) -> None:
        clash = self.repository.list(lambda p: p.barcode == barcode and p.id != exclude_id)
        if clash:
            raise ValidationError(
                code="duplicate_barcode",
                message=f"Barcode already in use: {barcode}",
                context={"barcode": barcode, "product_id": clash[0].id},
            )

    def get_product(self, product_id: int, role: str = CUSTOMER) -> Product:
        """
        Raises:
            NotFoundError: code="not_found" ou "not_available" (oculto para clientes)
        """
        product = self._get_or_raise(product_id)
        if role == CUSTOMER and not product.is_visible:
            raise NotFoundError(
                code="not_available",
                message="Product not available",
                context={"product_id": product_id},
            )
        return product

    def list_products(self, role: str = CUSTOMER) -> list[Product]:
        if role == CUSTOMER:
            return self.repository.list(lambda p: p.is_visible)
        return self.repository.list()

    def get_by_barcode(self, barcode: str) -> Product:
        matches = self.repository.list(lambda p: p.barcode == barcode)
        if not matches:
            raise NotFoundError(
                code="not_found",
                message=f"Product not found for barcode: {barcode}",
                context={"barcode": barcode},
            )
        return matches[0]

    def search_and_filter(
        self,
        search: str = "",
        category: str | None = None,
        min_price: Decimal | int | str | None = None,
        max_price: Decimal | int | str | None = None,
    ) -> list[Product]:
        """Busca por nome/código de barras/categoria e filtra por categoria e faixa de preço base."""
        term = (search or "").strip().lower()
        low = to_decimal(min_price, field="min_price", default=None)
        high = to_decimal(max_price, field="max_price", default=None)

        def keep(product: Product) -> bool:
            if term and not (
                term in product.name.lower()
                or term in product.barcode.lower()
                or term in product.category.lower()
            ):
                return False
            if category and category != "all" and product.category != category:
                return False
            if low is not None and product.base_price < low:
                return False
            if high is not None and product.base_price > high:
                return False
            return True

        return self.repository.list(keep)

    def bulk_price_data(
        self,
        page: int | str = 1,
        limit: int | str = 100,
        *,
        role: str = CUSTOMER,
        search: str = "",
        category: str | None = None,
        min_price: Decimal | int | str | None = None,
        max_price: Decimal | int | str | None = None,
    ) -> dict:
        """
        Página da listagem filtrada usada pela tela de preços em lote.

        Returns:
            {"products": [...], "pagination": {"page", "limit", "total", "total_pages"}}

        Raises:
            ValidationError: code="invalid_pagination"
        """
        context = {"page": str(page), "limit": str(limit)}
        try:
            page, limit = int(page), int(limit)
        except (TypeError, ValueError):
            page = limit = 0
        if page < 1 or limit < 1:
            raise ValidationError(
                code="invalid_pagination",
                message="Page and limit must be positive integers",
                context=context,
            )

        products = self.search_and_filter(search, category, min_price, max_price)
        if role == CUSTOMER:
            products = [p for p in products if p.is_visible]

        total = len(products)
        start = (page - 1) * limit
        return {
            "products": products[start:start + limit],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": math.ceil(total / limit),
            },
        }

    def filter_options(self) -> dict:
        products = self.repository.list()
        categories = sorted({p.category for p in products if p.category})
        prices = [p.base_price for p in products]
        return {
            "categories": categories,
            "price_range": {
                "min": min(prices) if prices else ZERO,
                "max": max(prices) if prices else ZERO,
            },
        }

    # -------------------------------------------------------------------------
    # Preço
    # -------------------------------------------------------------------------

    def resolve_price(self, product_id: int) -> Decimal:
        return PriceResolver.resolve_price(self._get_or_raise(product_id))

    def validate_price_update(self, candidate: Product | Mapping[str, Any]) -> ValidationResult:
        return self.validator.validate_price_update(candidate)

    def validate_pricing_hierarchy(
        self,
        product_data: Product | Mapping[str, Any],
        all_products: list[Product] | None = None,
        exclude_id: int | None = None,
    ) -> HierarchyReport:
        if all_products is None:
            all_products = self.repository.list()
        return self.validator.validate_pricing_hierarchy(product_data, all_products, exclude_id)
