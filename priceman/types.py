"""
Priceman Types — Registros tipados do domínio de preços.

Product é o registro central; os demais tipos são transientes (requests,
resultados e relatórios de operações em lote).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping

from django.db import models
from django.utils.dateparse import parse_date
from django.utils.translation import gettext_lazy as _

from priceman.exceptions import ValidationError
from priceman.monetary import ZERO, round2, to_decimal


class DiscountType(models.TextChoices):
    PERCENTAGE = "Percentage", _("percentual")
    FIXED_AMOUNT = "FixedAmount", _("valor fixo")


_DISCOUNT_TYPE_ALIASES = {
    "percentage": DiscountType.PERCENTAGE,
    "percent": DiscountType.PERCENTAGE,
    "%": DiscountType.PERCENTAGE,
    "fixedamount": DiscountType.FIXED_AMOUNT,
    "fixed_amount": DiscountType.FIXED_AMOUNT,
    "fixed": DiscountType.FIXED_AMOUNT,
    "amount": DiscountType.FIXED_AMOUNT,
}


def normalize_discount_type(value: Any) -> DiscountType:
    if isinstance(value, DiscountType):
        return value
    key = str(value or "").strip().lower()
    try:
        return _DISCOUNT_TYPE_ALIASES[key]
    except KeyError:
        raise ValidationError(
            code="invalid_discount_type",
            message=f"Unknown discount type: {value!r}",
            context={"value": str(value)},
        ) from None


def _coerce_date(value: Any, name: str) -> date | None:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_date(str(value)[:10]) if isinstance(value, str) else None
    if parsed is None:
        raise ValidationError(
            code="invalid_date",
            message=f"{name} must be an ISO date (YYYY-MM-DD), got {value!r}",
            context={"field": name},
        )
    return parsed


def _coerce_int(value: Any, name: str, default: int = 0) -> int:
    number = to_decimal(value, field=name, default=Decimal(default))
    if number != number.to_integral_value():
        raise ValidationError(
            code="invalid_field",
            message=f"{name} must be a whole number",
            context={"field": name},
        )
    return int(number)


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false", "no", "off")
    return bool(value)


# =============================================================================
# Product
# =============================================================================


# Aliases aceitos na entrada (fixtures legadas usam camelCase e "price")
FIELD_ALIASES = {
    "price": "base_price",
    "basePrice": "base_price",
    "variationPrice": "variation_price",
    "purchasePrice": "purchase_price",
    "costPrice": "purchase_price",
    "discountValue": "discount_value",
    "discountType": "discount_type",
    "seasonalDiscount": "seasonal_discount",
    "seasonalDiscountType": "seasonal_discount_type",
    "seasonalDiscountActive": "seasonal_discount_active",
    "discountStartDate": "seasonal_start",
    "discountEndDate": "seasonal_end",
    "minStock": "min_stock",
    "isVisible": "is_visible",
    "isActive": "is_visible",
}

PRICING_FIELDS = (
    "base_price",
    "variation_price",
    "purchase_price",
    "discount_value",
    "discount_type",
    "seasonal_discount",
    "seasonal_discount_type",
    "seasonal_discount_active",
    "seasonal_start",
    "seasonal_end",
)

DERIVED_FIELDS = ("effective_price", "profit_margin", "min_selling_price")

READ_ONLY_FIELDS = ("id", "created_at", "updated_at") + DERIVED_FIELDS

_DECIMAL_FIELDS = {"base_price", "purchase_price", "discount_value", "seasonal_discount"}
_DISCOUNT_TYPE_FIELDS = {"discount_type", "seasonal_discount_type"}
_DATE_FIELDS = {"seasonal_start", "seasonal_end"}
_INT_FIELDS = {"stock", "min_stock"}
_BOOL_FIELDS = {"is_visible", "seasonal_discount_active"}
_TEXT_FIELDS = {"name", "category", "barcode"}


@dataclass
class Product:
    """
    Produto do catálogo.

    Campos derivados (effective_price, profit_margin, min_selling_price) são
    cache: recalculados a cada mutação a partir dos campos de preço.
    """

    id: int | None
    name: str
    category: str
    base_price: Decimal
    variation_price: Decimal | None = None
    purchase_price: Decimal = ZERO
    discount_value: Decimal = ZERO
    discount_type: str = DiscountType.PERCENTAGE
    seasonal_discount: Decimal = ZERO
    seasonal_discount_type: str = DiscountType.PERCENTAGE
    seasonal_discount_active: bool = True
    seasonal_start: date | None = None
    seasonal_end: date | None = None
    stock: int = 0
    min_stock: int = 5
    barcode: str = ""
    is_visible: bool = True
    effective_price: Decimal = ZERO
    profit_margin: Decimal = ZERO
    min_selling_price: Decimal = ZERO
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    @classmethod
    def coerce(cls, data: Mapping[str, Any], *, allow_read_only: bool = False) -> dict[str, Any]:
        """
        Normaliza um dict de entrada para os tipos do registro.

        Args:
            data: Campos de entrada (snake_case ou aliases camelCase)
            allow_read_only: Aceita id/timestamps/derivados (usado por adapters)

        Returns:
            dict com nomes canônicos e valores tipados

        Raises:
            ValidationError: Campo desconhecido, somente-leitura ou mal formado
        """
        known = cls.field_names()
        result: dict[str, Any] = {}
        for raw_key, value in data.items():
            key = FIELD_ALIASES.get(raw_key, raw_key)
            if key not in known:
                raise ValidationError(
                    code="unknown_field",
                    message=f"Unknown product field: {raw_key}",
                    context={"field": raw_key},
                )
            if key in READ_ONLY_FIELDS and not allow_read_only:
                raise ValidationError(
                    code="read_only_field",
                    message=f"Field '{key}' cannot be set directly",
                    context={"field": key},
                )
            result[key] = cls._coerce_value(key, value)
        return result

    @staticmethod
    def _coerce_value(key: str, value: Any) -> Any:
        # Valores monetários chegam em centavos, como são gravados
        if key in _DECIMAL_FIELDS or key in DERIVED_FIELDS:
            return round2(to_decimal(value, field=key))
        if key == "variation_price":
            number = to_decimal(value, field=key, default=None)
            return None if number is None else round2(number)
        if key in _DISCOUNT_TYPE_FIELDS:
            return normalize_discount_type(value) if value not in (None, "") else DiscountType.PERCENTAGE
        if key in _DATE_FIELDS:
            return _coerce_date(value, key)
        if key in _INT_FIELDS:
            return _coerce_int(value, key)
        if key in _BOOL_FIELDS:
            return _coerce_bool(value)
        if key in _TEXT_FIELDS:
            return "" if value is None else str(value).strip()
        return value

    @classmethod
    def from_data(cls, data: Mapping[str, Any], *, allow_read_only: bool = False) -> "Product":
        values = cls.coerce(data, allow_read_only=allow_read_only)
        values.setdefault("id", None)
        for required in ("name", "category", "base_price"):
            values.setdefault(required, "" if required != "base_price" else ZERO)
        return cls(**values)

    def merged(self, data: Mapping[str, Any]) -> "Product":
        """Retorna uma cópia com os campos parciais aplicados."""
        return replace(self, **self.coerce(data))

    def copy(self) -> "Product":
        return replace(self)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Bulk update (transientes)
# =============================================================================


class Strategy(models.TextChoices):
    PERCENTAGE = "percentage", _("percentual")
    FIXED = "fixed", _("valor fixo")
    RANGE = "range", _("faixa")


class ConflictResolution(models.TextChoices):
    SKIP = "skip", _("pular")
    OVERRIDE = "override", _("sobrescrever")
    MERGE = "merge", _("mesclar")


class UpdateType(models.TextChoices):
    PRICE = "price", _("preço")
    SEASONAL_DISCOUNT = "seasonal_discount", _("desconto sazonal")


TARGET_FIELDS = ("base_price", "purchase_price")


@dataclass
class PriceGuards:
    """Piso/teto configurado pelo administrador para qualquer alteração em lote."""

    enabled: bool = False
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    enforce_margin: bool = False
    min_margin: Decimal = Decimal("5")

    @classmethod
    def from_data(cls, data: Mapping[str, Any] | None) -> "PriceGuards":
        data = data or {}
        return cls(
            enabled=_coerce_bool(data.get("enabled", False)),
            min_price=to_decimal(data.get("min_price", data.get("minPrice")), field="min_price", default=None),
            max_price=to_decimal(data.get("max_price", data.get("maxPrice")), field="max_price", default=None),
            enforce_margin=_coerce_bool(data.get("enforce_margin", data.get("enforceMargin", False))),
            min_margin=to_decimal(
                data.get("min_margin", data.get("minMargin")), field="min_margin", default=Decimal("5")
            ),
        )


_REQUEST_ALIASES = {
    "applyTo": "apply_to",
    "selectedRows": "selected_ids",
    "selected_rows": "selected_ids",
    "applyToLowStock": "low_stock_only",
    "stockThreshold": "stock_threshold",
    "minPrice": "min_price",
    "maxPrice": "max_price",
    "priceGuards": "price_guards",
    "conflictResolution": "conflict_resolution",
    "updateType": "update_type",
    "targetField": "target_field",
    "discountValue": "discount_value",
    "discountType": "discount_type",
    "startDate": "start_date",
    "endDate": "end_date",
}


@dataclass
class BulkUpdateRequest:
    """
    Pedido de atualização em lote.

    Não é validado na construção: ``PriceValidator.validate_bulk_request``
    rejeita pedidos mal formados antes de qualquer item ser tocado.
    """

    strategy: str | None = None
    value: Decimal | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    target_field: str = "base_price"
    apply_to: str = "all"
    selected_ids: frozenset[int] = frozenset()
    category: str = "all"
    low_stock_only: bool = False
    stock_threshold: int = 10
    price_guards: PriceGuards = field(default_factory=PriceGuards)
    update_type: str = UpdateType.PRICE
    discount_value: Decimal | None = None
    discount_type: str = DiscountType.PERCENTAGE
    start_date: date | None = None
    end_date: date | None = None
    conflict_resolution: str = ConflictResolution.SKIP

    @classmethod
    def from_data(cls, data: Mapping[str, Any], *, default_threshold: int = 10) -> "BulkUpdateRequest":
        values = {_REQUEST_ALIASES.get(k, k): v for k, v in data.items()}
        selected = values.get("selected_ids") or ()
        return cls(
            strategy=(str(values["strategy"]).strip().lower() if values.get("strategy") else None),
            value=to_decimal(values.get("value"), field="value", default=None),
            min_price=to_decimal(values.get("min_price"), field="min_price", default=None),
            max_price=to_decimal(values.get("max_price"), field="max_price", default=None),
            target_field=values.get("target_field") or "base_price",
            apply_to=values.get("apply_to") or "all",
            selected_ids=frozenset(_coerce_int(pk, "selected_ids") for pk in selected),
            category=values.get("category") or "all",
            low_stock_only=_coerce_bool(values.get("low_stock_only", False)),
            stock_threshold=_coerce_int(values.get("stock_threshold"), "stock_threshold", default_threshold),
            price_guards=PriceGuards.from_data(values.get("price_guards")),
            update_type=values.get("update_type") or UpdateType.PRICE,
            discount_value=to_decimal(values.get("discount_value"), field="discount_value", default=None),
            discount_type=normalize_discount_type(values.get("discount_type") or DiscountType.PERCENTAGE),
            start_date=_coerce_date(values.get("start_date"), "start_date"),
            end_date=_coerce_date(values.get("end_date"), "end_date"),
            conflict_resolution=values.get("conflict_resolution") or ConflictResolution.SKIP,
        )


@dataclass
class UpdateResult:
    product_id: int
    product_name: str
    old_price: Decimal
    new_price: Decimal
    change: Decimal
    target_field: str = "base_price"


@dataclass
class Conflict:
    product_id: int
    product_name: str
    reason: str
    code: str = "conflict"
    details: list[str] = field(default_factory=list)


@dataclass
class BulkUpdateReport:
    updated_count: int
    total_filtered: int
    skipped_count: int
    conflicts: list[Conflict]
    update_results: list[UpdateResult]
    summary: str
    price_guards_applied: bool = False
    cancelled: bool = False

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ValidationResult:
    is_valid: bool
    error: str | None = None
    code: str | None = None

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"is_valid": self.is_valid}
        if not self.is_valid:
            data["error"] = self.error
            data["code"] = self.code
        return data


@dataclass
class HierarchyReport:
    is_valid: bool
    conflicts: list[dict] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DerivedFields:
    effective_price: Decimal
    profit_margin: Decimal
    min_selling_price: Decimal
