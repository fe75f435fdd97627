"""
Priceman Monetary — Conversão e arredondamento de valores monetários.

Todos os preços circulam como ``Decimal``. Floats são convertidos via ``str``
para evitar ruído binário (``0.1 + 0.2``).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from priceman.exceptions import ComputationError


CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Any, *, field: str = "value", default: Decimal | None = ZERO) -> Decimal | None:
    """
    Converte um valor de entrada para Decimal.

    Args:
        value: int, float, str ou Decimal
        field: Nome do campo (usado na mensagem de erro)
        default: Retornado quando value é None ou string vazia

    Returns:
        Decimal finito

    Raises:
        ComputationError: Se o valor não for numérico, NaN ou infinito
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, bool):
        raise ComputationError(
            code="invalid_number",
            message=f"{field} must be a number, got a boolean",
            context={"field": field, "value": value},
        )
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ComputationError(
            code="invalid_number",
            message=f"{field} must be a number, got {value!r}",
            context={"field": field, "value": str(value)},
        ) from exc
    if not result.is_finite():
        raise ComputationError(
            code="invalid_number",
            message=f"{field} must be a finite number, got {value!r}",
            context={"field": field, "value": str(value)},
        )
    return result


def round2(value: Decimal) -> Decimal:
    """Arredonda para centavos (half-up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    return amount * percent / HUNDRED
