"""
Priceman Exceptions — Exceções específicas do Priceman.

Todas as exceções seguem o padrão:
- code: Código máquina do erro (ex.: "below_cost", "excessive_discount")
- message: Mensagem legível para humanos
- context: Dados adicionais sobre o erro
"""

from __future__ import annotations


class PricemanError(Exception):
    """
    Classe base para todas as exceções do Priceman.

    Attributes:
        code: Código máquina do erro
        message: Mensagem legível para humanos
        context: Dados adicionais sobre o erro
    """

    def __init__(self, code: str = "error", message: str = "", context: dict | None = None):
        self.code = code
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "context": self.context}


class ValidationError(PricemanError):
    """
    Input failed a pricing rule.

    Codes: "invalid_price", "negative_cost", "below_cost", "excessive_discount",
    "discount_below_cost", "margin_below_minimum", "guard_margin", "invalid_request", etc.
    """


class NotFoundError(PricemanError):
    """
    Operation targets a product that does not exist.

    Codes: "not_found", "not_available"
    """


class ConflictError(PricemanError):
    """
    A single item of a bulk batch was rejected.

    Never aborts the batch; collected into the report instead.
    """


class ComputationError(ValidationError):
    """
    Malformed numeric input (NaN, infinity, non-numeric strings).

    Code: "invalid_number"
    """
