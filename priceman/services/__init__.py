"""
Priceman Services — Serviços do núcleo de preços.

Re-exports:
    from priceman.services import PriceResolver, PriceValidator, BulkPriceUpdater, ProductService
"""

from .bulk import BulkPriceUpdater  # noqa: F401
from .catalog import ProductService  # noqa: F401
from .resolve import PriceResolver  # noqa: F401
from .validate import PriceValidator  # noqa: F401
