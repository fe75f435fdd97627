"""
Priceman Models — Persistência opcional via Django ORM.

    from priceman.models import ProductRecord, ProductSequence
"""

from .product import ProductRecord  # noqa: F401
from .sequence import ProductSequence  # noqa: F401
