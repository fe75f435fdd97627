"""
Django Priceman — Pricing, discount and bulk price-update engine for Django.

Uso básico:
    from priceman.adapters.memory import InMemoryProductRepository
    from priceman.services import ProductService, PriceResolver

    service = ProductService(InMemoryProductRepository())
    product = service.create_product({"name": "Coffee", "category": "drinks", "base_price": "12.50"})

Para persistência via ORM:
    from priceman.adapters.orm import DjangoProductRepository
"""

__title__ = "Django Priceman"
__version__ = "0.1.0"
__author__ = "Pablo Valentini"
