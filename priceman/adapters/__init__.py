"""
Priceman Adapters — Implementações concretas de ProductRepository.

Available adapters:
- InMemoryProductRepository: coleção em memória, seedável a partir de JSON
- DjangoProductRepository: persistência via ProductRecord (Django ORM)
"""
