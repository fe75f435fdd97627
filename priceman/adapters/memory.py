"""
Priceman Memory Adapter — ProductRepository em memória (dict).

Para testes, demos e simulações sem banco. A coleção inteira é protegida por
um lock reentrante; ``exclusive()`` o mantém durante uma operação em lote.

Uso:
    from priceman.adapters.memory import InMemoryProductRepository
    from priceman.services import ProductService

    repo = InMemoryProductRepository.from_json("products.json")
    service = ProductService(repo)
"""

from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Mapping

from django.utils import timezone

from priceman.services.resolve import PriceResolver
from priceman.types import FIELD_ALIASES, Product

logger = logging.getLogger(__name__)


class InMemoryProductRepository:
    """
    Repositório de produtos em memória.

    - ``get``/``list`` retornam cópias (mutá-las não altera o armazenamento)
    - ``next_id`` é ``max(ids já emitidos) + 1``; ids removidos nunca voltam
    - ``exclusive`` é um lock sobre a coleção inteira
    """

    def __init__(self, products: Iterable[Product | Mapping[str, Any]] = ()) -> None:
        self._lock = threading.RLock()
        self._products: dict[int, Product] = {}
        self._last_id = 0
        for product in products:
            self.seed(product)

    @classmethod
    def from_json(cls, path: str | Path) -> "InMemoryProductRepository":
        """Carrega um array JSON de produtos (chaves camelCase aceitas)."""
        with open(path, encoding="utf-8") as fh:
            rows = json.load(fh)
        return cls(rows)

    def seed(self, product: Product | Mapping[str, Any]) -> Product:
        """
        Carrega um produto mantendo seu id (atribui um se ausente).

        Chaves desconhecidas (imagens, descrições, ...) são descartadas.
        Campos derivados de preço são recalculados.
        """
        if not isinstance(product, Product):
            known = Product.field_names()
            data = {k: v for k, v in product.items() if FIELD_ALIASES.get(k, k) in known}
            dropped = set(product) - set(data)
            if dropped:
                logger.debug("InMemoryProductRepository.seed: dropping keys %s", sorted(dropped))
            product = Product.from_data(data, allow_read_only=True)

        with self._lock:
            if product.id is None:
                product = replace(product, id=self.next_id())
            now = timezone.now()
            product = replace(
                product,
                created_at=product.created_at or now,
                updated_at=product.updated_at or now,
            )
            return self.upsert(PriceResolver.with_derived_fields(product))

    def get(self, product_id: int) -> Product | None:
        with self._lock:
            product = self._products.get(product_id)
            return product.copy() if product else None

    def list(self, predicate: Callable[[Product], bool] | None = None) -> list[Product]:
        with self._lock:
            products = [self._products[pk].copy() for pk in sorted(self._products)]
        if predicate is None:
            return products
        return [p for p in products if predicate(p)]

    def upsert(self, product: Product) -> Product:
        if product.id is None:
            raise ValueError("Cannot store a product without id")
        with self._lock:
            self._products[product.id] = product.copy()
            self._last_id = max(self._last_id, product.id)
            return product.copy()

    def delete(self, product_id: int) -> bool:
        with self._lock:
            return self._products.pop(product_id, None) is not None

    def next_id(self) -> int:
        with self._lock:
            self._last_id += 1
            return self._last_id

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        with self._lock:
            yield

    def __len__(self) -> int:
        return len(self._products)
