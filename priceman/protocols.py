"""
Priceman Core Protocols — Interfaces para backends de armazenamento.

O núcleo de preços nunca acessa uma coleção global: o repositório é injetado
nos serviços. Implementações concretas vivem em adapters/:
- adapters/memory.py - coleção em memória (testes, simulação)
- adapters/orm.py - Django ORM (ProductRecord)
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Callable, Protocol, runtime_checkable

from priceman.types import Product


@runtime_checkable
class ProductRepository(Protocol):
    """
    Protocol para repositórios de produtos.

    Implementações devem:
    - Retornar cópias (mutar o retorno não altera o armazenamento)
    - Nunca reutilizar ids (next_id é monotônico, mesmo após delete)
    - Oferecer uma seção exclusiva sobre a coleção inteira (exclusive)
    """

    def get(self, product_id: int) -> Product | None:
        """Retorna o produto ou None se não existir."""
        ...

    def list(self, predicate: Callable[[Product], bool] | None = None) -> list[Product]:
        """
        Lista produtos em ordem de id.

        Args:
            predicate: Filtro opcional aplicado a cada produto
        """
        ...

    def upsert(self, product: Product) -> Product:
        """Insere ou substitui o produto pelo id. Retorna a versão armazenada."""
        ...

    def delete(self, product_id: int) -> bool:
        """Remove o produto. Retorna False se não existir."""
        ...

    def next_id(self) -> int:
        """Reserva o próximo id: max(ids já emitidos) + 1."""
        ...

    def exclusive(self) -> AbstractContextManager:
        """
        Seção exclusiva sobre a coleção inteira.

        Mantida durante uma operação em lote para que duas operações não
        intercalem escritas nos mesmos itens.
        """
        ...


