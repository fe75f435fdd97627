"""
Priceman ORM Adapter — ProductRepository persistido via Django ORM.

Usa ProductRecord para os produtos e ProductSequence para ids monotônicos.

Uso:
    from priceman.adapters.orm import DjangoProductRepository
    from priceman.services import ProductService

    service = ProductService(DjangoProductRepository())
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator

from django.db import transaction
from django.db.models import Max

from priceman.models import ProductRecord, ProductSequence
from priceman.types import Product

logger = logging.getLogger(__name__)

SEQUENCE_NAME = "product"

_RECORD_FIELDS = tuple(f for f in Product.field_names() if f != "id")


def record_to_product(record: ProductRecord) -> Product:
    data = {name: getattr(record, name) for name in _RECORD_FIELDS}
    return Product(id=record.id, **data)


class DjangoProductRepository:
    """
    Adapter para persistência de produtos no banco configurado do Django.

    ``exclusive()`` abre uma transação e trava todas as linhas de produto
    (SELECT FOR UPDATE) até o fim do bloco. Em bancos sem suporte a row
    locks (SQLite) a transação já serializa as escritas.
    """

    def get(self, product_id: int) -> Product | None:
        record = ProductRecord.objects.filter(pk=product_id).first()
        return record_to_product(record) if record else None

    def list(self, predicate: Callable[[Product], bool] | None = None) -> list[Product]:
        products = [record_to_product(r) for r in ProductRecord.objects.order_by("id")]
        if predicate is None:
            return products
        return [p for p in products if predicate(p)]

    def upsert(self, product: Product) -> Product:
        if product.id is None:
            raise ValueError("Cannot store a product without id")
        defaults = {name: getattr(product, name) for name in _RECORD_FIELDS}
        record, created = ProductRecord.objects.update_or_create(id=product.id, defaults=defaults)
        if created:
            logger.debug("DjangoProductRepository.upsert: created id=%s", product.id)
        record.refresh_from_db()
        return record_to_product(record)

    def delete(self, product_id: int) -> bool:
        deleted, _ = ProductRecord.objects.filter(pk=product_id).delete()
        return deleted > 0

    def next_id(self) -> int:
        """
        Thread-safe via SELECT FOR UPDATE na linha da sequência.

        Considera o maior id já gravado, para tabelas populadas antes da sequência existir.
        """
        with transaction.atomic():
            seq, _ = ProductSequence.objects.select_for_update().get_or_create(
                name=SEQUENCE_NAME,
                defaults={"last_value": 0},
            )
            highest = ProductRecord.objects.aggregate(highest=Max("id"))["highest"] or 0
            seq.last_value = max(seq.last_value, highest) + 1
            seq.save(update_fields=["last_value"])
            return seq.last_value

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        with transaction.atomic():
            list(ProductRecord.objects.select_for_update().values_list("id", flat=True))
            yield
