"""
Tests for DjangoProductRepository.
"""

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from priceman.adapters.orm import DjangoProductRepository
from priceman.models import ProductRecord, ProductSequence
from priceman.protocols import ProductRepository
from priceman.services import ProductService
from priceman.types import DiscountType, Product


def make_product(pk: int, **overrides) -> Product:
    now = timezone.now()
    data = {
        "id": pk,
        "name": f"Product {pk}",
        "category": "coffee",
        "base_price": Decimal("100.00"),
        "barcode": f"BC-{pk}",
        "created_at": now,
        "updated_at": now,
    }
    data.update(overrides)
    return Product(**data)


class DjangoProductRepositoryTests(TestCase):
    """Tests for the ORM-backed repository."""

    def setUp(self) -> None:
        self.repo = DjangoProductRepository()

    def test_satisfies_protocol(self) -> None:
        self.assertIsInstance(self.repo, ProductRepository)

    def test_upsert_and_get(self) -> None:
        stored = self.repo.upsert(make_product(
            1,
            seasonal_discount=Decimal("12.50"),
            seasonal_discount_type=DiscountType.FIXED_AMOUNT,
        ))
        self.assertEqual(stored.id, 1)
        fetched = self.repo.get(1)
        self.assertEqual(fetched.seasonal_discount, Decimal("12.50"))
        self.assertEqual(fetched.seasonal_discount_type, DiscountType.FIXED_AMOUNT)
        self.assertIsNone(fetched.variation_price)
        self.assertEqual(ProductRecord.objects.count(), 1)

    def test_upsert_replaces(self) -> None:
        self.repo.upsert(make_product(1))
        self.repo.upsert(make_product(1, name="Renamed"))
        self.assertEqual(ProductRecord.objects.count(), 1)
        self.assertEqual(self.repo.get(1).name, "Renamed")

    def test_upsert_requires_id(self) -> None:
        with self.assertRaises(ValueError):
            self.repo.upsert(make_product(None))

    def test_get_missing(self) -> None:
        self.assertIsNone(self.repo.get(99))

    def test_list_orders_by_id_and_filters(self) -> None:
        self.repo.upsert(make_product(2, category="tea"))
        self.repo.upsert(make_product(1))
        self.assertEqual([p.id for p in self.repo.list()], [1, 2])
        self.assertEqual([p.id for p in self.repo.list(lambda p: p.category == "tea")], [2])

    def test_delete(self) -> None:
        self.repo.upsert(make_product(1))
        self.assertTrue(self.repo.delete(1))
        self.assertFalse(self.repo.delete(1))

    def test_next_id_never_reuses(self) -> None:
        self.assertEqual(self.repo.next_id(), 1)
        self.repo.upsert(make_product(1))
        self.assertEqual(self.repo.next_id(), 2)
        self.repo.delete(1)
        self.assertEqual(self.repo.next_id(), 3)
        self.assertEqual(ProductSequence.objects.get(name="product").last_value, 3)

    def test_next_id_accounts_for_existing_rows(self) -> None:
        self.repo.upsert(make_product(40))
        self.assertEqual(self.repo.next_id(), 41)

    def test_exclusive_block(self) -> None:
        self.repo.upsert(make_product(1))
        with self.repo.exclusive():
            self.repo.upsert(make_product(1, name="Locked"))
        self.assertEqual(self.repo.get(1).name, "Locked")


class ServiceOverOrmTests(TestCase):
    """ProductService backed by the database."""

    def setUp(self) -> None:
        self.service = ProductService(DjangoProductRepository())

    def test_create_update_and_bulk(self) -> None:
        product = self.service.create_product(
            {"name": "Espresso", "category": "coffee", "base_price": "1000", "purchase_price": "700"}
        )
        record = ProductRecord.objects.get(pk=product.id)
        self.assertEqual(record.effective_price, Decimal("1000.00"))
        self.assertEqual(record.profit_margin, Decimal("42.86"))

        report = self.service.bulk_update_prices({"strategy": "percentage", "value": -40})
        self.assertEqual(report.conflicts[0].code, "below_cost")
        record.refresh_from_db()
        self.assertEqual(record.base_price, Decimal("1000.00"))

        report = self.service.bulk_update_prices({"strategy": "percentage", "value": 10})
        self.assertEqual(report.updated_count, 1)
        record.refresh_from_db()
        self.assertEqual(record.base_price, Decimal("1100.00"))
        self.assertEqual(record.effective_price, Decimal("1100.00"))

    def test_ids_survive_deletion(self) -> None:
        first = self.service.create_product({"name": "A", "category": "c", "base_price": 1})
        self.service.delete_product(first.id)
        second = self.service.create_product({"name": "B", "category": "c", "base_price": 1})
        self.assertEqual(second.id, first.id + 1)
