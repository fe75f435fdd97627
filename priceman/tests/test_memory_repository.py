"""
Tests for InMemoryProductRepository.
"""

from __future__ import annotations

import json
import tempfile
from decimal import Decimal
from pathlib import Path

from django.test import TestCase

from priceman.adapters.memory import InMemoryProductRepository
from priceman.protocols import ProductRepository
from priceman.types import Product


class InMemoryProductRepositoryTests(TestCase):
    def setUp(self) -> None:
        self.repo = InMemoryProductRepository([
            {"id": 3, "name": "Espresso", "category": "coffee", "price": 10, "purchasePrice": 4},
            {"name": "Latte", "category": "coffee", "base_price": 12},
        ])

    def test_satisfies_protocol(self) -> None:
        self.assertIsInstance(self.repo, ProductRepository)

    def test_seed_keeps_or_assigns_ids(self) -> None:
        self.assertEqual([p.id for p in self.repo.list()], [3, 4])

    def test_seed_computes_derived_fields(self) -> None:
        product = self.repo.get(3)
        self.assertEqual(product.effective_price, Decimal("10.00"))
        self.assertEqual(product.profit_margin, Decimal("150.00"))
        self.assertIsNotNone(product.created_at)

    def test_returns_copies(self) -> None:
        product = self.repo.get(3)
        product.name = "Changed"
        self.assertEqual(self.repo.get(3).name, "Espresso")

    def test_list_with_predicate(self) -> None:
        self.assertEqual([p.name for p in self.repo.list(lambda p: p.base_price > 11)], ["Latte"])

    def test_upsert_requires_id(self) -> None:
        with self.assertRaises(ValueError):
            self.repo.upsert(Product(id=None, name="X", category="c", base_price=Decimal("1")))

    def test_next_id_is_monotonic(self) -> None:
        self.assertTrue(self.repo.delete(4))
        self.assertFalse(self.repo.delete(4))
        self.assertEqual(self.repo.next_id(), 5)
        self.assertEqual(self.repo.next_id(), 6)

    def test_exclusive_is_reentrant(self) -> None:
        with self.repo.exclusive():
            with self.repo.exclusive():
                self.assertEqual(len(self.repo), 2)

    def test_from_json_drops_unknown_keys(self) -> None:
        rows = [{"id": 1, "name": "Mocha", "category": "coffee", "price": 9, "imageUrl": "x.png"}]
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "products.json"
            path.write_text(json.dumps(rows), encoding="utf-8")
            repo = InMemoryProductRepository.from_json(path)
        self.assertEqual(repo.get(1).name, "Mocha")
        self.assertEqual(repo.get(1).base_price, Decimal("9"))
