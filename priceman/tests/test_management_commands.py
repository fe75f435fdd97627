"""
Tests for priceman management commands.
"""

from __future__ import annotations

import json
import tempfile
from io import StringIO
from pathlib import Path

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from priceman.models import ProductRecord


ROWS = [
    {"id": 7, "name": "Espresso", "category": "coffee", "price": 10, "purchasePrice": 4, "imageUrl": "e.png"},
    {"name": "Latte", "category": "coffee", "price": 12, "discountValue": 10, "discountType": "Percentage"},
    {"name": "Broken", "category": "coffee", "price": 5, "purchasePrice": 9},
]


class SeedProductsCommandTests(TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.path = Path(self.tmp.name) / "products.json"
        self.path.write_text(json.dumps(ROWS), encoding="utf-8")

    def test_seeds_valid_rows(self) -> None:
        out = StringIO()
        call_command("seed_products", str(self.path), stdout=out)

        self.assertEqual(ProductRecord.objects.count(), 2)
        latte = ProductRecord.objects.get(name="Latte")
        self.assertEqual(str(latte.effective_price), "10.80")
        self.assertFalse(ProductRecord.objects.filter(pk=7).exists())
        output = out.getvalue()
        self.assertIn("Broken", output)
        self.assertIn("Criados 2 produto(s); 1 com erro", output)

    def test_dry_run_writes_nothing(self) -> None:
        out = StringIO()
        call_command("seed_products", str(self.path), "--dry-run", stdout=out)
        self.assertEqual(ProductRecord.objects.count(), 0)
        self.assertIn("Seriam criados 2 produto(s); 1 com erro", out.getvalue())

    def test_missing_file(self) -> None:
        with self.assertRaises(CommandError):
            call_command("seed_products", str(Path(self.tmp.name) / "missing.json"))

    def test_rejects_non_array(self) -> None:
        self.path.write_text(json.dumps({"name": "x"}), encoding="utf-8")
        with self.assertRaises(CommandError):
            call_command("seed_products", str(self.path))
