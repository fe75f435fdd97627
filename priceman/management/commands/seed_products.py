"""
Management command para popular o catálogo a partir de um fixture JSON.

Uso:
    python manage.py seed_products products.json
    python manage.py seed_products products.json --dry-run

O fixture é um array de objetos de produto (chaves camelCase aceitas).
Ids do arquivo são ignorados: cada produto recebe um id novo da sequência.
Chaves desconhecidas (imagens, descrições, ...) são descartadas.
"""

import json

from django.core.management.base import BaseCommand, CommandError

from priceman.conf import get_repository
from priceman.exceptions import PricemanError
from priceman.services import ProductService
from priceman.types import FIELD_ALIASES, READ_ONLY_FIELDS, Product


class Command(BaseCommand):
    help = "Cria produtos a partir de um arquivo JSON"

    def add_arguments(self, parser):
        parser.add_argument("fixture", help="Caminho do arquivo JSON")
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Valida os produtos sem gravar",
        )

    def handle(self, *args, **options):
        try:
            with open(options["fixture"], encoding="utf-8") as fh:
                rows = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise CommandError(f"Não foi possível ler {options['fixture']}: {exc}") from exc

        if not isinstance(rows, list):
            raise CommandError("O fixture deve ser um array JSON de produtos")

        service = ProductService(get_repository())
        known = Product.field_names() - set(READ_ONLY_FIELDS)
        created = 0
        errors = []

        for index, row in enumerate(rows):
            fields = {k: v for k, v in row.items() if FIELD_ALIASES.get(k, k) in known}
            label = row.get("name") or f"#{index}"
            try:
                if options["dry_run"]:
                    result = service.validate_price_update(Product.from_data(fields))
                    if not result.is_valid:
                        raise PricemanError(code=result.code, message=result.error)
                else:
                    service.create_product(fields)
                created += 1
            except PricemanError as e:
                errors.append((label, e.message))
                self.stdout.write(self.style.WARNING(f"  - {label}: {e.message}"))

        verb = "Seriam criados" if options["dry_run"] else "Criados"
        self.stdout.write(self.style.SUCCESS(f"{verb} {created} produto(s); {len(errors)} com erro"))
