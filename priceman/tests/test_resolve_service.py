"""
Tests for PriceResolver.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.test import TestCase, override_settings

from priceman.services.resolve import PriceResolver
from priceman.types import DiscountType, Product


TODAY = date(2026, 10, 19)


def make_product(**overrides) -> Product:
    data = {
        "id": 1,
        "name": "Espresso",
        "category": "coffee",
        "base_price": Decimal("100"),
    }
    data.update(overrides)
    return Product(**data)


class ResolvePriceTests(TestCase):
    """Tests for the price precedence chain."""

    def test_base_price_only(self) -> None:
        """Without variation or discounts the base price is the effective price."""
        product = make_product()
        self.assertEqual(PriceResolver.resolve_price(product, TODAY), Decimal("100.00"))

    def test_variation_then_seasonal(self) -> None:
        """Variation overrides base, then the seasonal discount applies on top."""
        product = make_product(variation_price=Decimal("80"), seasonal_discount=Decimal("10"))
        self.assertEqual(PriceResolver.resolve_price(product, TODAY), Decimal("72.00"))

    def test_zero_variation_is_ignored(self) -> None:
        product = make_product(variation_price=Decimal("0"))
        self.assertEqual(PriceResolver.resolve_price(product, TODAY), Decimal("100.00"))

    def test_standing_discount_before_seasonal(self) -> None:
        """Standing and seasonal percentage discounts compound."""
        product = make_product(discount_value=Decimal("10"), seasonal_discount=Decimal("10"))
        self.assertEqual(PriceResolver.resolve_price(product, TODAY), Decimal("81.00"))

    def test_fixed_seasonal_discount_never_goes_negative(self) -> None:
        product = make_product(
            seasonal_discount=Decimal("150"),
            seasonal_discount_type=DiscountType.FIXED_AMOUNT,
        )
        self.assertEqual(PriceResolver.resolve_price(product, TODAY), Decimal("0.00"))

    def test_fixed_seasonal_discount(self) -> None:
        product = make_product(
            seasonal_discount=Decimal("12.50"),
            seasonal_discount_type=DiscountType.FIXED_AMOUNT,
        )
        self.assertEqual(PriceResolver.resolve_price(product, TODAY), Decimal("87.50"))

    def test_rounds_half_up_to_cents(self) -> None:
        product = make_product(base_price=Decimal("10.005"))
        self.assertEqual(PriceResolver.resolve_price(product, TODAY), Decimal("10.01"))

    def test_does_not_mutate_product(self) -> None:
        """Resolving twice yields the same result and leaves the record untouched."""
        product = make_product(variation_price=Decimal("80"), seasonal_discount=Decimal("10"))
        snapshot = product.as_dict()
        first = PriceResolver.resolve_price(product, TODAY)
        second = PriceResolver.resolve_price(product, TODAY)
        self.assertEqual(first, second)
        self.assertEqual(product.as_dict(), snapshot)


class SeasonalWindowTests(TestCase):
    """Tests for the seasonal date range."""

    def test_not_started_yet(self) -> None:
        product = make_product(seasonal_discount=Decimal("10"), seasonal_start=TODAY + timedelta(days=1))
        self.assertFalse(PriceResolver.seasonal_discount_applies(product, TODAY))
        self.assertEqual(PriceResolver.resolve_price(product, TODAY), Decimal("100.00"))

    def test_already_ended(self) -> None:
        product = make_product(seasonal_discount=Decimal("10"), seasonal_end=TODAY - timedelta(days=1))
        self.assertFalse(PriceResolver.seasonal_discount_applies(product, TODAY))

    def test_inclusive_bounds(self) -> None:
        """Start and end dates are both inside the window."""
        product = make_product(seasonal_discount=Decimal("10"), seasonal_start=TODAY, seasonal_end=TODAY)
        self.assertTrue(PriceResolver.seasonal_discount_applies(product, TODAY))
        self.assertEqual(PriceResolver.resolve_price(product, TODAY), Decimal("90.00"))

    def test_inactive_flag(self) -> None:
        product = make_product(seasonal_discount=Decimal("10"), seasonal_discount_active=False)
        self.assertFalse(PriceResolver.seasonal_discount_applies(product, TODAY))


class MarginTests(TestCase):
    def test_margin_percent(self) -> None:
        self.assertEqual(PriceResolver.margin_percent(Decimal("110"), Decimal("100")), Decimal("10.00"))
        self.assertEqual(PriceResolver.margin_percent(Decimal("100"), Decimal("70")), Decimal("42.86"))

    def test_margin_without_cost_is_zero(self) -> None:
        self.assertEqual(PriceResolver.margin_percent(Decimal("50"), Decimal("0")), Decimal("0.00"))

    def test_min_selling_price_uses_multiplier(self) -> None:
        self.assertEqual(PriceResolver.min_selling_price(Decimal("100")), Decimal("110.00"))

    @override_settings(PRICEMAN={"MIN_SELLING_MULTIPLIER": "1.25"})
    def test_min_selling_price_follows_settings(self) -> None:
        self.assertEqual(PriceResolver.min_selling_price(Decimal("100")), Decimal("125.00"))


class DerivedFieldsTests(TestCase):
    def test_with_derived_fields(self) -> None:
        product = make_product(purchase_price=Decimal("50"), seasonal_discount=Decimal("10"))
        cached = PriceResolver.with_derived_fields(product, TODAY)
        self.assertEqual(cached.effective_price, Decimal("90.00"))
        self.assertEqual(cached.profit_margin, Decimal("80.00"))
        self.assertEqual(cached.min_selling_price, Decimal("55.00"))
        # original untouched
        self.assertEqual(product.effective_price, Decimal("0"))

    def test_financial_health(self) -> None:
        healthy = PriceResolver.financial_health(make_product(base_price=Decimal("150"), purchase_price=Decimal("100")))
        self.assertEqual(healthy["health"], "excellent")
        poor = PriceResolver.financial_health(make_product(base_price=Decimal("105"), purchase_price=Decimal("100")))
        self.assertEqual(poor["health"], "poor")
        self.assertEqual(poor["recommendation"], "Consider increasing price or reducing cost")

    def test_display_metrics_stock_status(self) -> None:
        metrics = PriceResolver.display_metrics(make_product(stock=3, min_stock=5))
        self.assertEqual(metrics["stock_status"], "low")
        self.assertEqual(metrics["price_status"], "valid")


class ScheduledSeasonalTests(TestCase):
    """Tests for discounts that are configured but not yet running."""

    def test_scheduled_includes_future_windows(self) -> None:
        product = make_product(seasonal_discount=Decimal("10"), seasonal_start=TODAY + timedelta(days=3))
        self.assertFalse(PriceResolver.seasonal_discount_applies(product, TODAY))
        self.assertTrue(PriceResolver.seasonal_discount_scheduled(product, TODAY))

    def test_expired_or_inactive_is_not_scheduled(self) -> None:
        expired = make_product(seasonal_discount=Decimal("10"), seasonal_end=TODAY - timedelta(days=1))
        inactive = make_product(seasonal_discount=Decimal("10"), seasonal_discount_active=False)
        self.assertFalse(PriceResolver.seasonal_discount_scheduled(expired, TODAY))
        self.assertFalse(PriceResolver.seasonal_discount_scheduled(inactive, TODAY))

    def test_lowest_price_applies_scheduled_discount(self) -> None:
        product = make_product(seasonal_discount=Decimal("50"), seasonal_start=TODAY + timedelta(days=1))
        self.assertEqual(PriceResolver.resolve_price(product, TODAY), Decimal("100.00"))
        self.assertEqual(PriceResolver.lowest_price(product, TODAY), Decimal("50.00"))

    def test_exact_margin_is_not_rounded(self) -> None:
        margin = PriceResolver.margin_percent(Decimal("105.01"), Decimal("100.01"), exact=True)
        self.assertLess(margin, Decimal("5"))
        self.assertEqual(PriceResolver.margin_percent(Decimal("105.01"), Decimal("100.01")), Decimal("5.00"))
