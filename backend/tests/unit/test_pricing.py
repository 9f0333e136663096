"""
Unit tests for the depreciation law.
"""

from decimal import Decimal

import pytest

from bookmarket.domain.entities import Book, BookStatus
from bookmarket.services.pricing import PricingEngine


@pytest.fixture
def engine():
    return PricingEngine(Decimal("0.10"))


class TestDepreciate:
    def test_ten_percent_off(self, engine):
        assert engine.depreciate(Decimal("100.00")) == Decimal("90.00")
        assert engine.depreciate(Decimal("90.00")) == Decimal("81.00")

    def test_truncates_to_the_cent(self, engine):
        # 72.90 * 0.9 = 65.61; 65.61 * 0.9 = 59.049 -> 59.04
        assert engine.depreciate(Decimal("65.61")) == Decimal("59.04")

    def test_small_prices_still_decrease(self, engine):
        assert engine.depreciate(Decimal("0.05")) == Decimal("0.04")
        assert engine.depreciate(Decimal("0.01")) == Decimal("0.00")

    def test_never_negative(self, engine):
        assert engine.depreciate(Decimal("0.00")) == Decimal("0.00")

    def test_repeated_depreciation_reaches_zero(self, engine):
        price = Decimal("100.00")
        steps = 0
        while price > 0:
            new_price = engine.depreciate(price)
            assert new_price < price
            price = new_price
            steps += 1
        assert steps < 200

    def test_custom_rate(self):
        assert PricingEngine(Decimal("0.25")).depreciate(Decimal("100")) == Decimal("75.00")


class TestApply:
    def test_updates_price_and_returns_previous(self, engine):
        book = Book(isbn="1", title="T", author="A", original_price=Decimal("100"))
        old = engine.apply(book)

        assert old == Decimal("100.00")
        assert book.current_price == Decimal("90.00")
        assert book.status == BookStatus.AVAILABLE

    def test_exhausted_price_discontinues(self, engine):
        book = Book(
            isbn="1",
            title="T",
            author="A",
            original_price=Decimal("100"),
            current_price=Decimal("0.01"),
        )
        engine.apply(book)

        assert book.current_price == Decimal("0.00")
        assert book.status == BookStatus.DISCONTINUED

    def test_is_exhausted(self):
        assert PricingEngine.is_exhausted(Decimal("0"))
        assert not PricingEngine.is_exhausted(Decimal("0.01"))
