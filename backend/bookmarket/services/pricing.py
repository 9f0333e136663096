"""
Pricing engine: the single depreciation law of the marketplace.

Every completed buy or sell lowers a book's current price by the configured
rate (10% by default). Prices are 2-decimal amounts and depreciation always
rounds down to the cent, so repeated depreciation strictly decreases the
price until it reaches 0.00, at which point the book is discontinued.
"""

import logging
from decimal import ROUND_DOWN, Decimal
from typing import Optional

from bookmarket.core import config
from bookmarket.domain.entities import CENT, Book, BookStatus, to_money

logger = logging.getLogger(__name__)


class PricingEngine:
    def __init__(self, depreciation_rate: Optional[Decimal] = None) -> None:
        rate = config.DEPRECIATION_RATE if depreciation_rate is None else depreciation_rate
        self.factor = Decimal("1") - Decimal(str(rate))

    def depreciate(self, price: Decimal) -> Decimal:
        """Price after one transaction, truncated to the cent."""
        new_price = (to_money(price) * self.factor).quantize(CENT, rounding=ROUND_DOWN)
        return max(new_price, Decimal("0.00"))

    @staticmethod
    def is_exhausted(price: Decimal) -> bool:
        return price <= 0

    def apply(self, book: Book) -> Decimal:
        """Depreciate ``book`` in place and return the price it had before.

        A book whose price reaches zero becomes DISCONTINUED; that status is
        terminal until an explicit update resets it.
        """
        old_price = book.current_price
        book.current_price = self.depreciate(old_price)

        if self.is_exhausted(book.current_price):
            book.status = BookStatus.DISCONTINUED
            logger.info(
                "Book discontinued after price exhaustion",
                extra={"context": {"book_id": book.id, "isbn": book.isbn}},
            )
        return old_price
