"""
Marketplace transaction orchestrator.

Buy, sell and sell-by-ISBN each run in a single unit of work: user funds,
book quantity/price/status and the new ledger row are committed together or
not at all. Preconditions are checked in a fixed order and the first
violation aborts the whole operation.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from bookmarket.core.exceptions import (
    BookNotFoundError,
    MarketplaceError,
    UserNotFoundError,
    ValidationFailure,
)
from bookmarket.db.unit_of_work import UnitOfWork
from bookmarket.domain.entities import (
    Book,
    BookStatus,
    Transaction,
    TransactionType,
    User,
)
from bookmarket.services.funds_service import FundsManager
from bookmarket.services.inventory_service import InventoryManager
from bookmarket.services.ledger_service import LedgerRecorder
from bookmarket.services.pricing import PricingEngine

logger = logging.getLogger(__name__)


@dataclass
class TradeResult:
    """State of the participants right after a committed trade."""

    user: User
    book: Book
    transaction: Transaction


class MarketplaceService:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork] = UnitOfWork,
        inventory: Optional[InventoryManager] = None,
        pricing: Optional[PricingEngine] = None,
        funds: Optional[FundsManager] = None,
    ) -> None:
        self.uow_factory = uow_factory
        self.inventory = inventory or InventoryManager(uow_factory)
        self.pricing = pricing or PricingEngine()
        self.funds = funds or FundsManager(uow_factory)

    def buy_book(self, user_id: int, book_id: int) -> TradeResult:
        try:
            with self.uow_factory() as uow:
                user = self._load_user(uow, user_id)
                book = self._load_book(uow, book_id)

                if not book.is_available:
                    raise ValidationFailure("Book is not available for purchase.")
                price = book.current_price
                self.funds.debit(user, price)
                self.inventory.reserve_for_sale(book)
                self.pricing.apply(book)

                ledger = LedgerRecorder(uow.transactions)
                txn = ledger.record(user, book, price, TransactionType.BUY)
                user = uow.users.save(user)
                book = uow.books.save(book)
                uow.commit()
        except MarketplaceError as e:
            self._log_rejected("buy", user_id, e, book_id=book_id)
            raise

        self._log_trade(txn, book)
        return TradeResult(user=user, book=book, transaction=txn)

    def sell_book(self, user_id: int, book_id: int) -> TradeResult:
        try:
            with self.uow_factory() as uow:
                user = self._load_user(uow, user_id)
                book = self._load_book(uow, book_id)

                ledger = LedgerRecorder(uow.transactions)
                if not ledger.has_purchased(user_id, book_id):
                    raise ValidationFailure(
                        "Seller does not own the book with the given ID."
                    )
                if book.status == BookStatus.DISCONTINUED:
                    raise ValidationFailure("Book is discontinued.")

                price = book.current_price
                self.funds.credit(user, price)
                self.inventory.release_from_sale(book)
                self.pricing.apply(book)

                txn = ledger.record(user, book, price, TransactionType.SELL)
                user = uow.users.save(user)
                book = uow.books.save(book)
                uow.commit()
        except MarketplaceError as e:
            self._log_rejected("sell", user_id, e, book_id=book_id)
            raise

        self._log_trade(txn, book)
        return TradeResult(user=user, book=book, transaction=txn)

    def sell_book_by_isbn(
        self, user_id: int, isbn: str, new_book: Optional[Book] = None
    ) -> TradeResult:
        """Sell a copy identified by ISBN.

        A known ISBN behaves like a sell-back without the ownership check.
        An unknown ISBN needs ``new_book``: the record is created at its
        original price (subject to the pool cap) and the seller is paid that
        price with no depreciation.
        """
        isbn = (isbn or "").strip()
        try:
            with self.uow_factory() as uow:
                user = self._load_user(uow, user_id)
                ledger = LedgerRecorder(uow.transactions)
                book = uow.books.get_by_isbn_for_update(isbn)

                if book is not None:
                    if book.status != BookStatus.AVAILABLE:
                        raise ValidationFailure("Book is not available for sale.")
                    price = book.current_price
                    self.funds.credit(user, price)
                    self.inventory.release_from_sale(book)
                    self.pricing.apply(book)
                    book = uow.books.save(book)
                else:
                    if new_book is None:
                        raise ValidationFailure(
                            "New book details are required to sell an unknown ISBN."
                        )
                    if new_book.isbn != isbn:
                        raise ValidationFailure(
                            "Book ISBN does not match the ISBN being sold."
                        )
                    book = self.inventory.stage_new_book(uow.books, new_book)
                    price = book.original_price
                    self.funds.credit(user, price)

                txn = ledger.record(user, book, price, TransactionType.SELL)
                user = uow.users.save(user)
                uow.commit()
        except MarketplaceError as e:
            self._log_rejected("sell_by_isbn", user_id, e, isbn=isbn)
            raise

        self._log_trade(txn, book)
        return TradeResult(user=user, book=book, transaction=txn)

    @staticmethod
    def _load_user(uow: UnitOfWork, user_id: int) -> User:
        user = uow.users.get_for_update(user_id)
        if user is None:
            raise UserNotFoundError(f"User not found for the given ID: {user_id}")
        return user

    @staticmethod
    def _load_book(uow: UnitOfWork, book_id: int) -> Book:
        book = uow.books.get_for_update(book_id)
        if book is None:
            raise BookNotFoundError(f"Book not found for the given ID: {book_id}")
        return book

    @staticmethod
    def _log_trade(txn: Transaction, book: Book) -> None:
        logger.info(
            "Trade committed",
            extra={
                "context": {
                    "type": txn.type.value,
                    "user_id": txn.user_id,
                    "book_id": txn.book_id,
                    "amount": str(txn.amount),
                    "new_price": str(book.current_price),
                    "quantity": book.quantity,
                    "status": book.status.value,
                }
            },
        )

    @staticmethod
    def _log_rejected(operation: str, user_id: int, error: MarketplaceError, **ids) -> None:
        logger.warning(
            "Trade rejected",
            extra={
                "context": {
                    "operation": operation,
                    "user_id": user_id,
                    "kind": error.kind,
                    "reason": error.message,
                    **ids,
                }
            },
        )
