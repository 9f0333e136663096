from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional

from bookmarket.core import config
from bookmarket.domain.entities import (
    Book,
    Transaction,
    TransactionStatus,
    TransactionType,
    User,
)
from bookmarket.domain.interfaces import ITransactionRepository


def _now() -> datetime:
    return datetime.now(config.APP_TZ)


class LedgerRecorder:
    """Append-only record of completed trades and the history built on it."""

    def __init__(
        self,
        transactions: ITransactionRepository,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self.transactions = transactions
        self.clock = clock

    def record(
        self,
        user: User,
        book: Book,
        amount: Decimal,
        type: TransactionType,
        notes: Optional[str] = None,
    ) -> Transaction:
        return self.transactions.append(
            Transaction(
                user_id=user.id,
                book_id=book.id,
                book_isbn=book.isbn,
                book_title=book.title,
                type=type,
                amount=amount,
                date=self.clock(),
                status=TransactionStatus.COMPLETED,
                notes=notes,
            )
        )

    def has_purchased(self, user_id: int, book_id: int) -> bool:
        """True while the user has bought more copies of the book than sold back."""
        counts = self.transactions.count_by_type(user_id, book_id)
        return counts[TransactionType.BUY] > counts[TransactionType.SELL]

    def purchased_books(self, user_id: int) -> List[Book]:
        return self.transactions.books_for_user(user_id, TransactionType.BUY)

    def sold_books(self, user_id: int) -> List[Book]:
        return self.transactions.books_for_user(user_id, TransactionType.SELL)

    def history(
        self, user_id: int, type: Optional[TransactionType] = None
    ) -> List[Transaction]:
        return self.transactions.list_by_user(user_id, type)
