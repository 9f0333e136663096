from typing import Dict, List, Optional

from sqlalchemy import func, select

from bookmarket.db.base import Book as DbBook
from bookmarket.db.base import Transaction as DbTransaction
from bookmarket.domain.entities import Book, Transaction, TransactionType
from bookmarket.domain.interfaces import ITransactionRepository
from bookmarket.repositories.book_repo import BookRepository


class TransactionRepository(ITransactionRepository):
    """Append-only ledger storage. There is deliberately no update method."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def append(self, transaction: Transaction) -> Transaction:
        db_txn = DbTransaction(
            user_id=transaction.user_id,
            book_id=transaction.book_id,
            book_isbn=transaction.book_isbn,
            book_title=transaction.book_title,
            transaction_type=transaction.type.value,
            amount=transaction.amount,
            transaction_date=transaction.date,
            status=transaction.status.value,
            notes=transaction.notes,
        )
        self.db.add(db_txn)
        self.db.flush()
        return self._to_domain(db_txn)

    def list_by_user(
        self, user_id: int, type: Optional[TransactionType] = None
    ) -> List[Transaction]:
        query = self.db.query(DbTransaction).filter(DbTransaction.user_id == user_id)
        if type is not None:
            query = query.filter(
                DbTransaction.transaction_type == TransactionType(type).value
            )
        rows = query.order_by(
            DbTransaction.transaction_date.desc(), DbTransaction.id.desc()
        ).all()
        return [self._to_domain(r) for r in rows]

    def count_by_type(self, user_id: int, book_id: int) -> Dict[TransactionType, int]:
        rows = (
            self.db.query(DbTransaction.transaction_type, func.count(DbTransaction.id))
            .filter(
                DbTransaction.user_id == user_id,
                DbTransaction.book_id == book_id,
            )
            .group_by(DbTransaction.transaction_type)
            .all()
        )
        counts = {type: 0 for type in TransactionType}
        for type_value, total in rows:
            counts[TransactionType(type_value)] = total
        return counts

    def books_for_user(self, user_id: int, type: TransactionType) -> List[Book]:
        book_ids = (
            select(DbTransaction.book_id)
            .where(
                DbTransaction.user_id == user_id,
                DbTransaction.transaction_type == TransactionType(type).value,
                DbTransaction.book_id.isnot(None),
            )
            .distinct()
        )
        db_books = (
            self.db.query(DbBook)
            .filter(DbBook.id.in_(book_ids))
            .order_by(DbBook.id.asc())
            .all()
        )
        return [BookRepository._to_domain(b) for b in db_books]

    @staticmethod
    def _to_domain(db_txn: DbTransaction) -> Transaction:
        return Transaction(
            id=db_txn.id,
            user_id=db_txn.user_id,
            book_id=db_txn.book_id,
            book_isbn=db_txn.book_isbn,
            book_title=db_txn.book_title,
            type=TransactionType(db_txn.transaction_type),
            amount=db_txn.amount,
            date=db_txn.transaction_date,
            status=db_txn.status,
            notes=db_txn.notes,
        )
