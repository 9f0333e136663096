from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, or_

from bookmarket.core.exceptions import BookNotFoundError
from bookmarket.db.base import Book as DbBook
from bookmarket.db.base import Transaction as DbTransaction
from bookmarket.domain.entities import Book, BookCategory, BookStatus
from bookmarket.domain.interfaces import IBookRepository

SORTABLE_FIELDS = {
    "title": DbBook.title,
    "author": DbBook.author,
    "category": DbBook.category,
}


class BookRepository(IBookRepository):
    """SQLAlchemy implementation of the book persistence port.

    Writes are staged on the session (flushed, never committed); the unit of
    work owning the session commits or rolls back.
    """

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_id(self, book_id: int) -> Optional[Book]:
        db_book = self.db.query(DbBook).filter_by(id=book_id).first()
        return self._to_domain(db_book) if db_book else None

    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        db_book = self.db.query(DbBook).filter_by(isbn=isbn.strip()).first()
        return self._to_domain(db_book) if db_book else None

    def get_for_update(self, book_id: int) -> Optional[Book]:
        db_book = (
            self.db.query(DbBook)
            .filter_by(id=book_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        return self._to_domain(db_book) if db_book else None

    def get_by_isbn_for_update(self, isbn: str) -> Optional[Book]:
        db_book = (
            self.db.query(DbBook)
            .filter_by(isbn=isbn.strip())
            .with_for_update()
            .populate_existing()
            .first()
        )
        return self._to_domain(db_book) if db_book else None

    def list_all(self) -> List[Book]:
        db_books = self.db.query(DbBook).order_by(DbBook.id.asc()).all()
        return [self._to_domain(b) for b in db_books]

    def list_by_status(self, status: BookStatus) -> List[Book]:
        db_books = (
            self.db.query(DbBook)
            .filter(DbBook.status == BookStatus(status).value)
            .order_by(DbBook.title.asc())
            .all()
        )
        return [self._to_domain(b) for b in db_books]

    def list_by_category(self, category: BookCategory) -> List[Book]:
        db_books = (
            self.db.query(DbBook)
            .filter(DbBook.category == BookCategory(category).value)
            .order_by(DbBook.title.asc())
            .all()
        )
        return [self._to_domain(b) for b in db_books]

    def search(
        self,
        keyword: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        sort_by: str = "title",
        descending: bool = False,
    ) -> List[Book]:
        query = self.db.query(DbBook)

        if keyword and keyword.strip():
            pattern = f"%{keyword.strip().lower()}%"
            query = query.filter(
                or_(
                    func.lower(DbBook.title).like(pattern),
                    func.lower(DbBook.author).like(pattern),
                    func.lower(DbBook.category).like(pattern),
                )
            )
        if min_price is not None:
            query = query.filter(DbBook.current_price >= min_price)
        if max_price is not None:
            query = query.filter(DbBook.current_price <= max_price)

        column = SORTABLE_FIELDS.get(sort_by, DbBook.title)
        ordering = column.desc() if descending else column.asc()
        db_books = query.order_by(ordering, DbBook.id.asc()).all()
        return [self._to_domain(b) for b in db_books]

    def count(self) -> int:
        return self.db.query(func.count(DbBook.id)).scalar() or 0

    def add(self, book: Book) -> Book:
        db_book = DbBook()
        self._apply(db_book, book)
        self.db.add(db_book)
        self.db.flush()
        return self._to_domain(db_book)

    def save(self, book: Book) -> Book:
        db_book = self.db.get(DbBook, book.id)
        if db_book is None:
            raise BookNotFoundError(f"Book not found for the given ID: {book.id}")
        self._apply(db_book, book)
        self.db.flush()
        return self._to_domain(db_book)

    def delete(self, book_id: int) -> None:
        db_book = self.db.get(DbBook, book_id)
        if db_book is None:
            return
        self.db.query(DbTransaction).filter(DbTransaction.book_id == book_id).update(
            {DbTransaction.book_id: None}
        )
        self.db.delete(db_book)
        self.db.flush()

    @staticmethod
    def _apply(db_book: DbBook, book: Book) -> None:
        db_book.isbn = book.isbn
        db_book.title = book.title
        db_book.author = book.author
        db_book.edition = book.edition
        db_book.publication_year = book.publication_year
        db_book.language = book.language
        db_book.publisher = book.publisher
        db_book.description = book.description
        db_book.category = book.category.value
        db_book.condition = book.condition.value if book.condition else None
        db_book.condition_description = book.condition_description
        db_book.status = book.status.value
        db_book.quantity = book.quantity
        db_book.original_price = book.original_price
        db_book.current_price = book.current_price

    @staticmethod
    def _to_domain(db_book: DbBook) -> Book:
        return Book(
            id=db_book.id,
            isbn=db_book.isbn,
            title=db_book.title,
            author=db_book.author,
            edition=db_book.edition,
            publication_year=db_book.publication_year,
            language=db_book.language,
            publisher=db_book.publisher,
            description=db_book.description,
            category=BookCategory(db_book.category),
            condition=db_book.condition,
            condition_description=db_book.condition_description,
            status=BookStatus(db_book.status),
            quantity=db_book.quantity,
            original_price=db_book.original_price,
            current_price=db_book.current_price,
            created_at=db_book.created_at,
            updated_at=db_book.updated_at,
        )
