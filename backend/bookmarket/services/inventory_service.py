import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from bookmarket.core import config
from bookmarket.core.exceptions import (
    BookAlreadyExistsError,
    BookNotFoundError,
    InventoryFullError,
    ValidationFailure,
)
from bookmarket.db.unit_of_work import UnitOfWork
from bookmarket.domain.entities import Book, BookCategory, BookStatus
from bookmarket.domain.interfaces import IBookRepository

logger = logging.getLogger(__name__)

SORT_FIELDS = ("title", "author", "category")

# Fields an update may overwrite. Quantity only moves through trades,
# add_book merges and remove_book; original_price is fixed at creation.
UPDATABLE_FIELDS = {
    "isbn",
    "title",
    "author",
    "edition",
    "publication_year",
    "language",
    "publisher",
    "description",
    "category",
    "condition",
    "condition_description",
    "current_price",
    "status",
}


def _check_status_matches_quantity(book: Book) -> None:
    if book.status == BookStatus.AVAILABLE and book.quantity == 0:
        raise ValidationFailure("status: a book with no copies cannot be AVAILABLE")
    if book.status == BookStatus.SOLD and book.quantity > 0:
        raise ValidationFailure("status: a book with copies in stock cannot be SOLD")


class InventoryManager:
    """Owns quantity, status, uniqueness and pool-cap rules for books."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork] = UnitOfWork,
        max_inventory_size: Optional[int] = None,
    ) -> None:
        self.uow_factory = uow_factory
        self.max_inventory_size = (
            config.MAX_INVENTORY_SIZE if max_inventory_size is None else max_inventory_size
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def add_book(self, book: Book) -> Book:
        """Register a copy of ``book``.

        A known ISBN with the same title/author is merged into the existing
        record (quantity + 1, AVAILABLE); with a different title/author it
        is a conflict. Unknown ISBNs create a new record if the pool has
        room.
        """
        with self.uow_factory() as uow:
            existing = uow.books.get_by_isbn_for_update(book.isbn)
            if existing is not None:
                if not existing.matches_identity(book):
                    raise BookAlreadyExistsError(
                        "A book with the same ISBN already exists."
                    )
                existing.quantity += 1
                existing.status = BookStatus.AVAILABLE
                saved = uow.books.save(existing)
                action = "merged"
            else:
                saved = self.stage_new_book(uow.books, book)
                action = "created"
            uow.commit()

        logger.info(
            f"Book {action}",
            extra={
                "context": {
                    "book_id": saved.id,
                    "isbn": saved.isbn,
                    "quantity": saved.quantity,
                }
            },
        )
        return saved

    def stage_new_book(self, books: IBookRepository, book: Book) -> Book:
        """Insert a brand-new record inside the caller's unit of work."""
        if books.count() >= self.max_inventory_size:
            raise InventoryFullError(
                "The inventory is full. No more new books can be added."
            )
        fresh = replace(
            book,
            id=None,
            quantity=1,
            status=BookStatus.AVAILABLE,
            current_price=book.original_price,
            created_at=None,
            updated_at=None,
        )
        return books.add(fresh)

    def remove_book(self, book_id: int) -> Optional[Book]:
        """Take one copy out of inventory.

        Returns the remaining record, or None when the last copy was removed
        and the record deleted.
        """
        with self.uow_factory() as uow:
            book = uow.books.get_for_update(book_id)
            if book is None:
                raise BookNotFoundError(f"Book not found for the given id: {book_id}")

            if book.quantity > 1:
                book.quantity -= 1
                remaining = uow.books.save(book)
            else:
                uow.books.delete(book_id)
                remaining = None
            uow.commit()

        logger.info(
            "Book removed",
            extra={
                "context": {
                    "book_id": book_id,
                    "deleted": remaining is None,
                    "quantity": remaining.quantity if remaining else 0,
                }
            },
        )
        return remaining

    def update_book(self, book_id: int, changes: Dict[str, Any]) -> Book:
        """Overwrite descriptive fields, prices or status of a book.

        This is also how a DISCONTINUED book is put back on the market.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationFailure(
                [f"{field}: field cannot be updated" for field in sorted(unknown)]
            )

        with self.uow_factory() as uow:
            existing = uow.books.get_for_update(book_id)
            if existing is None:
                raise BookNotFoundError(f"Book not found for the given ID: {book_id}")

            new_isbn = changes.get("isbn")
            if new_isbn is not None and new_isbn.strip() != existing.isbn:
                clash = uow.books.get_by_isbn(new_isbn)
                if clash is not None and clash.id != book_id:
                    raise BookAlreadyExistsError(
                        "A book with the same ISBN already exists."
                    )

            try:
                updated = replace(existing, **changes)
            except ValueError as e:
                raise ValidationFailure(str(e)) from e
            _check_status_matches_quantity(updated)

            saved = uow.books.save(updated)
            uow.commit()

        logger.info(
            "Book updated",
            extra={"context": {"book_id": book_id, "fields": sorted(changes)}},
        )
        return saved

    # ------------------------------------------------------------------
    # Trade transitions (mutate a loaded book inside the caller's unit of work)
    # ------------------------------------------------------------------

    @staticmethod
    def reserve_for_sale(book: Book) -> None:
        if not book.is_available:
            raise ValidationFailure("Book is not available for purchase.")
        book.quantity -= 1
        if book.quantity == 0:
            book.status = BookStatus.SOLD

    @staticmethod
    def release_from_sale(book: Book) -> None:
        book.quantity += 1
        book.status = BookStatus.AVAILABLE

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_book(self, book_id: int) -> Book:
        with self.uow_factory() as uow:
            book = uow.books.get_by_id(book_id)
        if book is None:
            raise BookNotFoundError(f"Book not found for the given ID: {book_id}")
        return book

    def get_book_by_isbn(self, isbn: str) -> Book:
        with self.uow_factory() as uow:
            book = uow.books.get_by_isbn(isbn)
        if book is None:
            raise BookNotFoundError(f"Book not found for the given ISBN: {isbn}")
        return book

    def list_books(self) -> List[Book]:
        with self.uow_factory() as uow:
            return uow.books.list_all()

    def list_available_books(self) -> List[Book]:
        with self.uow_factory() as uow:
            return uow.books.list_by_status(BookStatus.AVAILABLE)

    def list_by_category(self, category) -> List[Book]:
        try:
            category = BookCategory(category)
        except ValueError as e:
            raise ValidationFailure(f"Invalid category: {category}") from e
        with self.uow_factory() as uow:
            return uow.books.list_by_category(category)

    def count_books(self) -> int:
        with self.uow_factory() as uow:
            return uow.books.count()

    def search(
        self,
        keyword: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        sort_by: str = "title",
        descending: bool = False,
    ) -> List[Book]:
        if sort_by not in SORT_FIELDS:
            raise ValidationFailure(
                f"sort must be one of: {', '.join(SORT_FIELDS)}"
            )
        if min_price is not None and max_price is not None and min_price > max_price:
            raise ValidationFailure("min_price cannot be greater than max_price")

        with self.uow_factory() as uow:
            return uow.books.search(
                keyword=keyword,
                min_price=min_price,
                max_price=max_price,
                sort_by=sort_by,
                descending=descending,
            )
