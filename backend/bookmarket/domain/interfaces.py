"""
Abstract interfaces for repositories following Interface Segregation Principle.

These interfaces are the persistence port of the marketplace core. Writers
never commit: the unit of work that owns the session decides when a whole
operation becomes durable.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List, Optional

from .entities import Book, BookCategory, BookStatus, Transaction, TransactionType, User


class IBookReader(ABC):
    """Interface for book read operations."""

    @abstractmethod
    def get_by_id(self, book_id: int) -> Optional[Book]:
        """Get book by ID."""
        pass

    @abstractmethod
    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        """Get book by ISBN."""
        pass

    @abstractmethod
    def get_for_update(self, book_id: int) -> Optional[Book]:
        """Get book by ID, locking the row for the current transaction."""
        pass

    @abstractmethod
    def get_by_isbn_for_update(self, isbn: str) -> Optional[Book]:
        """Get book by ISBN, locking the row for the current transaction."""
        pass

    @abstractmethod
    def list_all(self) -> List[Book]:
        pass

    @abstractmethod
    def list_by_status(self, status: BookStatus) -> List[Book]:
        pass

    @abstractmethod
    def list_by_category(self, category: BookCategory) -> List[Book]:
        pass

    @abstractmethod
    def search(
        self,
        keyword: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        sort_by: str = "title",
        descending: bool = False,
    ) -> List[Book]:
        """Keyword/price-range search with ordering."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of distinct book records."""
        pass


class IBookWriter(ABC):
    """Interface for book write operations."""

    @abstractmethod
    def add(self, book: Book) -> Book:
        """Stage a new book and return it with its identity assigned."""
        pass

    @abstractmethod
    def save(self, book: Book) -> Book:
        """Stage the mutable state of an existing book."""
        pass

    @abstractmethod
    def delete(self, book_id: int) -> None:
        pass


class IBookRepository(IBookReader, IBookWriter):
    """Complete book repository interface."""

    pass


class IUserReader(ABC):
    """Interface for user read operations."""

    @abstractmethod
    def get_by_id(self, user_id: int) -> Optional[User]:
        pass

    @abstractmethod
    def get_for_update(self, user_id: int) -> Optional[User]:
        pass

    @abstractmethod
    def get_by_email_or_username(self, email: str, username: str) -> Optional[User]:
        """First user whose email or username matches."""
        pass

    @abstractmethod
    def find_by_keyword(self, keyword: str) -> Optional[User]:
        """User whose username or email equals the keyword."""
        pass

    @abstractmethod
    def list_all(self) -> List[User]:
        pass


class IUserWriter(ABC):
    """Interface for user write operations."""

    @abstractmethod
    def add(self, user: User) -> User:
        pass

    @abstractmethod
    def save(self, user: User) -> User:
        pass

    @abstractmethod
    def delete(self, user_id: int) -> None:
        pass


class IUserRepository(IUserReader, IUserWriter):
    """Complete user repository interface combining read/write operations."""

    pass


class ITransactionRepository(ABC):
    """Append-only ledger storage."""

    @abstractmethod
    def append(self, transaction: Transaction) -> Transaction:
        pass

    @abstractmethod
    def list_by_user(
        self, user_id: int, type: Optional[TransactionType] = None
    ) -> List[Transaction]:
        """User's transactions, newest first."""
        pass

    @abstractmethod
    def count_by_type(self, user_id: int, book_id: int) -> Dict[TransactionType, int]:
        """Number of the user's BUY and SELL rows for one book."""
        pass

    @abstractmethod
    def books_for_user(self, user_id: int, type: TransactionType) -> List[Book]:
        """Distinct books still in inventory that appear in the user's ledger."""
        pass
