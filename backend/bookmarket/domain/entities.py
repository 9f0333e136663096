"""
Domain entities - Pure business logic, no framework dependencies.

These dataclasses are what services and controllers work with; the
SQLAlchemy models in ``bookmarket.db.base`` never leave the repositories.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Normalize a number to a 2-decimal currency amount."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class BookCategory(str, Enum):
    FICTION = "FICTION"
    NON_FICTION = "NON_FICTION"
    SCIENCE = "SCIENCE"
    HISTORY = "HISTORY"
    MYSTERY = "MYSTERY"
    ROMANCE = "ROMANCE"
    TECHNOLOGY = "TECHNOLOGY"
    COOKING = "COOKING"
    TRAVEL = "TRAVEL"
    BIOGRAPHY = "BIOGRAPHY"
    FANTASY = "FANTASY"
    HORROR = "HORROR"
    BUSINESS = "BUSINESS"
    POETRY = "POETRY"
    PHILOSOPHY = "PHILOSOPHY"
    RELIGION = "RELIGION"
    ART = "ART"
    EDUCATION = "EDUCATION"
    KIDS = "KIDS"


class BookCondition(str, Enum):
    NEW = "NEW"
    LIKE_NEW = "LIKE_NEW"
    GOOD = "GOOD"
    ACCEPTABLE = "ACCEPTABLE"
    POOR = "POOR"
    VERY_POOR = "VERY_POOR"
    EXCELLENT = "EXCELLENT"
    FAIR = "FAIR"
    UNUSED = "UNUSED"


class BookStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    PENDING = "PENDING"
    SOLD = "SOLD"
    RESERVED = "RESERVED"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    DISCONTINUED = "DISCONTINUED"
    DAMAGED = "DAMAGED"


class TransactionType(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


@dataclass
class Book:
    """A book record in the marketplace pool.

    ``original_price`` is fixed at creation; ``current_price`` is what the
    next buyer pays and shrinks with every completed transaction.
    """

    isbn: str = ""
    title: str = ""
    author: str = ""
    original_price: Decimal = Decimal("0.00")
    current_price: Optional[Decimal] = None
    category: BookCategory = BookCategory.EDUCATION
    condition: Optional[BookCondition] = None
    status: BookStatus = BookStatus.AVAILABLE
    quantity: int = 1
    edition: Optional[int] = None
    publication_year: Optional[int] = None
    language: Optional[str] = None
    publisher: Optional[str] = None
    description: Optional[str] = None
    condition_description: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate business rules."""
        self.isbn = (self.isbn or "").strip()
        if not self.isbn:
            raise ValueError("ISBN is required")
        if not self.title or not self.title.strip():
            raise ValueError("Title is required")
        if not self.author or not self.author.strip():
            raise ValueError("Author is required")
        self.original_price = to_money(self.original_price)
        if self.current_price is None:
            self.current_price = self.original_price
        self.current_price = to_money(self.current_price)
        if self.current_price < 0:
            raise ValueError("Current price cannot be negative")
        if self.quantity < 0:
            raise ValueError("Quantity cannot be negative")
        self.category = BookCategory(self.category)
        self.status = BookStatus(self.status)
        if self.condition is not None:
            self.condition = BookCondition(self.condition)

    @property
    def is_available(self) -> bool:
        return self.status == BookStatus.AVAILABLE and self.quantity >= 1

    def matches_identity(self, other: "Book") -> bool:
        """Same ISBN listing: title and author agree ignoring case and padding."""
        return (
            self.title.strip().lower() == other.title.strip().lower()
            and self.author.strip().lower() == other.author.strip().lower()
        )


@dataclass
class User:
    """Domain entity representing a marketplace user."""

    username: str = ""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    phone_number: Optional[str] = None
    funds: Decimal = Decimal("0.00")
    password_hash: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate domain rules."""
        if not self.username:
            raise ValueError("Username is required")
        if not self.email or "@" not in self.email:
            raise ValueError("Valid email is required")
        self.funds = to_money(self.funds)
        if self.funds < 0:
            raise ValueError("Funds cannot be negative")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class Transaction:
    """Immutable ledger entry for one completed buy or sell."""

    user_id: Optional[int]
    book_id: Optional[int]
    type: TransactionType
    amount: Decimal
    date: datetime
    status: TransactionStatus = TransactionStatus.COMPLETED
    book_isbn: Optional[str] = None
    book_title: Optional[str] = None
    notes: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self):
        self.type = TransactionType(self.type)
        self.status = TransactionStatus(self.status)
        self.amount = to_money(self.amount)
        if self.amount < 0:
            raise ValueError("Transaction amount cannot be negative")
        if self.notes is not None and len(self.notes) > 255:
            raise ValueError("Transaction notes must not exceed 255 characters")
