"""
Domain package - Pure business logic layer.

This package contains:
- entities.py: Book, User and Transaction entities plus their enums
- interfaces.py: Repository contracts implemented in ``bookmarket.repositories``
"""

from .entities import (
    Book,
    BookCategory,
    BookCondition,
    BookStatus,
    Transaction,
    TransactionStatus,
    TransactionType,
    User,
)
from .interfaces import (
    IBookReader,
    IBookRepository,
    IBookWriter,
    ITransactionRepository,
    IUserReader,
    IUserRepository,
    IUserWriter,
)

__all__ = [
    "Book",
    "BookCategory",
    "BookCondition",
    "BookStatus",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "User",
    "IBookReader",
    "IBookRepository",
    "IBookWriter",
    "ITransactionRepository",
    "IUserReader",
    "IUserRepository",
    "IUserWriter",
]
