"""JSON shapes for domain entities returned by the API."""

from decimal import Decimal
from typing import Any, Dict, Optional

from bookmarket.domain.entities import Book, Transaction, User
from bookmarket.services.marketplace_service import TradeResult


def _money(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else f"{value:.2f}"


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def book_to_dict(book: Book) -> Dict[str, Any]:
    return {
        "id": book.id,
        "isbn": book.isbn,
        "title": book.title,
        "author": book.author,
        "edition": book.edition,
        "publication_year": book.publication_year,
        "language": book.language,
        "publisher": book.publisher,
        "description": book.description,
        "category": book.category.value,
        "condition": book.condition.value if book.condition else None,
        "condition_description": book.condition_description,
        "status": book.status.value,
        "quantity": book.quantity,
        "original_price": _money(book.original_price),
        "current_price": _money(book.current_price),
        "created_at": _iso(book.created_at),
        "updated_at": _iso(book.updated_at),
    }


def user_to_dict(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "phone_number": user.phone_number,
        "funds": _money(user.funds),
        "created_at": _iso(user.created_at),
        "updated_at": _iso(user.updated_at),
    }


def transaction_to_dict(txn: Transaction) -> Dict[str, Any]:
    return {
        "id": txn.id,
        "user_id": txn.user_id,
        "book_id": txn.book_id,
        "book_isbn": txn.book_isbn,
        "book_title": txn.book_title,
        "type": txn.type.value,
        "amount": _money(txn.amount),
        "date": _iso(txn.date),
        "status": txn.status.value,
        "notes": txn.notes,
    }


def trade_to_dict(result: TradeResult) -> Dict[str, Any]:
    return {
        "user": user_to_dict(result.user),
        "book": book_to_dict(result.book),
        "transaction": transaction_to_dict(result.transaction),
    }
