"""
Book controller: catalogue queries, inventory commands and trades.

Payloads are validated here; services receive typed domain values and raise
MarketplaceError subclasses, which the app-wide error handler renders.
"""

import logging

from flask import Blueprint, request

from bookmarket.controllers.serializers import book_to_dict, trade_to_dict
from bookmarket.core.api_utils import api_response, get_json_body
from bookmarket.core.limiter_config import limiter
from bookmarket.core.validation import (
    BaseValidator,
    ValidationResult,
    validate_book,
    validate_category,
    validate_positive_id,
)
from bookmarket.domain.entities import Book
from bookmarket.services.inventory_service import InventoryManager
from bookmarket.services.marketplace_service import MarketplaceService

logger = logging.getLogger(__name__)

book_bp = Blueprint("books", __name__, url_prefix="/books")


def _inventory() -> InventoryManager:
    return InventoryManager()


def _marketplace() -> MarketplaceService:
    return MarketplaceService()


@book_bp.route("/", methods=["GET"])
@limiter.limit("100 per minute")
def list_books():
    books = _inventory().list_books()
    return api_response(True, "Books retrieved", [book_to_dict(b) for b in books])


@book_bp.route("/available", methods=["GET"])
@limiter.limit("100 per minute")
def list_available_books():
    books = _inventory().list_available_books()
    return api_response(
        True, "Available books retrieved", [book_to_dict(b) for b in books]
    )


@book_bp.route("/<int:book_id>", methods=["GET"])
@limiter.limit("100 per minute")
def get_book(book_id):
    book = _inventory().get_book(book_id)
    return api_response(True, "Book retrieved", book_to_dict(book))


@book_bp.route("/isbn/<isbn>", methods=["GET"])
@limiter.limit("100 per minute")
def get_book_by_isbn(isbn):
    book = _inventory().get_book_by_isbn(isbn)
    return api_response(True, "Book retrieved", book_to_dict(book))


@book_bp.route("/category/<category>", methods=["GET"])
@limiter.limit("100 per minute")
def list_by_category(category):
    books = _inventory().list_by_category(validate_category(category))
    return api_response(True, "Books retrieved", [book_to_dict(b) for b in books])


@book_bp.route("/search", methods=["GET"])
@limiter.limit("60 per minute")
def search_books():
    """Search by keyword and price range.

    Query params: keyword, min_price, max_price, sort (title|author|category),
    order (asc|desc).
    """
    result = ValidationResult()
    min_price = BaseValidator.validate_decimal(
        request.args.get("min_price"), "min_price", result
    )
    max_price = BaseValidator.validate_decimal(
        request.args.get("max_price"), "max_price", result
    )
    order = request.args.get("order", "asc").lower()
    if order not in ("asc", "desc"):
        result.add_error("must be asc or desc", "order")
    result.raise_if_invalid()

    books = _inventory().search(
        keyword=request.args.get("keyword"),
        min_price=min_price,
        max_price=max_price,
        sort_by=request.args.get("sort", "title"),
        descending=order == "desc",
    )
    return api_response(True, "Books retrieved", [book_to_dict(b) for b in books])


@book_bp.route("/", methods=["POST"])
@limiter.limit("30 per minute")
def add_book():
    fields = validate_book(get_json_body())
    book = _inventory().add_book(Book(**fields))
    return api_response(True, "Book added", book_to_dict(book), 201)


@book_bp.route("/<int:book_id>", methods=["PUT"])
@limiter.limit("30 per minute")
def update_book(book_id):
    changes = validate_book(get_json_body(), partial=True)
    book = _inventory().update_book(book_id, changes)
    return api_response(True, "Book updated", book_to_dict(book))


@book_bp.route("/<int:book_id>", methods=["DELETE"])
@limiter.limit("30 per minute")
def delete_book(book_id):
    remaining = _inventory().remove_book(book_id)
    if remaining is None:
        return api_response(True, "Book deleted")
    return api_response(True, "One copy removed", book_to_dict(remaining))


@book_bp.route("/<int:book_id>/buy", methods=["POST"])
@limiter.limit("30 per minute")
def buy_book(book_id):
    user_id = validate_positive_id(get_json_body().get("user_id"), "user_id")
    result = _marketplace().buy_book(user_id, book_id)
    return api_response(True, "Book purchased successfully.", trade_to_dict(result))


@book_bp.route("/<int:book_id>/sell", methods=["POST"])
@limiter.limit("30 per minute")
def sell_book(book_id):
    user_id = validate_positive_id(get_json_body().get("user_id"), "user_id")
    result = _marketplace().sell_book(user_id, book_id)
    return api_response(True, "Book sold successfully.", trade_to_dict(result))


@book_bp.route("/isbn/<isbn>/sell", methods=["POST"])
@limiter.limit("30 per minute")
def sell_book_by_isbn(isbn):
    body = get_json_body()
    user_id = validate_positive_id(body.get("user_id"), "user_id")

    new_book = None
    if body.get("book") is not None:
        payload = body["book"]
        if isinstance(payload, dict):
            payload = {**payload, "isbn": isbn}
        new_book = Book(**validate_book(payload))

    result = _marketplace().sell_book_by_isbn(user_id, isbn, new_book)
    return api_response(True, "Book sold successfully.", trade_to_dict(result))
