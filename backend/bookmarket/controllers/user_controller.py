"""
User controller: accounts, funds and per-user trade history.
"""

import logging

from flask import Blueprint, request

from bookmarket.controllers.serializers import (
    book_to_dict,
    transaction_to_dict,
    user_to_dict,
)
from bookmarket.core.api_utils import api_response, get_json_body
from bookmarket.core.exceptions import ValidationFailure
from bookmarket.core.limiter_config import limiter
from bookmarket.core.validation import (
    validate_amount,
    validate_transaction_type,
    validate_user,
)
from bookmarket.domain.entities import User
from bookmarket.services.user_service import UserService

logger = logging.getLogger(__name__)

user_bp = Blueprint("users", __name__, url_prefix="/users")


def _users() -> UserService:
    return UserService()


@user_bp.route("/", methods=["GET"])
@limiter.limit("100 per minute")
def list_users():
    users = _users().list_users()
    return api_response(True, "Users retrieved", [user_to_dict(u) for u in users])


@user_bp.route("/<int:user_id>", methods=["GET"])
@limiter.limit("100 per minute")
def get_user(user_id):
    return api_response(True, "User retrieved", user_to_dict(_users().get_user(user_id)))


@user_bp.route("/search", methods=["GET"])
@limiter.limit("60 per minute")
def search_user():
    keyword = (request.args.get("keyword") or "").strip()
    if not keyword:
        raise ValidationFailure("keyword: is required")
    return api_response(True, "User retrieved", user_to_dict(_users().search_user(keyword)))


@user_bp.route("/", methods=["POST"])
@limiter.limit("10 per minute")
def add_user():
    fields = validate_user(get_json_body())
    password = fields.pop("password")
    user = _users().add_user(User(**fields), password)
    return api_response(True, "User created", user_to_dict(user), 201)


@user_bp.route("/<int:user_id>", methods=["PUT"])
@limiter.limit("30 per minute")
def update_user(user_id):
    changes = validate_user(get_json_body(), partial=True)
    password = changes.pop("password", None)
    user = _users().update_user(user_id, changes, password=password)
    return api_response(True, "User updated", user_to_dict(user))


@user_bp.route("/<int:user_id>", methods=["DELETE"])
@limiter.limit("10 per minute")
def delete_user(user_id):
    _users().delete_user(user_id)
    return api_response(True, "User deleted")


@user_bp.route("/<int:user_id>/purchased-books", methods=["GET"])
@limiter.limit("60 per minute")
def purchased_books(user_id):
    books = _users().purchased_books(user_id)
    return api_response(True, "Purchased books retrieved", [book_to_dict(b) for b in books])


@user_bp.route("/<int:user_id>/sold-books", methods=["GET"])
@limiter.limit("60 per minute")
def sold_books(user_id):
    books = _users().sold_books(user_id)
    return api_response(True, "Sold books retrieved", [book_to_dict(b) for b in books])


@user_bp.route("/<int:user_id>/transactions", methods=["GET"])
@limiter.limit("60 per minute")
def transactions(user_id):
    txn_type = validate_transaction_type(request.args.get("type"))
    history = _users().transactions(user_id, txn_type)
    return api_response(
        True, "Transactions retrieved", [transaction_to_dict(t) for t in history]
    )


@user_bp.route("/<int:user_id>/funds", methods=["POST"])
@limiter.limit("30 per minute")
def add_funds(user_id):
    amount = validate_amount(get_json_body().get("amount"))
    user = _users().add_funds(user_id, amount)
    return api_response(True, "Funds added", user_to_dict(user))
