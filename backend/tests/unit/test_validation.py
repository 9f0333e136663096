"""
Unit tests for boundary payload validation.
"""

from decimal import Decimal

import pytest

from bookmarket.core.exceptions import ValidationFailure
from bookmarket.core.validation import (
    BookValidator,
    UserValidator,
    validate_amount,
    validate_book,
    validate_category,
    validate_positive_id,
    validate_transaction_type,
    validate_user,
)
from bookmarket.domain.entities import BookCategory, BookCondition, BookStatus, TransactionType

VALID_BOOK = {
    "isbn": "978-0134685991",
    "title": "Effective Java",
    "author": "Joshua Bloch",
    "original_price": "45.50",
    "category": "technology",
    "condition": "NEW",
}

VALID_USER = {
    "username": "ada",
    "email": "Ada@Example.com",
    "first_name": "Ada",
    "last_name": "Lovelace",
    "password": "secret123",
    "phone_number": "5551234567",
}


class TestBookValidator:
    def test_valid_payload_is_typed(self):
        fields = validate_book(VALID_BOOK)

        assert fields["original_price"] == Decimal("45.50")
        assert fields["category"] is BookCategory.TECHNOLOGY
        assert fields["condition"] is BookCondition.NEW

    def test_missing_required_fields(self):
        result = BookValidator().validate({"title": "Only a title"})

        assert not result.is_valid
        assert "isbn: is required" in result.errors
        assert "original_price: is required" in result.errors

    def test_invalid_category_rejected_before_services(self):
        with pytest.raises(ValidationFailure) as exc:
            validate_book({**VALID_BOOK, "category": "COMICS"})
        assert exc.value.errors[0].startswith("category: must be one of")

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationFailure):
            validate_book({**VALID_BOOK, "original_price": "-1"})

    def test_non_numeric_price_rejected(self):
        with pytest.raises(ValidationFailure):
            validate_book({**VALID_BOOK, "original_price": "cheap"})

    def test_partial_update_only_checks_given_fields(self):
        fields = validate_book({"status": "available"}, partial=True)
        assert fields == {"status": BookStatus.AVAILABLE}

    def test_non_object_payload(self):
        assert not BookValidator().validate(["not", "a", "dict"]).is_valid


class TestUserValidator:
    def test_valid_payload(self):
        fields = validate_user(VALID_USER)
        assert fields["email"] == "ada@example.com"
        assert fields["password"] == "secret123"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("email", "nope"),
            ("phone_number", "12345"),
            ("password", "123"),
            ("username", "   "),
        ],
    )
    def test_invalid_fields(self, field, value):
        result = UserValidator().validate({**VALID_USER, field: value})
        assert not result.is_valid

    def test_negative_funds(self):
        with pytest.raises(ValidationFailure):
            validate_user({"funds": "-5"}, partial=True)


class TestScalars:
    def test_positive_id(self):
        assert validate_positive_id("7", "user_id") == 7
        with pytest.raises(ValidationFailure):
            validate_positive_id(0, "user_id")
        with pytest.raises(ValidationFailure):
            validate_positive_id(None, "user_id")

    def test_amount(self):
        assert validate_amount("10.25") == Decimal("10.25")
        with pytest.raises(ValidationFailure):
            validate_amount("0")

    def test_category(self):
        assert validate_category("history") is BookCategory.HISTORY
        with pytest.raises(ValidationFailure):
            validate_category("unknown")

    def test_transaction_type_optional(self):
        assert validate_transaction_type(None) is None
        assert validate_transaction_type("sell") is TransactionType.SELL
        with pytest.raises(ValidationFailure):
            validate_transaction_type("gift")
