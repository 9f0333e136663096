"""
Boundary validation for marketplace payloads.

Controllers and CLI commands run raw JSON/arguments through these validators
before anything reaches the services, so enum values, prices and contact
data are already typed when an operation starts.
"""

import logging
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from bookmarket.core.exceptions import ValidationFailure
from bookmarket.domain.entities import (
    BookCategory,
    BookCondition,
    BookStatus,
    TransactionType,
)

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_RE = re.compile(r"^\d{10}$")
MIN_PASSWORD_LENGTH = 6


class ValidationResult:
    """Container for validation results."""

    def __init__(self):
        self.errors: List[str] = []
        self.is_valid: bool = True
        self.cleaned_data: Dict[str, Any] = {}

    def add_error(self, message: str, field: Optional[str] = None):
        """Add validation error."""
        error_msg = f"{field}: {message}" if field else message
        self.errors.append(error_msg)
        self.is_valid = False
        logger.warning(f"Validation error: {error_msg}")

    def raise_if_invalid(self) -> Dict[str, Any]:
        """Return the cleaned data, or raise ValidationFailure with every error."""
        if not self.is_valid:
            raise ValidationFailure(self.errors)
        return self.cleaned_data


class BaseValidator:
    """Base validator with common validation methods."""

    def validate(
        self, data: Dict[str, Any]
    ) -> ValidationResult:  # pragma: no cover - interface definition
        """Validate data for a specific entity type."""
        raise NotImplementedError("Subclasses must implement validate")

    @staticmethod
    def validate_required_field(
        value: Any, field_name: str, result: ValidationResult
    ) -> bool:
        """Validate that a required field is present and not empty."""
        if (
            value is None
            or value == ""
            or (isinstance(value, str) and value.strip() == "")
        ):
            result.add_error("is required", field_name)
            return False
        return True

    @staticmethod
    def validate_decimal(
        value: Any,
        field_name: str,
        result: ValidationResult,
        min_value: Optional[Decimal] = None,
        max_value: Optional[Decimal] = None,
    ) -> Optional[Decimal]:
        """Validate and convert decimal field."""
        if value is None or value == "":
            return None
        if isinstance(value, bool):
            result.add_error("must be a number", field_name)
            return None

        if isinstance(value, Decimal):
            decimal_value = value
        else:
            try:
                if isinstance(value, str):
                    value = value.strip()
                decimal_value = Decimal(str(value))
            except (InvalidOperation, TypeError, ValueError):
                result.add_error("must be a number", field_name)
                return None

        if not decimal_value.is_finite():
            result.add_error("must be a number", field_name)
            return None

        if min_value is not None and decimal_value < min_value:
            result.add_error(f"must be at least {min_value}", field_name)
            return None

        if max_value is not None and decimal_value > max_value:
            result.add_error(f"must be at most {max_value}", field_name)
            return None

        return decimal_value

    @staticmethod
    def validate_integer(
        value: Any,
        field_name: str,
        result: ValidationResult,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None,
    ) -> Optional[int]:
        """Validate and convert integer field."""
        if value is None or value == "":
            return None

        if isinstance(value, bool):
            result.add_error("must be an integer", field_name)
            return None
        try:
            int_value = int(value)
        except (ValueError, TypeError):
            result.add_error("must be an integer", field_name)
            return None

        if min_value is not None and int_value < min_value:
            result.add_error(f"must be at least {min_value}", field_name)
            return None

        if max_value is not None and int_value > max_value:
            result.add_error(f"must be at most {max_value}", field_name)
            return None

        return int_value

    @staticmethod
    def validate_string(
        value: Any,
        field_name: str,
        result: ValidationResult,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
    ) -> Optional[str]:
        """Validate string field."""
        if value is None:
            return None

        if not isinstance(value, str):
            value = str(value)

        value = value.strip()

        if min_length is not None and len(value) < min_length:
            result.add_error(f"must have at least {min_length} characters", field_name)
            return None

        if max_length is not None and len(value) > max_length:
            result.add_error(f"must have at most {max_length} characters", field_name)
            return None

        return value if value else None

    @staticmethod
    def validate_enum(
        value: Any, enum_cls: Type[Enum], field_name: str, result: ValidationResult
    ) -> Optional[Enum]:
        """Map a case-insensitive name onto a closed enum."""
        if value is None or value == "":
            return None
        try:
            return enum_cls(str(value).strip().upper())
        except ValueError:
            allowed = ", ".join(member.value for member in enum_cls)
            result.add_error(f"must be one of: {allowed}", field_name)
            return None


class BookValidator(BaseValidator):
    """Validator for book payloads.

    With ``partial=True`` (updates) only the fields present are checked and
    nothing is required.
    """

    REQUIRED = ("isbn", "title", "author", "original_price", "category")

    def __init__(self, partial: bool = False):
        self.partial = partial

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult()
        if not isinstance(data, dict):
            result.add_error("Book payload must be a JSON object")
            return result

        if not self.partial:
            for field in self.REQUIRED:
                self.validate_required_field(data.get(field), field, result)

        for field, max_length in (
            ("isbn", 20),
            ("title", 255),
            ("author", 255),
            ("language", 50),
            ("publisher", 255),
            ("condition_description", 255),
        ):
            if field in data:
                value = self.validate_string(
                    data.get(field), field, result, max_length=max_length
                )
                if value is not None:
                    result.cleaned_data[field] = value

        if "description" in data:
            description = self.validate_string(data.get("description"), "description", result)
            if description is not None:
                result.cleaned_data["description"] = description

        for field in ("original_price", "current_price"):
            if field in data:
                price = self.validate_decimal(
                    data.get(field), field, result, min_value=Decimal("0")
                )
                if price is not None:
                    result.cleaned_data[field] = price

        if "edition" in data:
            edition = self.validate_integer(data.get("edition"), "edition", result, min_value=1)
            if edition is not None:
                result.cleaned_data["edition"] = edition

        if "publication_year" in data:
            year = self.validate_integer(
                data.get("publication_year"), "publication_year", result, min_value=0
            )
            if year is not None:
                result.cleaned_data["publication_year"] = year

        for field, enum_cls in (
            ("category", BookCategory),
            ("condition", BookCondition),
            ("status", BookStatus),
        ):
            if field in data:
                member = self.validate_enum(data.get(field), enum_cls, field, result)
                if member is not None:
                    result.cleaned_data[field] = member

        return result


class UserValidator(BaseValidator):
    """Validator for user payloads; ``partial=True`` for updates."""

    REQUIRED = ("username", "email", "first_name", "last_name", "password")

    def __init__(self, partial: bool = False):
        self.partial = partial

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult()
        if not isinstance(data, dict):
            result.add_error("User payload must be a JSON object")
            return result

        if not self.partial:
            for field in self.REQUIRED:
                self.validate_required_field(data.get(field), field, result)

        for field in ("username", "first_name", "last_name"):
            if field in data:
                value = self.validate_string(
                    data.get(field), field, result, min_length=1, max_length=100
                )
                if value is not None:
                    result.cleaned_data[field] = value

        if "email" in data:
            email = self.validate_string(data.get("email"), "email", result, max_length=255)
            if email is not None:
                if EMAIL_RE.match(email):
                    result.cleaned_data["email"] = email.lower()
                else:
                    result.add_error("must be a valid email address", "email")

        if data.get("phone_number"):
            phone = self.validate_string(data.get("phone_number"), "phone_number", result)
            if phone is not None:
                if PHONE_RE.match(phone):
                    result.cleaned_data["phone_number"] = phone
                else:
                    result.add_error("must have exactly 10 digits", "phone_number")

        if data.get("password") is not None:
            password = data.get("password")
            if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
                result.add_error(
                    f"must have at least {MIN_PASSWORD_LENGTH} characters", "password"
                )
            else:
                result.cleaned_data["password"] = password

        if "funds" in data:
            funds = self.validate_decimal(
                data.get("funds"), "funds", result, min_value=Decimal("0")
            )
            if funds is not None:
                result.cleaned_data["funds"] = funds

        return result


def validate_positive_id(value: Any, field_name: str) -> int:
    """Coerce a request id, raising ValidationFailure when it is not >= 1."""
    result = ValidationResult()
    if BaseValidator.validate_required_field(value, field_name, result):
        parsed = BaseValidator.validate_integer(value, field_name, result, min_value=1)
        if parsed is not None:
            return parsed
    raise ValidationFailure(result.errors)


def validate_amount(value: Any, field_name: str = "amount") -> Decimal:
    """A strictly positive money amount."""
    result = ValidationResult()
    if BaseValidator.validate_required_field(value, field_name, result):
        amount = BaseValidator.validate_decimal(
            value, field_name, result, min_value=Decimal("0.01")
        )
        if amount is not None:
            return amount
    raise ValidationFailure(result.errors)


def validate_category(value: Any) -> BookCategory:
    result = ValidationResult()
    category = BaseValidator.validate_enum(value, BookCategory, "category", result)
    if category is None:
        if result.is_valid:
            result.add_error("is required", "category")
        raise ValidationFailure(result.errors)
    return category


def validate_transaction_type(value: Any) -> Optional[TransactionType]:
    result = ValidationResult()
    txn_type = BaseValidator.validate_enum(value, TransactionType, "type", result)
    result.raise_if_invalid()
    return txn_type


def validate_book(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """Validate a book payload and return its cleaned fields."""
    return BookValidator(partial=partial).validate(data).raise_if_invalid()


def validate_user(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """Validate a user payload and return its cleaned fields."""
    return UserValidator(partial=partial).validate(data).raise_if_invalid()
