import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from werkzeug.security import generate_password_hash

from bookmarket.core.exceptions import (
    UserAlreadyExistsError,
    UserNotFoundError,
    ValidationFailure,
)
from bookmarket.db.unit_of_work import UnitOfWork
from bookmarket.domain.entities import Book, Transaction, TransactionType, User
from bookmarket.services.funds_service import FundsManager
from bookmarket.services.ledger_service import LedgerRecorder

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "username",
    "email",
    "first_name",
    "last_name",
    "phone_number",
    "funds",
}


class UserService:
    """Account management plus per-user trade history."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork] = UnitOfWork,
        funds: Optional[FundsManager] = None,
    ) -> None:
        self.uow_factory = uow_factory
        self.funds = funds or FundsManager(uow_factory)

    def list_users(self) -> List[User]:
        with self.uow_factory() as uow:
            return uow.users.list_all()

    def get_user(self, user_id: int) -> User:
        with self.uow_factory() as uow:
            user = uow.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(f"User not found for the given ID: {user_id}")
        return user

    def search_user(self, keyword: str) -> User:
        """Find a user by exact username or email."""
        with self.uow_factory() as uow:
            user = uow.users.find_by_keyword((keyword or "").strip())
        if user is None:
            raise UserNotFoundError(f"User not found for the given keyword: {keyword}")
        return user

    def add_user(self, user: User, password: str) -> User:
        with self.uow_factory() as uow:
            if uow.users.get_by_email_or_username(user.email, user.username):
                raise UserAlreadyExistsError(
                    "User with the same email or username already exists."
                )
            user = replace(
                user,
                id=None,
                password_hash=generate_password_hash(password),
            )
            created = uow.users.add(user)
            uow.commit()

        logger.info(
            "User created",
            extra={"context": {"user_id": created.id, "username": created.username}},
        )
        return created

    def update_user(
        self, user_id: int, changes: Dict[str, Any], password: Optional[str] = None
    ) -> User:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationFailure(
                [f"{field}: field cannot be updated" for field in sorted(unknown)]
            )

        with self.uow_factory() as uow:
            existing = uow.users.get_for_update(user_id)
            if existing is None:
                raise UserNotFoundError(f"User not found for the given ID: {user_id}")

            email = changes.get("email", existing.email)
            username = changes.get("username", existing.username)
            clash = uow.users.get_by_email_or_username(email, username)
            if clash is not None and clash.id != user_id:
                raise UserAlreadyExistsError(
                    "User with the same email or username already exists."
                )

            try:
                updated = replace(existing, **changes)
            except ValueError as e:
                raise ValidationFailure(str(e)) from e
            if password is not None:
                updated.password_hash = generate_password_hash(password)

            saved = uow.users.save(updated)
            uow.commit()

        logger.info(
            "User updated",
            extra={"context": {"user_id": user_id, "fields": sorted(changes)}},
        )
        return saved

    def delete_user(self, user_id: int) -> None:
        with self.uow_factory() as uow:
            if uow.users.get_for_update(user_id) is None:
                raise UserNotFoundError(f"User not found for the given ID: {user_id}")
            uow.users.delete(user_id)
            uow.commit()
        logger.info("User deleted", extra={"context": {"user_id": user_id}})

    def purchased_books(self, user_id: int) -> List[Book]:
        with self.uow_factory() as uow:
            self._require(uow, user_id)
            return LedgerRecorder(uow.transactions).purchased_books(user_id)

    def sold_books(self, user_id: int) -> List[Book]:
        with self.uow_factory() as uow:
            self._require(uow, user_id)
            return LedgerRecorder(uow.transactions).sold_books(user_id)

    def transactions(
        self, user_id: int, type: Optional[TransactionType] = None
    ) -> List[Transaction]:
        with self.uow_factory() as uow:
            self._require(uow, user_id)
            return LedgerRecorder(uow.transactions).history(user_id, type)

    def add_funds(self, user_id: int, amount: Decimal) -> User:
        return self.funds.add_funds(user_id, amount)

    @staticmethod
    def _require(uow: UnitOfWork, user_id: int) -> None:
        if uow.users.get_by_id(user_id) is None:
            raise UserNotFoundError(f"User not found for the given ID: {user_id}")
