import logging
from decimal import Decimal
from typing import Callable

from bookmarket.core.exceptions import UserNotFoundError, ValidationFailure
from bookmarket.db.unit_of_work import UnitOfWork
from bookmarket.domain.entities import User, to_money

logger = logging.getLogger(__name__)


class FundsManager:
    """Keeps every user balance non-negative.

    ``debit``/``credit`` mutate a loaded user inside the caller's unit of
    work; ``add_funds`` is a standalone top-up with its own transaction.
    """

    def __init__(self, uow_factory: Callable[[], UnitOfWork] = UnitOfWork) -> None:
        self.uow_factory = uow_factory

    @staticmethod
    def debit(user: User, amount: Decimal) -> None:
        amount = to_money(amount)
        if user.funds < amount:
            raise ValidationFailure("Insufficient funds to purchase the book.")
        user.funds = user.funds - amount

    @staticmethod
    def credit(user: User, amount: Decimal) -> None:
        user.funds = user.funds + to_money(amount)

    def add_funds(self, user_id: int, amount: Decimal) -> User:
        amount = to_money(amount)
        if amount <= 0:
            raise ValidationFailure("Amount must be greater than zero.")

        with self.uow_factory() as uow:
            user = uow.users.get_for_update(user_id)
            if user is None:
                raise UserNotFoundError(f"User not found for the given id: {user_id}")
            self.credit(user, amount)
            user = uow.users.save(user)
            uow.commit()

        logger.info(
            "Funds added",
            extra={
                "context": {
                    "user_id": user_id,
                    "amount": str(amount),
                    "balance": str(user.funds),
                }
            },
        )
        return user
