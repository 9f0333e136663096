"""
Unit of work: one SQLAlchemy session and transaction per marketplace call.

Usage:
    with UnitOfWork() as uow:
        book = uow.books.get_for_update(book_id)
        ...
        uow.commit()

Leaving the block without ``commit()`` (or through an exception) rolls
everything back.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from bookmarket.core.exceptions import ConcurrentUpdateError, PersistenceError
from bookmarket.db.session import SessionLocal
from bookmarket.repositories.book_repo import BookRepository
from bookmarket.repositories.transaction_repo import TransactionRepository
from bookmarket.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


class UnitOfWork:
    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self.session_factory = session_factory or SessionLocal
        self.session: Optional[Session] = None

    def __enter__(self) -> "UnitOfWork":
        if self.session is not None:
            raise RuntimeError("UnitOfWork is not reentrant")
        self.session = self.session_factory()
        self.books = BookRepository(self.session)
        self.users = UserRepository(self.session)
        self.transactions = TransactionRepository(self.session)
        return self

    def __exit__(self, exc_type, exc, tb):
        try:
            if exc_type is not None:
                self.rollback()
            elif self.session.in_transaction():
                # Read-only use or an early return: nothing to keep
                self.session.rollback()
        finally:
            self.session.close()
            self.session = None

        # Staged writes are flushed eagerly, so store errors may surface
        # before commit; translate them like commit-time errors.
        if isinstance(exc, StaleDataError):
            raise ConcurrentUpdateError(
                "The record was modified by another transaction. Please retry."
            ) from exc
        if isinstance(exc, SQLAlchemyError):
            logger.error(
                "Database error inside unit of work",
                extra={"context": {"error": str(exc)}},
                exc_info=(exc_type, exc, tb),
            )
            raise PersistenceError("Unexpected persistence failure") from exc
        return False

    def commit(self) -> None:
        try:
            self.session.commit()
        except StaleDataError as e:
            self.session.rollback()
            raise ConcurrentUpdateError(
                "The record was modified by another transaction. Please retry."
            ) from e
        except IntegrityError as e:
            self.session.rollback()
            logger.error(
                "Integrity error on commit",
                extra={"context": {"error": str(e.orig)}},
            )
            raise PersistenceError("Unexpected persistence failure") from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(
                "Commit failed",
                extra={"context": {"error": str(e)}},
                exc_info=True,
            )
            raise PersistenceError("Unexpected persistence failure") from e

    def rollback(self) -> None:
        if self.session is not None:
            self.session.rollback()
