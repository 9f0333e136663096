from typing import List, Optional

from sqlalchemy import or_

from bookmarket.core.exceptions import UserNotFoundError
from bookmarket.db.base import Transaction as DbTransaction
from bookmarket.db.base import User as DbUser
from bookmarket.domain.entities import User as DomainUser
from bookmarket.domain.interfaces import IUserRepository


class UserRepository(IUserRepository):
    """Repository for User persistence operations.

    This implementation:
    - Implements IUserRepository interface (Dependency Inversion)
    - Handles data access only (Single Responsibility)
    - Maps between domain entities and database models
    """

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_id(self, user_id: int) -> Optional[DomainUser]:
        """Get user by ID, returning domain entity."""
        db_user = self.db.query(DbUser).filter_by(id=user_id).first()
        return self._to_domain(db_user) if db_user else None

    def get_for_update(self, user_id: int) -> Optional[DomainUser]:
        """Get user by ID with a row lock held until the session ends."""
        db_user = (
            self.db.query(DbUser)
            .filter_by(id=user_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        return self._to_domain(db_user) if db_user else None

    def get_by_email_or_username(
        self, email: str, username: str
    ) -> Optional[DomainUser]:
        db_user = (
            self.db.query(DbUser)
            .filter(or_(DbUser.email == email, DbUser.username == username))
            .first()
        )
        return self._to_domain(db_user) if db_user else None

    def find_by_keyword(self, keyword: str) -> Optional[DomainUser]:
        db_user = (
            self.db.query(DbUser)
            .filter(or_(DbUser.username == keyword, DbUser.email == keyword))
            .first()
        )
        return self._to_domain(db_user) if db_user else None

    def list_all(self) -> List[DomainUser]:
        db_users = self.db.query(DbUser).order_by(DbUser.id.asc()).all()
        return [self._to_domain(u) for u in db_users]

    def add(self, user: DomainUser) -> DomainUser:
        db_user = DbUser()
        self._apply(db_user, user)
        self.db.add(db_user)
        self.db.flush()
        return self._to_domain(db_user)

    def save(self, user: DomainUser) -> DomainUser:
        db_user = self.db.get(DbUser, user.id)
        if db_user is None:
            raise UserNotFoundError(f"User not found for the given id: {user.id}")
        self._apply(db_user, user)
        self.db.flush()
        return self._to_domain(db_user)

    def delete(self, user_id: int) -> None:
        db_user = self.db.get(DbUser, user_id)
        if db_user is None:
            return
        self.db.query(DbTransaction).filter(DbTransaction.user_id == user_id).update(
            {DbTransaction.user_id: None}
        )
        self.db.delete(db_user)
        self.db.flush()

    @staticmethod
    def _apply(db_user: DbUser, user: DomainUser) -> None:
        db_user.username = user.username
        db_user.email = user.email
        db_user.first_name = user.first_name
        db_user.last_name = user.last_name
        db_user.phone_number = user.phone_number
        db_user.funds = user.funds
        # A None hash on the domain side means "unchanged"
        if user.password_hash is not None:
            db_user.password_hash = user.password_hash

    @staticmethod
    def _to_domain(db_user: DbUser) -> DomainUser:
        return DomainUser(
            id=db_user.id,
            username=db_user.username,
            email=db_user.email,
            first_name=db_user.first_name,
            last_name=db_user.last_name,
            phone_number=db_user.phone_number,
            funds=db_user.funds,
            created_at=db_user.created_at,
            updated_at=db_user.updated_at,
        )
