"""User repository for data access operations."""

from sqlmodel import Session, select

from catalog_grader.core.errors import NotFoundError
from catalog_grader.entities.core._base import copy_onto, flush_or_conflict

from .entity import User
from .table import UserTable


class UserRepository:
    """Repository for User entity data access operations."""

    def __init__(self, session: Session):
        self._session = session

    def get(self, user_id: str) -> User | None:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def get_by_email(self, email: str) -> User | None:
        statement = select(UserTable).where(UserTable.email == email)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def list_all(self) -> list[User]:
        statement = select(UserTable).order_by(UserTable.created_at)
        rows = self._session.exec(statement).all()
        return [User.model_validate(row, from_attributes=True) for row in rows]

    def create(self, user: User) -> User:
        row = UserTable.model_validate(user, from_attributes=True)
        self._session.add(row)
        flush_or_conflict(self._session, f"A user with email {user.email!r} already exists")
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)

    def update(self, user: User) -> User:
        row = self._session.get(UserTable, user.id)
        if row is None:
            raise NotFoundError("User not found", user_id=user.id)
        copy_onto(row, user)
        self._session.add(row)
        flush_or_conflict(self._session, f"A user with email {user.email!r} already exists")
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)

    def delete(self, user_id: str) -> bool:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return False
        self._session.delete(row)
        flush_or_conflict(self._session, "User is still referenced by products")
        return True
