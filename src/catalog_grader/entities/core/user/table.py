"""User database table model."""

from sqlmodel import Field

from catalog_grader.entities.core._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users."""

    __tablename__ = "users"

    name: str
    email: str = Field(unique=True, index=True)
    role: str = Field(default="USER", index=True)
    password_hash: str | None = None
