"""User domain entity."""

from enum import StrEnum

from pydantic import Field

from catalog_grader.entities.core._base import Entity


class UserRole(StrEnum):
    ADMIN = "ADMIN"
    GRADER = "GRADER"
    USER = "USER"


class User(Entity):
    """A person who may call the API.

    The role decides which routes the user reaches; ADMIN passes every role
    check. The password hash is only used by the CLI token flow and never
    leaves the service.
    """

    name: str = Field(min_length=1, description="Display name")
    email: str = Field(min_length=3, description="Unique login email")
    role: UserRole = Field(default=UserRole.USER, description="Access role")
    password_hash: str | None = Field(default=None, exclude=True)

    def has_role(self, role: UserRole) -> bool:
        return self.role == UserRole.ADMIN or self.role == role
