"""User management API router."""

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlmodel import Session

from catalog_grader.api.http.deps import (
    ensure_admin_or_self,
    get_current_user,
    get_session,
    require_role,
)
from catalog_grader.core.errors import ForbiddenError, NotFoundError
from catalog_grader.core.security import hash_password
from catalog_grader.entities.core._base import CamelModel
from catalog_grader.entities.core.user import User, UserRepository, UserRole

router = APIRouter()


class UserCreate(CamelModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    role: UserRole = UserRole.USER
    password: str | None = Field(default=None, min_length=8)


class UserUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, min_length=3)
    role: UserRole | None = None
    password: str | None = Field(default=None, min_length=8)


@router.get("/", response_model=list[User])
def list_users(
    session: Session = Depends(get_session),
    _: User = Depends(require_role(UserRole.ADMIN)),
) -> list[User]:
    """List all users."""
    return UserRepository(session).list_all()


@router.post("/", response_model=User)
def create_user(
    payload: UserCreate,
    session: Session = Depends(get_session),
    _: User = Depends(require_role(UserRole.ADMIN)),
) -> User:
    """Create a user."""
    user = User(
        name=payload.name,
        email=payload.email,
        role=payload.role,
        password_hash=hash_password(payload.password) if payload.password else None,
    )
    created = UserRepository(session).create(user)
    session.commit()
    return created


@router.get("/me", response_model=User)
def get_me(user: User = Depends(get_current_user)) -> User:
    """The authenticated user."""
    return user


@router.get("/{user_id}", response_model=User)
def get_user(
    user_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> User:
    """Get a user by ID (admins, or the user themselves)."""
    ensure_admin_or_self(user, user_id)
    found = UserRepository(session).get(user_id)
    if found is None:
        raise NotFoundError("User not found", user_id=user_id)
    return found


@router.put("/{user_id}", response_model=User)
def update_user(
    user_id: str,
    payload: UserUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> User:
    """Update a user. Only admins may change roles."""
    ensure_admin_or_self(user, user_id)
    repository = UserRepository(session)
    current = repository.get(user_id)
    if current is None:
        raise NotFoundError("User not found", user_id=user_id)

    changes = payload.model_dump(exclude_unset=True, exclude={"password"})
    if "role" in changes and changes["role"] != current.role and user.role != UserRole.ADMIN:
        raise ForbiddenError("Only admins can change roles")
    if payload.password:
        changes["password_hash"] = hash_password(payload.password)

    updated = repository.update(current.model_copy(update=changes))
    session.commit()
    return updated


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    session: Session = Depends(get_session),
    _: User = Depends(require_role(UserRole.ADMIN)),
) -> dict[str, str]:
    """Delete a user."""
    if not UserRepository(session).delete(user_id):
        raise NotFoundError("User not found", user_id=user_id)
    session.commit()
    return {"message": "User deleted successfully"}
