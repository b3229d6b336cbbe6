import uuid
from datetime import UTC, datetime
from typing import Annotated

import sqlalchemy as sa
from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic import Field as PydanticField
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import IntegrityError
from sqlmodel import Field, Session, SQLModel

from catalog_grader.core.errors import ConflictError


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo) and normalize aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class CamelModel(BaseModel):
    """Base for API-facing models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Entity(CamelModel):
    """Base entity class with auto-generated UUID identifier."""

    id: str = PydanticField(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique identifier for the entity",
    )

    created_at: UtcDatetime = PydanticField(default_factory=utcnow)
    updated_at: UtcDatetime = PydanticField(default_factory=utcnow)


class EntityTable(SQLModel, table=False):
    """Base table class with auto-generated UUID identifier."""

    id: str = Field(
        primary_key=True,
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique identifier for the entity",
    )

    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={
            "server_default": sa.func.now(),
            "onupdate": utcnow,
        },
    )


def flush_or_conflict(session: Session, message: str) -> None:
    """Flush pending writes, turning constraint violations into ConflictError.

    The session is rolled back on conflict, so callers inside a larger unit
    of work lose every pending write of that unit.
    """
    try:
        session.flush()
    except IntegrityError as exc:
        session.rollback()
        raise ConflictError(message) from exc


def copy_onto(row: SQLModel, entity: BaseModel, *, exclude: set[str] | None = None) -> None:
    """Copy entity fields that exist on the table row, skipping identity fields."""
    skip = {"id", "created_at"} | (exclude or set())
    for name in entity.__class__.model_fields:
        if name in skip or not hasattr(row, name):
            continue
        setattr(row, name, getattr(entity, name))
    row.updated_at = utcnow()
