"""Attribute API router with CRUD operations."""

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlmodel import Session

from catalog_grader.api.http.deps import get_current_user, get_session
from catalog_grader.core.errors import NotFoundError
from catalog_grader.entities.core._base import CamelModel
from catalog_grader.entities.core.user import User
from catalog_grader.entities.service.attribute import (
    Attribute,
    AttributeRepository,
    AttributeType,
)

router = APIRouter()


class AttributeCreate(CamelModel):
    name: str = Field(min_length=1)
    type: AttributeType = AttributeType.TEXT
    options: list[str] = Field(default_factory=list)
    category_id: str | None = None


class AttributeUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    type: AttributeType | None = None
    options: list[str] | None = None
    category_id: str | None = None


@router.get("/", response_model=list[Attribute])
def list_attributes(
    session: Session = Depends(get_session),
    _: User = Depends(get_current_user),
) -> list[Attribute]:
    """List all attributes."""
    return AttributeRepository(session).list_all()


@router.post("/", response_model=Attribute)
def create_attribute(
    payload: AttributeCreate,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_user),
) -> Attribute:
    """Create an attribute."""
    attribute = Attribute.model_validate(payload.model_dump())
    created = AttributeRepository(session).create(attribute)
    session.commit()
    return created


@router.get("/{attribute_id}", response_model=Attribute)
def get_attribute(
    attribute_id: str,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_user),
) -> Attribute:
    """Get an attribute by ID."""
    attribute = AttributeRepository(session).get(attribute_id)
    if attribute is None:
        raise NotFoundError("Attribute not found", attribute_id=attribute_id)
    return attribute


@router.put("/{attribute_id}", response_model=Attribute)
def update_attribute(
    attribute_id: str,
    payload: AttributeUpdate,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_user),
) -> Attribute:
    """Update an attribute."""
    repository = AttributeRepository(session)
    current = repository.get(attribute_id)
    if current is None:
        raise NotFoundError("Attribute not found", attribute_id=attribute_id)
    # Re-validate so type/options stay consistent
    merged = Attribute.model_validate(
        {**current.model_dump(), **payload.model_dump(exclude_unset=True)}
    )
    updated = repository.update(merged)
    session.commit()
    return updated


@router.delete("/{attribute_id}")
def delete_attribute(
    attribute_id: str,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_user),
) -> dict[str, str]:
    """Delete an attribute and every product value that uses it."""
    if not AttributeRepository(session).delete(attribute_id):
        raise NotFoundError("Attribute not found", attribute_id=attribute_id)
    session.commit()
    return {"message": "Attribute deleted successfully"}
