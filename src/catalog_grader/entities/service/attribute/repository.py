"""Attribute repository for data access operations."""

from sqlmodel import Session, delete, select

from catalog_grader.core.errors import NotFoundError
from catalog_grader.entities.core._base import copy_onto, flush_or_conflict
from catalog_grader.entities.service.product.table import ProductAttributeValueTable

from .entity import Attribute, AttributeType
from .table import AttributeTable


class AttributeRepository:
    """Repository for Attribute entity data access operations."""

    def __init__(self, session: Session):
        self._session = session

    def get(self, attribute_id: str) -> Attribute | None:
        row = self._session.get(AttributeTable, attribute_id)
        if row is None:
            return None
        return Attribute.model_validate(row, from_attributes=True)

    def get_by_name(self, name: str) -> Attribute | None:
        statement = select(AttributeTable).where(AttributeTable.name == name)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return Attribute.model_validate(row, from_attributes=True)

    def get_or_create(self, name: str) -> Attribute:
        """Connect to the attribute named ``name`` or create it as TEXT."""
        existing = self.get_by_name(name)
        if existing is not None:
            return existing
        return self.create(Attribute(name=name, type=AttributeType.TEXT))

    def list_all(self) -> list[Attribute]:
        statement = select(AttributeTable).order_by(AttributeTable.name)
        rows = self._session.exec(statement).all()
        return [Attribute.model_validate(row, from_attributes=True) for row in rows]

    def create(self, attribute: Attribute) -> Attribute:
        row = AttributeTable.model_validate(attribute, from_attributes=True)
        self._session.add(row)
        flush_or_conflict(self._session, f"Attribute {attribute.name!r} already exists")
        self._session.refresh(row)
        return Attribute.model_validate(row, from_attributes=True)

    def update(self, attribute: Attribute) -> Attribute:
        row = self._session.get(AttributeTable, attribute.id)
        if row is None:
            raise NotFoundError("Attribute not found", attribute_id=attribute.id)
        copy_onto(row, attribute)
        self._session.add(row)
        flush_or_conflict(self._session, f"Attribute {attribute.name!r} already exists")
        self._session.refresh(row)
        return Attribute.model_validate(row, from_attributes=True)

    def delete(self, attribute_id: str) -> bool:
        """Delete an attribute along with every product value that uses it."""
        row = self._session.get(AttributeTable, attribute_id)
        if row is None:
            return False
        self._session.exec(
            delete(ProductAttributeValueTable).where(
                ProductAttributeValueTable.attribute_id == attribute_id
            )
        )
        self._session.delete(row)
        flush_or_conflict(self._session, "Attribute is still referenced")
        return True
