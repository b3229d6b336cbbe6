"""Attribute database table model."""

from sqlalchemy import JSON, Column
from sqlmodel import Field

from catalog_grader.entities.core._base import EntityTable


class AttributeTable(EntityTable, table=True):
    """Database persistence model for attributes."""

    __tablename__ = "attributes"

    name: str = Field(unique=True, index=True)
    type: str = Field(default="TEXT")
    options: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    category_id: str | None = Field(default=None, foreign_key="categories.id", index=True)
