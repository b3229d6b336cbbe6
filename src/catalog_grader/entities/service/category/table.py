"""Category database table model."""

from sqlmodel import Field

from catalog_grader.entities.core._base import EntityTable


class CategoryTable(EntityTable, table=True):
    """Database persistence model for categories."""

    __tablename__ = "categories"

    name: str = Field(unique=True, index=True)
    parent_id: str | None = Field(default=None, foreign_key="categories.id", index=True)
