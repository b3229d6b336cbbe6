"""Product database table models."""

from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from catalog_grader.entities.core._base import EntityTable


class ProductTable(EntityTable, table=True):
    """Database persistence model for products."""

    __tablename__ = "products"

    name: str = Field(index=True)
    description: str | None = None
    category_id: str = Field(foreign_key="categories.id", index=True)
    created_by_id: str | None = Field(default=None, foreign_key="users.id")
    ai_generated: bool = Field(default=False, index=True)

    graded_by_id: str | None = Field(default=None, foreign_key="users.id", index=True)
    graded_at: datetime | None = Field(default=None, index=True)
    approved: bool | None = None

    claimed_by_id: str | None = Field(default=None, foreign_key="users.id")
    claimed_at: datetime | None = None


class ProductAttributeValueTable(EntityTable, table=True):
    """One attribute value of one product."""

    __tablename__ = "product_attribute_values"
    __table_args__ = (UniqueConstraint("product_id", "attribute_id"),)

    product_id: str = Field(foreign_key="products.id", index=True)
    attribute_id: str = Field(foreign_key="attributes.id", index=True)
    value: str
