"""Entity: Category."""

from pydantic import Field

from catalog_grader.entities.core._base import Entity


class Category(Entity):
    """A node in the category tree. Root categories have no parent."""

    name: str = Field(min_length=1, description="Unique category name")
    parent_id: str | None = Field(default=None, description="Parent category id")
