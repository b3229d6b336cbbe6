"""Entity: Attribute."""

from enum import StrEnum

from pydantic import Field, model_validator

from catalog_grader.entities.core._base import Entity


class AttributeType(StrEnum):
    TEXT = "TEXT"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    SELECT = "SELECT"


class Attribute(Entity):
    """A named product property such as "Color" or "Weight"."""

    name: str = Field(min_length=1, description="Unique attribute name")
    type: AttributeType = Field(default=AttributeType.TEXT)
    options: list[str] = Field(
        default_factory=list, description="Allowed values for SELECT attributes"
    )
    category_id: str | None = Field(
        default=None, description="Category the attribute is scoped to, if any"
    )

    @model_validator(mode="after")
    def _select_needs_options(self) -> "Attribute":
        if self.type == AttributeType.SELECT and not self.options:
            raise ValueError("SELECT attributes need at least one option")
        return self
