"""Resolution of ``{attributeId | name, value}`` inputs to attribute values."""

from pydantic import Field, model_validator
from sqlmodel import Session

from catalog_grader.core.errors import NotFoundError
from catalog_grader.entities.core._base import CamelModel
from catalog_grader.entities.service.attribute import AttributeRepository
from catalog_grader.entities.service.product import ProductAttributeValue


class AttributeInput(CamelModel):
    """One attribute value as submitted by a client: by id, or by name."""

    attribute_id: str | None = None
    name: str | None = Field(default=None, min_length=1)
    value: str

    @model_validator(mode="after")
    def _id_or_name(self) -> "AttributeInput":
        if not self.attribute_id and not self.name:
            raise ValueError("Either attributeId or name is required")
        return self


def resolve_attribute_values(
    session: Session, inputs: list[AttributeInput]
) -> list[ProductAttributeValue]:
    """Resolve ids strictly and names with connect-or-create.

    Raises:
        NotFoundError: If an ``attribute_id`` does not exist.
    """
    repository = AttributeRepository(session)
    values = []
    for item in inputs:
        if item.attribute_id:
            attribute = repository.get(item.attribute_id)
            if attribute is None:
                raise NotFoundError("Attribute not found", attribute_id=item.attribute_id)
        else:
            attribute = repository.get_or_create(item.name.strip())  # type: ignore[union-attr]
        values.append(
            ProductAttributeValue(
                attribute_id=attribute.id, attribute_name=attribute.name, value=item.value
            )
        )
    return values
