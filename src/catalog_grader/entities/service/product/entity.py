"""Entity: Product."""

from pydantic import Field

from catalog_grader.entities.core._base import CamelModel, Entity, UtcDatetime


class ProductAttributeValue(CamelModel):
    """The value a product holds for one attribute."""

    attribute_id: str
    attribute_name: str | None = None
    value: str


class Product(Entity):
    """A catalog product, hand-entered or produced by the generation pipeline.

    ``graded_at`` is the grading mark: once set the product never re-enters
    the grading queue. ``claimed_by_id``/``claimed_at`` hold the short-lived
    reservation a grader takes when the product is served to them.
    """

    name: str = Field(min_length=1)
    description: str | None = None
    category_id: str
    created_by_id: str | None = None
    ai_generated: bool = False

    graded_by_id: str | None = None
    graded_at: UtcDatetime | None = None
    approved: bool | None = None

    claimed_by_id: str | None = None
    claimed_at: UtcDatetime | None = None

    attributes: list[ProductAttributeValue] = Field(default_factory=list)

    @property
    def is_graded(self) -> bool:
        return self.graded_at is not None
