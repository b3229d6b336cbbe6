"""Entity: Prompt template."""

from enum import StrEnum

from pydantic import Field

from catalog_grader.entities.core._base import Entity


class PromptType(StrEnum):
    GENERATE_CANDIDATES = "GENERATE_CANDIDATES"
    IDENTIFY_SUBCATEGORY = "IDENTIFY_SUBCATEGORY"
    MAP_ATTRIBUTES = "MAP_ATTRIBUTES"
    CUSTOM = "CUSTOM"


class PromptTemplate(Entity):
    """Named prompt text.

    Templates typed after a pipeline step replace that step's built-in
    prompt. ``{product}`` and ``{count}`` are filled in; any other braces
    are left as written.
    """

    name: str = Field(min_length=1)
    content: str = Field(min_length=1)
    type: PromptType = Field(default=PromptType.CUSTOM)
