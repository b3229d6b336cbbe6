"""LLM provider database table model."""

from sqlmodel import Field

from catalog_grader.entities.core._base import EntityTable


class LLMProviderTable(EntityTable, table=True):
    """Database persistence model for LLM provider configurations."""

    __tablename__ = "llm_providers"

    name: str = Field(unique=True, index=True)
    api_key: str
    base_url: str | None = None
    model: str | None = None
