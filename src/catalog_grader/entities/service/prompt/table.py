"""Prompt template database table model."""

from sqlmodel import Field

from catalog_grader.entities.core._base import EntityTable


class PromptTable(EntityTable, table=True):
    """Database persistence model for prompt templates."""

    __tablename__ = "prompts"

    name: str = Field(index=True)
    content: str
    type: str = Field(default="CUSTOM", index=True)
