"""Entity package: Prompt template."""

from .entity import PromptTemplate, PromptType
from .repository import PromptRepository
from .table import PromptTable

__all__ = ["PromptRepository", "PromptTable", "PromptTemplate", "PromptType"]
