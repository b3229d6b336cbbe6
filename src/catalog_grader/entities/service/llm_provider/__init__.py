"""Entity package: LLM provider configuration."""

from .entity import LLMProviderConfig
from .repository import LLMProviderRepository
from .table import LLMProviderTable

__all__ = ["LLMProviderConfig", "LLMProviderRepository", "LLMProviderTable"]
