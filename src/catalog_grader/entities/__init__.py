"""Entities organized by business concept.

Each entity has its own package containing:
- entity.py: Domain model
- table.py: Database persistence model
- repository.py: Data access layer

Importing this package registers every table on ``SQLModel.metadata``.
"""

from .core.user import User, UserRepository, UserRole, UserTable
from .service.attribute import Attribute, AttributeRepository, AttributeTable, AttributeType
from .service.category import Category, CategoryRepository, CategoryTable
from .service.llm_provider import LLMProviderConfig, LLMProviderRepository, LLMProviderTable
from .service.performance_metric import (
    MetricType,
    PerformanceMetric,
    PerformanceMetricRepository,
    PerformanceMetricTable,
)
from .service.product import (
    GraderTally,
    Product,
    ProductAttributeValue,
    ProductAttributeValueTable,
    ProductRepository,
    ProductTable,
)
from .service.prompt import PromptRepository, PromptTable, PromptTemplate, PromptType

__all__ = [
    "Attribute",
    "AttributeRepository",
    "AttributeTable",
    "AttributeType",
    "Category",
    "CategoryRepository",
    "CategoryTable",
    "GraderTally",
    "LLMProviderConfig",
    "LLMProviderRepository",
    "LLMProviderTable",
    "MetricType",
    "PerformanceMetric",
    "PerformanceMetricRepository",
    "PerformanceMetricTable",
    "Product",
    "ProductAttributeValue",
    "ProductAttributeValueTable",
    "ProductRepository",
    "ProductTable",
    "PromptRepository",
    "PromptTable",
    "PromptTemplate",
    "PromptType",
    "User",
    "UserRepository",
    "UserRole",
    "UserTable",
]
