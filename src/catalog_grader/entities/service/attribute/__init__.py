"""Entity package: Attribute."""

from .entity import Attribute, AttributeType
from .repository import AttributeRepository
from .table import AttributeTable

__all__ = ["Attribute", "AttributeRepository", "AttributeTable", "AttributeType"]
