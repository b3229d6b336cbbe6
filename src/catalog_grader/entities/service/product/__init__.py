"""Entity package: Product."""

from .entity import Product, ProductAttributeValue
from .repository import GraderTally, ProductRepository
from .table import ProductAttributeValueTable, ProductTable

__all__ = [
    "GraderTally",
    "Product",
    "ProductAttributeValue",
    "ProductAttributeValueTable",
    "ProductRepository",
    "ProductTable",
]
