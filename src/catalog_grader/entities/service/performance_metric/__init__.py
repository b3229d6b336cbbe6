"""Entity package: Performance metric."""

from .entity import MetricType, PerformanceMetric
from .repository import PerformanceMetricRepository
from .table import PerformanceMetricTable

__all__ = [
    "MetricType",
    "PerformanceMetric",
    "PerformanceMetricRepository",
    "PerformanceMetricTable",
]
