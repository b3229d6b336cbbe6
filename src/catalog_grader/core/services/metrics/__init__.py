"""Grading and catalog metrics."""

from .aggregator import (
    GraderPerformance,
    GraderRef,
    MetricsAggregator,
    MetricsSummary,
    resolve_window,
)

__all__ = [
    "GraderPerformance",
    "GraderRef",
    "MetricsAggregator",
    "MetricsSummary",
    "resolve_window",
]
