"""Entity: Performance metric."""

from enum import StrEnum

from pydantic import Field

from catalog_grader.entities.core._base import Entity, UtcDatetime, utcnow


class MetricType(StrEnum):
    HUMAN_ACCURACY = "HUMAN_ACCURACY"


class PerformanceMetric(Entity):
    """A single time-stamped metric sample.

    Grading appends one ``HUMAN_ACCURACY`` sample per submission: 1.0 for an
    approval, 0.0 for a rejection.
    """

    metric_type: str = Field(min_length=1)
    value: float
    timestamp: UtcDatetime = Field(default_factory=utcnow)
