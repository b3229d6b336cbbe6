"""Performance metric database table model."""

from datetime import datetime

from sqlmodel import Field

from catalog_grader.entities.core._base import EntityTable, utcnow


class PerformanceMetricTable(EntityTable, table=True):
    """Database persistence model for metric samples."""

    __tablename__ = "performance_metrics"

    metric_type: str = Field(index=True)
    value: float
    timestamp: datetime = Field(default_factory=utcnow, index=True)
