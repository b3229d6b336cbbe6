"""Performance metric repository for data access operations."""

from datetime import datetime

from sqlmodel import Session, col, select

from catalog_grader.entities.core._base import ensure_utc, flush_or_conflict

from .entity import PerformanceMetric
from .table import PerformanceMetricTable


class PerformanceMetricRepository:
    """Append-mostly store of metric samples."""

    def __init__(self, session: Session):
        self._session = session

    def get(self, metric_id: str) -> PerformanceMetric | None:
        row = self._session.get(PerformanceMetricTable, metric_id)
        if row is None:
            return None
        return PerformanceMetric.model_validate(row, from_attributes=True)

    def list_all(
        self,
        *,
        metric_type: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[PerformanceMetric]:
        """Samples ordered by timestamp, optionally filtered by type and window."""
        statement = select(PerformanceMetricTable)
        if metric_type is not None:
            statement = statement.where(PerformanceMetricTable.metric_type == metric_type)
        if start is not None:
            statement = statement.where(col(PerformanceMetricTable.timestamp) >= ensure_utc(start))
        if end is not None:
            statement = statement.where(col(PerformanceMetricTable.timestamp) <= ensure_utc(end))
        statement = statement.order_by(PerformanceMetricTable.timestamp, PerformanceMetricTable.id)
        rows = self._session.exec(statement).all()
        return [PerformanceMetric.model_validate(row, from_attributes=True) for row in rows]

    def create(self, metric: PerformanceMetric) -> PerformanceMetric:
        row = PerformanceMetricTable.model_validate(metric, from_attributes=True)
        row.timestamp = ensure_utc(row.timestamp)
        self._session.add(row)
        flush_or_conflict(self._session, "Metric could not be recorded")
        self._session.refresh(row)
        return PerformanceMetric.model_validate(row, from_attributes=True)

    def delete(self, metric_id: str) -> bool:
        row = self._session.get(PerformanceMetricTable, metric_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True
