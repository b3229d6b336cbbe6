"""Performance metric samples API router."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from catalog_grader.api.http.deps import get_current_user, get_session, require_role
from catalog_grader.core.errors import NotFoundError
from catalog_grader.core.services.metrics import MetricsAggregator
from catalog_grader.entities.core._base import CamelModel, UtcDatetime
from catalog_grader.entities.core.user import User, UserRole
from catalog_grader.entities.service.performance_metric import (
    PerformanceMetric,
    PerformanceMetricRepository,
)

router = APIRouter()


class PerformanceMetricCreate(CamelModel):
    metric_type: str
    value: float
    timestamp: UtcDatetime | None = None


@router.get("/", response_model=list[PerformanceMetric])
def list_metrics(
    start: datetime | None = None,
    end: datetime | None = None,
    metric_type: str | None = Query(default=None, alias="metricType"),
    session: Session = Depends(get_session),
    _: User = Depends(get_current_user),
) -> list[PerformanceMetric]:
    """Metric samples in timestamp order, optionally windowed and filtered by type."""
    return MetricsAggregator(session).accuracy_series(start, end, metric_type)


@router.post("/", response_model=PerformanceMetric)
def create_metric(
    payload: PerformanceMetricCreate,
    session: Session = Depends(get_session),
    _: User = Depends(require_role(UserRole.ADMIN)),
) -> PerformanceMetric:
    """Record a metric sample."""
    metric = PerformanceMetric(metric_type=payload.metric_type, value=payload.value)
    if payload.timestamp is not None:
        metric.timestamp = payload.timestamp
    created = PerformanceMetricRepository(session).create(metric)
    session.commit()
    return created


@router.delete("/{metric_id}")
def delete_metric(
    metric_id: str,
    session: Session = Depends(get_session),
    _: User = Depends(require_role(UserRole.ADMIN)),
) -> dict[str, str]:
    if not PerformanceMetricRepository(session).delete(metric_id):
        raise NotFoundError("Metric not found", metric_id=metric_id)
    session.commit()
    return {"message": "Metric deleted successfully"}
