"""Dashboard metrics endpoint."""

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlmodel import Session

from catalog_grader.api.http.deps import get_session, require_role
from catalog_grader.core.services.metrics import MetricsAggregator, MetricsSummary
from catalog_grader.entities.core.user import User, UserRole

router = APIRouter()


@router.get("/metrics", response_model=MetricsSummary)
def metrics_summary(
    start: datetime | None = None,
    end: datetime | None = None,
    session: Session = Depends(get_session),
    _: User = Depends(require_role(UserRole.ADMIN)),
) -> MetricsSummary:
    """Counts and grading accuracy over a window (default: the last 30 days)."""
    return MetricsAggregator(session).summary(start, end)
