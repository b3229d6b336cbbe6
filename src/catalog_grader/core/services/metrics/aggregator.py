"""Window counts, grading accuracy and per-grader performance."""

from datetime import datetime, timedelta

from sqlalchemy import func
from sqlmodel import Session, SQLModel, select

from catalog_grader.core.errors import ValidationError
from catalog_grader.entities.core._base import CamelModel, UtcDatetime, ensure_utc, utcnow
from catalog_grader.entities.core.user import UserRepository, UserTable
from catalog_grader.entities.service.attribute import AttributeTable
from catalog_grader.entities.service.category import CategoryTable
from catalog_grader.entities.service.performance_metric import (
    PerformanceMetric,
    PerformanceMetricRepository,
)
from catalog_grader.entities.service.product import ProductRepository
from catalog_grader.runtime.context import get_config


class MetricsSummary(CamelModel):
    start: UtcDatetime
    end: UtcDatetime
    total_products: int
    graded_products: int
    approved_products: int
    accuracy: float
    categories: int
    attributes: int
    users: int


class GraderRef(CamelModel):
    id: str
    name: str | None = None


class GraderPerformance(CamelModel):
    grader: GraderRef
    total_graded: int
    approved: int
    rejected: int


def resolve_window(
    start: datetime | None, end: datetime | None, default_days: int
) -> tuple[datetime, datetime]:
    """Fill in a missing window end (now) and start (``default_days`` before end).

    Naive datetimes are taken as UTC.

    Raises:
        ValidationError: If start is after end.
    """
    end = ensure_utc(end) if end is not None else utcnow()
    start = ensure_utc(start) if start is not None else end - timedelta(days=default_days)
    if start > end:
        raise ValidationError("start must not be after end")
    return start, end


class MetricsAggregator:
    def __init__(self, session: Session):
        self._session = session
        self._products = ProductRepository(session)

    def _count(self, table: type[SQLModel]) -> int:
        return self._session.exec(select(func.count()).select_from(table)).one()

    def summary(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> MetricsSummary:
        """Products created and graded in the window, plus catalog totals.

        Accuracy is the approved share of graded products as a percentage,
        0 when nothing was graded.
        """
        start, end = resolve_window(start, end, get_config().metrics.default_window_days)
        graded = self._products.count_graded(start, end)
        approved = self._products.count_graded(start, end, approved=True)
        return MetricsSummary(
            start=start,
            end=end,
            total_products=self._products.count_created(start, end),
            graded_products=graded,
            approved_products=approved,
            accuracy=(approved / graded * 100) if graded else 0.0,
            categories=self._count(CategoryTable),
            attributes=self._count(AttributeTable),
            users=self._count(UserTable),
        )

    def grader_performance(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        user_id: str | None = None,
    ) -> list[GraderPerformance]:
        """Per-grader decision counts, busiest grader first."""
        if start is not None and end is not None and ensure_utc(start) > ensure_utc(end):
            raise ValidationError("start must not be after end")

        tallies = self._products.grader_tallies(start, end)
        if user_id is not None:
            tallies = [t for t in tallies if t.grader_id == user_id]

        users = UserRepository(self._session)
        results = []
        for tally in sorted(tallies, key=lambda t: (-t.total_graded, t.grader_id)):
            grader = users.get(tally.grader_id)
            results.append(
                GraderPerformance(
                    grader=GraderRef(id=tally.grader_id, name=grader.name if grader else None),
                    total_graded=tally.total_graded,
                    approved=tally.approved,
                    rejected=tally.rejected,
                )
            )
        return results

    def accuracy_series(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        metric_type: str | None = None,
    ) -> list[PerformanceMetric]:
        """Stored metric samples in timestamp order."""
        if start is not None and end is not None and ensure_utc(start) > ensure_utc(end):
            raise ValidationError("start must not be after end")
        return PerformanceMetricRepository(self._session).list_all(
            metric_type=metric_type, start=start, end=end
        )
