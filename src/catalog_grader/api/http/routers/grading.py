"""Grading queue endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlmodel import Session

from catalog_grader.api.http.deps import get_session, require_role
from catalog_grader.core.services.catalog import AttributeInput
from catalog_grader.core.services.grading import GradingQueue
from catalog_grader.core.services.metrics import GraderPerformance, MetricsAggregator
from catalog_grader.entities.core._base import CamelModel
from catalog_grader.entities.core.user import User, UserRole
from catalog_grader.entities.service.product import Product

router = APIRouter()

require_grader = require_role(UserRole.GRADER)


class GradeSubmission(CamelModel):
    product_id: str
    approved: bool
    category_id: str | None = None
    attributes: list[AttributeInput] = Field(default_factory=list)


class ClaimRelease(CamelModel):
    product_id: str


@router.get("/next", response_model=Product)
def next_product(
    session: Session = Depends(get_session),
    grader: User = Depends(require_grader),
) -> Product:
    """Claim the next product to grade. 404 ``queue_empty`` when none is left."""
    return GradingQueue(session).claim_next(grader)


@router.post("/submit", response_model=Product)
def submit_grade(
    payload: GradeSubmission,
    session: Session = Depends(get_session),
    grader: User = Depends(require_grader),
) -> Product:
    """Record an approve/reject decision with optional corrections."""
    return GradingQueue(session).submit(
        payload.product_id,
        grader,
        payload.approved,
        category_id=payload.category_id,
        attributes=payload.attributes,
    )


@router.post("/release", response_model=Product)
def release_claim(
    payload: ClaimRelease,
    session: Session = Depends(get_session),
    grader: User = Depends(require_grader),
) -> Product:
    """Hand a claimed product back to the queue."""
    return GradingQueue(session).release(payload.product_id, grader)


@router.get("/performance", response_model=list[GraderPerformance])
def grader_performance(
    start: datetime | None = None,
    end: datetime | None = None,
    user_id: str | None = Query(default=None, alias="userId"),
    session: Session = Depends(get_session),
    _: User = Depends(require_grader),
) -> list[GraderPerformance]:
    """Approved/rejected counts per grader."""
    return MetricsAggregator(session).grader_performance(start, end, user_id)
