"""Grading queue: claim, submit and release products for human review."""

from datetime import datetime, timedelta

from loguru import logger
from sqlmodel import Session

from catalog_grader.core.errors import ConflictError, NotFoundError, QueueEmptyError
from catalog_grader.core.services.catalog.attribute_values import (
    AttributeInput,
    resolve_attribute_values,
)
from catalog_grader.core.services.database.db_utils import transaction
from catalog_grader.entities.core._base import utcnow
from catalog_grader.entities.core.user import User
from catalog_grader.entities.service.category import CategoryRepository
from catalog_grader.entities.service.performance_metric import (
    MetricType,
    PerformanceMetric,
    PerformanceMetricRepository,
)
from catalog_grader.entities.service.product import Product, ProductRepository
from catalog_grader.runtime.context import get_config


class GradingQueue:
    """Serves ungraded products to graders one at a time.

    A served product is claimed with a compare-and-set update so two graders
    never hold the same product. Claims expire after the configured TTL and
    the product becomes claimable again.
    """

    def __init__(self, session: Session):
        self._session = session
        self._products = ProductRepository(session)

    def _live_after(self, now: datetime) -> datetime:
        return now - timedelta(seconds=get_config().grading.claim_ttl_seconds)

    def claim_next(self, grader: User) -> Product:
        """Claim and return the oldest ungraded product for ``grader``.

        A grader holding a live claim gets the same product back. A product
        another grader claims first is skipped and the next one is tried, so
        the queue is only reported empty when nothing claimable is left.

        Raises:
            QueueEmptyError: If nothing is left to grade.
        """
        grading_config = get_config().grading
        now = utcnow()
        live_after = self._live_after(now)
        log = logger.bind(grader_id=grader.id)

        held = self._products.find_live_claim(grader.id, live_after)
        if held is not None:
            log.bind(product_id=held.id).debug("Returning existing claim")
            return held

        lost: set[str] = set()
        while True:
            product_id = self._products.next_claimable_id(
                live_after,
                ai_generated_only=grading_config.ai_generated_only,
                exclude=lost,
            )
            if product_id is None:
                raise QueueEmptyError()
            with transaction(self._session):
                won = self._products.try_claim(product_id, grader.id, now, live_after)
            if won:
                log.bind(product_id=product_id, lost_races=len(lost)).info("Product claimed")
                return self._products.get(product_id)  # type: ignore[return-value]
            log.bind(product_id=product_id).debug("Lost claim race")
            lost.add(product_id)

    def submit(
        self,
        product_id: str,
        grader: User,
        approved: bool,
        category_id: str | None = None,
        attributes: list[AttributeInput] | None = None,
    ) -> Product:
        """Record a grading decision.

        Sets the grade, clears the claim, replaces the attribute values when
        any are given and appends one HUMAN_ACCURACY sample, all in one
        transaction. Regrading overwrites the previous decision.

        ``category_id=None`` keeps the current category. ``attributes`` that is
        ``None`` or empty keeps the current values; there is no way to clear
        every attribute through a grade.

        Raises:
            NotFoundError: If the product, category or an attribute id is unknown.
        """
        with transaction(self._session):
            if self._products.get(product_id) is None:
                raise NotFoundError("Product not found", product_id=product_id)
            if category_id is not None and CategoryRepository(self._session).get(category_id) is None:
                raise NotFoundError("Category not found", category_id=category_id)

            now = utcnow()
            self._products.record_grade(
                product_id,
                grader_id=grader.id,
                approved=approved,
                graded_at=now,
                category_id=category_id,
            )
            if attributes:
                values = resolve_attribute_values(self._session, attributes)
                self._products.set_attribute_values(product_id, values)

            PerformanceMetricRepository(self._session).create(
                PerformanceMetric(
                    metric_type=MetricType.HUMAN_ACCURACY,
                    value=1.0 if approved else 0.0,
                    timestamp=now,
                )
            )

        logger.bind(grader_id=grader.id, product_id=product_id, approved=approved).info(
            "Product graded"
        )
        return self._products.get(product_id)  # type: ignore[return-value]

    def release(self, product_id: str, grader: User) -> Product:
        """Give a claimed product back to the queue.

        Raises:
            NotFoundError: If the product is unknown.
            ConflictError: If another grader holds the claim.
        """
        with transaction(self._session):
            product = self._products.get(product_id)
            if product is None:
                raise NotFoundError("Product not found", product_id=product_id)
            if product.claimed_by_id not in (None, grader.id):
                raise ConflictError(
                    "Product is claimed by another grader", product_id=product_id
                )
            self._products.release_claim(product_id)

        logger.bind(grader_id=grader.id, product_id=product_id).info("Claim released")
        return self._products.get(product_id)  # type: ignore[return-value]
