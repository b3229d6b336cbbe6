"""Product repository for data access operations."""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import case, delete, func, or_, update
from sqlmodel import Session, col, select

from catalog_grader.core.errors import NotFoundError
from catalog_grader.entities.core._base import copy_onto, ensure_utc, flush_or_conflict
from catalog_grader.entities.service.attribute.table import AttributeTable

from .entity import Product, ProductAttributeValue
from .table import ProductAttributeValueTable, ProductTable


@dataclass(frozen=True)
class GraderTally:
    grader_id: str
    total_graded: int
    approved: int

    @property
    def rejected(self) -> int:
        return self.total_graded - self.approved


class ProductRepository:
    """Repository for products, their attribute values and grading state.

    Datetimes are bound as UTC; SQLite stores them without an offset, so
    window and claim-expiry comparisons are done in SQL on that basis.
    """

    def __init__(self, session: Session):
        self._session = session

    # -- reads -------------------------------------------------------------

    def get(self, product_id: str) -> Product | None:
        row = self._session.get(ProductTable, product_id, populate_existing=True)
        if row is None:
            return None
        return self._to_entities([row])[0]

    def list_all(
        self,
        *,
        category_id: str | None = None,
        ai_generated: bool | None = None,
        graded: bool | None = None,
    ) -> list[Product]:
        statement = select(ProductTable)
        if category_id is not None:
            statement = statement.where(ProductTable.category_id == category_id)
        if ai_generated is not None:
            statement = statement.where(ProductTable.ai_generated == ai_generated)
        if graded is True:
            statement = statement.where(col(ProductTable.graded_at).is_not(None))
        elif graded is False:
            statement = statement.where(col(ProductTable.graded_at).is_(None))
        statement = statement.order_by(ProductTable.created_at, ProductTable.id)
        return self._to_entities(list(self._session.exec(statement).all()))

    def _to_entities(self, rows: list[ProductTable]) -> list[Product]:
        values_by_product: dict[str, list[ProductAttributeValue]] = defaultdict(list)
        if rows:
            statement = (
                select(ProductAttributeValueTable, AttributeTable.name)
                .join(AttributeTable, AttributeTable.id == ProductAttributeValueTable.attribute_id)
                .where(col(ProductAttributeValueTable.product_id).in_([r.id for r in rows]))
                .order_by(AttributeTable.name)
            )
            for value_row, attribute_name in self._session.exec(statement).all():
                values_by_product[value_row.product_id].append(
                    ProductAttributeValue(
                        attribute_id=value_row.attribute_id,
                        attribute_name=attribute_name,
                        value=value_row.value,
                    )
                )

        products = []
        for row in rows:
            product = Product.model_validate(row, from_attributes=True)
            product.attributes = values_by_product.get(row.id, [])
            products.append(product)
        return products

    # -- writes ------------------------------------------------------------

    def create(self, product: Product) -> Product:
        """Insert ``product`` and its attribute values."""
        row = ProductTable.model_validate(product, from_attributes=True)
        self._session.add(row)
        flush_or_conflict(self._session, "Product could not be created")
        self.set_attribute_values(row.id, product.attributes)
        return self.get(row.id)  # type: ignore[return-value]

    def update(self, product: Product) -> Product:
        """Update scalar fields. Attribute values are replaced separately."""
        row = self._session.get(ProductTable, product.id)
        if row is None:
            raise NotFoundError("Product not found", product_id=product.id)
        copy_onto(row, product, exclude={"attributes"})
        self._session.add(row)
        flush_or_conflict(self._session, "Product could not be updated")
        return self.get(row.id)  # type: ignore[return-value]

    def delete(self, product_id: str) -> bool:
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return False
        self._session.exec(
            delete(ProductAttributeValueTable).where(
                col(ProductAttributeValueTable.product_id) == product_id
            )
        )
        self._session.delete(row)
        flush_or_conflict(self._session, "Product is still referenced")
        return True

    def set_attribute_values(
        self, product_id: str, values: list[ProductAttributeValue]
    ) -> None:
        """Replace every attribute value of a product.

        A repeated attribute keeps its last value.
        """
        self._session.exec(
            delete(ProductAttributeValueTable).where(
                col(ProductAttributeValueTable.product_id) == product_id
            )
        )
        latest = {value.attribute_id: value.value for value in values}
        for attribute_id, value in latest.items():
            self._session.add(
                ProductAttributeValueTable(
                    product_id=product_id, attribute_id=attribute_id, value=value
                )
            )
        flush_or_conflict(self._session, "Attribute values could not be stored")

    # -- grading queue -----------------------------------------------------

    def find_live_claim(self, grader_id: str, live_after: datetime) -> Product | None:
        """The ungraded product ``grader_id`` holds an unexpired claim on, if any."""
        statement = (
            select(ProductTable)
            .where(
                ProductTable.claimed_by_id == grader_id,
                col(ProductTable.graded_at).is_(None),
                col(ProductTable.claimed_at) >= ensure_utc(live_after),
            )
            .order_by(ProductTable.claimed_at)
            .limit(1)
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return self.get(row.id)

    def next_claimable_id(
        self, live_after: datetime, *, ai_generated_only: bool, exclude: set[str] | None = None
    ) -> str | None:
        """Oldest ungraded product whose claim is absent or expired."""
        statement = select(ProductTable.id).where(
            col(ProductTable.graded_at).is_(None),
            or_(
                col(ProductTable.claimed_by_id).is_(None),
                col(ProductTable.claimed_at) < ensure_utc(live_after),
            ),
        )
        if ai_generated_only:
            statement = statement.where(col(ProductTable.ai_generated).is_(True))
        if exclude:
            statement = statement.where(col(ProductTable.id).not_in(exclude))
        statement = statement.order_by(ProductTable.created_at, ProductTable.id).limit(1)
        return self._session.exec(statement).first()

    def try_claim(
        self, product_id: str, grader_id: str, now: datetime, live_after: datetime
    ) -> bool:
        """Compare-and-set claim. True only if this call won the product."""
        statement = (
            update(ProductTable)
            .where(
                col(ProductTable.id) == product_id,
                col(ProductTable.graded_at).is_(None),
                or_(
                    col(ProductTable.claimed_by_id).is_(None),
                    col(ProductTable.claimed_at) < ensure_utc(live_after),
                    col(ProductTable.claimed_by_id) == grader_id,
                ),
            )
            .values(claimed_by_id=grader_id, claimed_at=ensure_utc(now))
            .execution_options(synchronize_session=False)
        )
        result = self._session.exec(statement)  # type: ignore[call-overload]
        return result.rowcount == 1

    def release_claim(self, product_id: str) -> None:
        statement = (
            update(ProductTable)
            .where(col(ProductTable.id) == product_id)
            .values(claimed_by_id=None, claimed_at=None)
            .execution_options(synchronize_session=False)
        )
        self._session.exec(statement)  # type: ignore[call-overload]

    def record_grade(
        self,
        product_id: str,
        *,
        grader_id: str,
        approved: bool,
        graded_at: datetime,
        category_id: str | None = None,
    ) -> None:
        """Mark a product graded and drop its claim."""
        row = self._session.get(ProductTable, product_id, populate_existing=True)
        if row is None:
            raise NotFoundError("Product not found", product_id=product_id)
        row.graded_by_id = grader_id
        row.graded_at = ensure_utc(graded_at)
        row.approved = approved
        row.claimed_by_id = None
        row.claimed_at = None
        if category_id is not None:
            row.category_id = category_id
        self._session.add(row)
        flush_or_conflict(self._session, "Grade could not be recorded")

    # -- aggregates --------------------------------------------------------

    def count_created(self, start: datetime, end: datetime) -> int:
        statement = select(func.count()).select_from(ProductTable).where(
            col(ProductTable.created_at) >= ensure_utc(start),
            col(ProductTable.created_at) <= ensure_utc(end),
        )
        return self._session.exec(statement).one()

    def count_graded(
        self, start: datetime, end: datetime, *, approved: bool | None = None
    ) -> int:
        statement = select(func.count()).select_from(ProductTable).where(
            col(ProductTable.graded_at) >= ensure_utc(start),
            col(ProductTable.graded_at) <= ensure_utc(end),
        )
        if approved is not None:
            statement = statement.where(col(ProductTable.approved).is_(approved))
        return self._session.exec(statement).one()

    def count_by_category(self, category_id: str) -> int:
        statement = select(func.count()).select_from(ProductTable).where(
            ProductTable.category_id == category_id
        )
        return self._session.exec(statement).one()

    def grader_tallies(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[GraderTally]:
        approved_count = func.sum(case((col(ProductTable.approved).is_(True), 1), else_=0))
        statement = select(
            ProductTable.graded_by_id, func.count(), approved_count
        ).where(
            col(ProductTable.graded_by_id).is_not(None),
            col(ProductTable.graded_at).is_not(None),
        )
        if start is not None:
            statement = statement.where(col(ProductTable.graded_at) >= ensure_utc(start))
        if end is not None:
            statement = statement.where(col(ProductTable.graded_at) <= ensure_utc(end))
        statement = statement.group_by(ProductTable.graded_by_id)
        return [
            GraderTally(grader_id=grader_id, total_graded=total, approved=int(approved or 0))
            for grader_id, total, approved in self._session.exec(statement).all()
        ]
