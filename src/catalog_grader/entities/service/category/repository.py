"""Category repository for data access operations."""

from sqlalchemy import func
from sqlmodel import Session, select

from catalog_grader.core.errors import ConflictError, NotFoundError, ValidationError
from catalog_grader.entities.core._base import copy_onto, flush_or_conflict
from catalog_grader.entities.service.product.table import ProductTable

from .entity import Category
from .table import CategoryTable


class CategoryRepository:
    """Repository for the category tree.

    Writes keep the tree acyclic. Deletes refuse to orphan children or
    products.
    """

    def __init__(self, session: Session):
        self._session = session

    def get(self, category_id: str) -> Category | None:
        row = self._session.get(CategoryTable, category_id)
        if row is None:
            return None
        return Category.model_validate(row, from_attributes=True)

    def get_by_name(self, name: str) -> Category | None:
        statement = select(CategoryTable).where(CategoryTable.name == name)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return Category.model_validate(row, from_attributes=True)

    def get_or_create(self, name: str) -> Category:
        """Return the category named ``name``, creating a root category if missing."""
        existing = self.get_by_name(name)
        if existing is not None:
            return existing
        return self.create(Category(name=name))

    def list_all(self) -> list[Category]:
        statement = select(CategoryTable).order_by(CategoryTable.name)
        rows = self._session.exec(statement).all()
        return [Category.model_validate(row, from_attributes=True) for row in rows]

    def list_children(self, category_id: str) -> list[Category]:
        statement = (
            select(CategoryTable)
            .where(CategoryTable.parent_id == category_id)
            .order_by(CategoryTable.name)
        )
        rows = self._session.exec(statement).all()
        return [Category.model_validate(row, from_attributes=True) for row in rows]

    def count_children(self, category_id: str) -> int:
        statement = select(func.count()).select_from(CategoryTable).where(
            CategoryTable.parent_id == category_id
        )
        return self._session.exec(statement).one()

    def create(self, category: Category) -> Category:
        self._check_parent(category)
        row = CategoryTable.model_validate(category, from_attributes=True)
        self._session.add(row)
        flush_or_conflict(self._session, f"Category {category.name!r} already exists")
        self._session.refresh(row)
        return Category.model_validate(row, from_attributes=True)

    def update(self, category: Category) -> Category:
        row = self._session.get(CategoryTable, category.id)
        if row is None:
            raise NotFoundError("Category not found", category_id=category.id)
        self._check_parent(category)
        copy_onto(row, category)
        self._session.add(row)
        flush_or_conflict(self._session, f"Category {category.name!r} already exists")
        self._session.refresh(row)
        return Category.model_validate(row, from_attributes=True)

    def delete(self, category_id: str) -> bool:
        row = self._session.get(CategoryTable, category_id)
        if row is None:
            return False
        if self.count_children(category_id):
            raise ConflictError(
                "Category has subcategories; move or delete them first",
                category_id=category_id,
            )
        product_count = self._session.exec(
            select(func.count())
            .select_from(ProductTable)
            .where(ProductTable.category_id == category_id)
        ).one()
        if product_count:
            raise ConflictError(
                f"Category is used by {product_count} product(s)",
                category_id=category_id,
            )
        self._session.delete(row)
        flush_or_conflict(self._session, "Category is still referenced")
        return True

    def _check_parent(self, category: Category) -> None:
        """Reject missing parents and any parent chain that leads back to ``category``."""
        if category.parent_id is None:
            return
        if category.parent_id == category.id:
            raise ValidationError("A category cannot be its own parent")

        seen: set[str] = set()
        current_id: str | None = category.parent_id
        while current_id is not None:
            if current_id == category.id:
                raise ValidationError("Category parent would create a cycle")
            if current_id in seen:
                break
            seen.add(current_id)
            parent = self._session.get(CategoryTable, current_id)
            if parent is None:
                if current_id == category.parent_id:
                    raise NotFoundError(
                        "Parent category not found", parent_id=category.parent_id
                    )
                break
            current_id = parent.parent_id
