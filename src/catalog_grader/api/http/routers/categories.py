"""Category API router with CRUD operations."""

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlmodel import Session

from catalog_grader.api.http.deps import get_current_user, get_session
from catalog_grader.core.errors import NotFoundError
from catalog_grader.entities.core._base import CamelModel
from catalog_grader.entities.core.user import User
from catalog_grader.entities.service.category import Category, CategoryRepository

router = APIRouter()


class CategoryCreate(CamelModel):
    name: str = Field(min_length=1)
    parent_id: str | None = None


class CategoryUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    parent_id: str | None = None


class CategoryDetail(Category):
    parent: Category | None = None
    children: list[Category] = Field(default_factory=list)


@router.get("/", response_model=list[Category])
def list_categories(
    session: Session = Depends(get_session),
    _: User = Depends(get_current_user),
) -> list[Category]:
    """List all categories."""
    return CategoryRepository(session).list_all()


@router.post("/", response_model=Category)
def create_category(
    payload: CategoryCreate,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_user),
) -> Category:
    """Create a category."""
    created = CategoryRepository(session).create(
        Category(name=payload.name.strip(), parent_id=payload.parent_id)
    )
    session.commit()
    return created


@router.get("/{category_id}", response_model=CategoryDetail)
def get_category(
    category_id: str,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_user),
) -> CategoryDetail:
    """Get a category with its parent and children."""
    repository = CategoryRepository(session)
    category = repository.get(category_id)
    if category is None:
        raise NotFoundError("Category not found", category_id=category_id)
    return CategoryDetail(
        **category.model_dump(),
        parent=repository.get(category.parent_id) if category.parent_id else None,
        children=repository.list_children(category.id),
    )


@router.put("/{category_id}", response_model=Category)
def update_category(
    category_id: str,
    payload: CategoryUpdate,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_user),
) -> Category:
    """Rename or re-parent a category. ``parentId: null`` makes it a root."""
    repository = CategoryRepository(session)
    current = repository.get(category_id)
    if current is None:
        raise NotFoundError("Category not found", category_id=category_id)
    updated = repository.update(current.model_copy(update=payload.model_dump(exclude_unset=True)))
    session.commit()
    return updated


@router.delete("/{category_id}")
def delete_category(
    category_id: str,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_user),
) -> dict[str, str]:
    """Delete a category that has no children and no products."""
    if not CategoryRepository(session).delete(category_id):
        raise NotFoundError("Category not found", category_id=category_id)
    session.commit()
    return {"message": "Category deleted successfully"}
