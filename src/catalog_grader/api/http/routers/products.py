"""Product API router with CRUD operations."""

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlmodel import Session

from catalog_grader.api.http.deps import get_current_user, get_session
from catalog_grader.core.errors import NotFoundError
from catalog_grader.core.services.catalog import AttributeInput, resolve_attribute_values
from catalog_grader.core.services.database import transaction
from catalog_grader.entities.core._base import CamelModel
from catalog_grader.entities.core.user import User
from catalog_grader.entities.service.category import CategoryRepository
from catalog_grader.entities.service.product import Product, ProductRepository

router = APIRouter()


class ProductCreate(CamelModel):
    name: str = Field(min_length=1)
    description: str | None = None
    category_id: str
    ai_generated: bool = False
    attributes: list[AttributeInput] = Field(default_factory=list)


class ProductUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    category_id: str | None = None
    attributes: list[AttributeInput] | None = Field(
        default=None, description="Replaces the whole attribute set when given"
    )


def _require_category(session: Session, category_id: str) -> None:
    if CategoryRepository(session).get(category_id) is None:
        raise NotFoundError("Category not found", category_id=category_id)


@router.get("/", response_model=list[Product])
def list_products(
    category_id: str | None = Query(default=None, alias="categoryId"),
    ai_generated: bool | None = Query(default=None, alias="aiGenerated"),
    graded: bool | None = None,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_user),
) -> list[Product]:
    """List products, optionally filtered."""
    return ProductRepository(session).list_all(
        category_id=category_id, ai_generated=ai_generated, graded=graded
    )


@router.post("/", response_model=Product)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> Product:
    """Create a product with its attribute values."""
    with transaction(session):
        _require_category(session, payload.category_id)
        product = Product(
            name=payload.name.strip(),
            description=payload.description,
            category_id=payload.category_id,
            created_by_id=user.id,
            ai_generated=payload.ai_generated,
            attributes=resolve_attribute_values(session, payload.attributes),
        )
        created = ProductRepository(session).create(product)
    return created


@router.get("/{product_id}", response_model=Product)
def get_product(
    product_id: str,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_user),
) -> Product:
    """Get a product by ID."""
    product = ProductRepository(session).get(product_id)
    if product is None:
        raise NotFoundError("Product not found", product_id=product_id)
    return product


@router.put("/{product_id}", response_model=Product)
def update_product(
    product_id: str,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_user),
) -> Product:
    """Update a product. A given ``attributes`` list replaces the set atomically."""
    repository = ProductRepository(session)
    with transaction(session):
        current = repository.get(product_id)
        if current is None:
            raise NotFoundError("Product not found", product_id=product_id)
        changes = payload.model_dump(exclude_unset=True, exclude={"attributes"})
        if changes.get("category_id"):
            _require_category(session, changes["category_id"])
        elif "category_id" in changes:
            changes.pop("category_id")
        repository.update(current.model_copy(update=changes))
        if payload.attributes is not None:
            repository.set_attribute_values(
                product_id, resolve_attribute_values(session, payload.attributes)
            )
    return repository.get(product_id)  # type: ignore[return-value]


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_user),
) -> dict[str, str]:
    """Delete a product and its attribute values."""
    if not ProductRepository(session).delete(product_id):
        raise NotFoundError("Product not found", product_id=product_id)
    session.commit()
    return {"message": "Product deleted successfully"}
