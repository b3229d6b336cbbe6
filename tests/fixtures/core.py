from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import datetime, timedelta

import pytest
from sqlalchemy import Engine, StaticPool
from sqlmodel import Session, SQLModel, create_engine

from catalog_grader.core.services import DbSessionService
from catalog_grader.entities import (
    Category,
    CategoryRepository,
    LLMProviderConfig,
    LLMProviderRepository,
    Product,
    ProductRepository,
)
from catalog_grader.entities.core._base import utcnow


@pytest.fixture
def engine() -> Generator[Engine]:
    """A fresh in-memory database per test, shared by every session on it."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[Session]:
    """Create a fresh database session for testing."""
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def database_service(engine: Engine) -> DbSessionService:
    return DbSessionService(engine)


@pytest.fixture
def category(session: Session) -> Category:
    created = CategoryRepository(session).create(Category(name="Headphones"))
    session.commit()
    return created


@pytest.fixture
def llm_provider(session: Session) -> LLMProviderConfig:
    created = LLMProviderRepository(session).create(
        LLMProviderConfig(name="OpenAI", api_key="sk-test-key", model="gpt-test")
    )
    session.commit()
    return created


@pytest.fixture
def make_product(session: Session, category: Category) -> Callable[..., Product]:
    """Create and commit products with strictly increasing creation times."""
    base = utcnow() - timedelta(hours=1)
    counter = {"n": 0}

    def _make(
        name: str | None = None,
        *,
        ai_generated: bool = True,
        created_at: datetime | None = None,
        category_id: str | None = None,
    ) -> Product:
        counter["n"] += 1
        product = ProductRepository(session).create(
            Product(
                name=name or f"Product {counter['n']}",
                category_id=category_id or category.id,
                ai_generated=ai_generated,
                created_at=created_at or base + timedelta(seconds=counter["n"]),
            )
        )
        session.commit()
        return product

    return _make
