"""LLM provider configuration API router (admin only)."""

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlmodel import Session

from catalog_grader.api.http.deps import get_session, require_role
from catalog_grader.core.errors import NotFoundError
from catalog_grader.entities.core._base import CamelModel
from catalog_grader.entities.core.user import UserRole
from catalog_grader.entities.service.llm_provider import (
    LLMProviderConfig,
    LLMProviderRepository,
)

router = APIRouter(dependencies=[Depends(require_role(UserRole.ADMIN))])


class LLMProviderCreate(CamelModel):
    name: str = Field(min_length=1)
    api_key: str = Field(min_length=1)
    base_url: str | None = None
    model: str | None = None


class LLMProviderUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    api_key: str | None = Field(default=None, min_length=1)
    base_url: str | None = None
    model: str | None = None


@router.get("/", response_model=list[LLMProviderConfig])
def list_providers(session: Session = Depends(get_session)) -> list[LLMProviderConfig]:
    """List provider configs. API keys are never returned."""
    return LLMProviderRepository(session).list_all()


@router.post("/", response_model=LLMProviderConfig)
def create_provider(
    payload: LLMProviderCreate, session: Session = Depends(get_session)
) -> LLMProviderConfig:
    """Store a provider config."""
    created = LLMProviderRepository(session).create(
        LLMProviderConfig.model_validate(payload.model_dump())
    )
    session.commit()
    return created


@router.get("/{provider_id}", response_model=LLMProviderConfig)
def get_provider(
    provider_id: str, session: Session = Depends(get_session)
) -> LLMProviderConfig:
    provider = LLMProviderRepository(session).get(provider_id)
    if provider is None:
        raise NotFoundError("LLM provider not found", provider_id=provider_id)
    return provider


@router.put("/{provider_id}", response_model=LLMProviderConfig)
def update_provider(
    provider_id: str,
    payload: LLMProviderUpdate,
    session: Session = Depends(get_session),
) -> LLMProviderConfig:
    """Update a provider config; an omitted apiKey keeps the stored key."""
    repository = LLMProviderRepository(session)
    current = repository.get(provider_id)
    if current is None:
        raise NotFoundError("LLM provider not found", provider_id=provider_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("api_key") is None:
        changes.pop("api_key", None)
    updated = repository.update(current.model_copy(update=changes))
    session.commit()
    return updated


@router.delete("/{provider_id}")
def delete_provider(
    provider_id: str, session: Session = Depends(get_session)
) -> dict[str, str]:
    if not LLMProviderRepository(session).delete(provider_id):
        raise NotFoundError("LLM provider not found", provider_id=provider_id)
    session.commit()
    return {"message": "LLM provider deleted successfully"}
