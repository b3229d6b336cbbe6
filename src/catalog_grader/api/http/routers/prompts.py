"""Prompt template API router (admin only)."""

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlmodel import Session

from catalog_grader.api.http.deps import get_session, require_role
from catalog_grader.core.errors import NotFoundError
from catalog_grader.entities.core._base import CamelModel
from catalog_grader.entities.core.user import UserRole
from catalog_grader.entities.service.prompt import (
    PromptRepository,
    PromptTemplate,
    PromptType,
)

router = APIRouter(dependencies=[Depends(require_role(UserRole.ADMIN))])


class PromptCreate(CamelModel):
    name: str = Field(min_length=1)
    content: str = Field(min_length=1)
    type: PromptType = PromptType.CUSTOM


class PromptUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    content: str | None = Field(default=None, min_length=1)
    type: PromptType | None = None


@router.get("/", response_model=list[PromptTemplate])
def list_prompts(session: Session = Depends(get_session)) -> list[PromptTemplate]:
    return PromptRepository(session).list_all()


@router.post("/", response_model=PromptTemplate)
def create_prompt(
    payload: PromptCreate, session: Session = Depends(get_session)
) -> PromptTemplate:
    created = PromptRepository(session).create(PromptTemplate.model_validate(payload.model_dump()))
    session.commit()
    return created


@router.get("/{prompt_id}", response_model=PromptTemplate)
def get_prompt(prompt_id: str, session: Session = Depends(get_session)) -> PromptTemplate:
    prompt = PromptRepository(session).get(prompt_id)
    if prompt is None:
        raise NotFoundError("Prompt not found", prompt_id=prompt_id)
    return prompt


@router.put("/{prompt_id}", response_model=PromptTemplate)
def update_prompt(
    prompt_id: str,
    payload: PromptUpdate,
    session: Session = Depends(get_session),
) -> PromptTemplate:
    repository = PromptRepository(session)
    current = repository.get(prompt_id)
    if current is None:
        raise NotFoundError("Prompt not found", prompt_id=prompt_id)
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    updated = repository.update(current.model_copy(update=changes))
    session.commit()
    return updated


@router.delete("/{prompt_id}")
def delete_prompt(prompt_id: str, session: Session = Depends(get_session)) -> dict[str, str]:
    if not PromptRepository(session).delete(prompt_id):
        raise NotFoundError("Prompt not found", prompt_id=prompt_id)
    session.commit()
    return {"message": "Prompt deleted successfully"}
