"""Prompt template repository for data access operations."""

from sqlmodel import Session, col, select

from catalog_grader.core.errors import NotFoundError
from catalog_grader.entities.core._base import copy_onto, flush_or_conflict

from .entity import PromptTemplate, PromptType
from .table import PromptTable


class PromptRepository:
    """Repository for PromptTemplate data access operations."""

    def __init__(self, session: Session):
        self._session = session

    def get(self, prompt_id: str) -> PromptTemplate | None:
        row = self._session.get(PromptTable, prompt_id)
        if row is None:
            return None
        return PromptTemplate.model_validate(row, from_attributes=True)

    def latest_of_type(self, prompt_type: PromptType) -> PromptTemplate | None:
        """Most recently updated template of ``prompt_type``."""
        statement = (
            select(PromptTable)
            .where(PromptTable.type == prompt_type.value)
            .order_by(col(PromptTable.updated_at).desc(), PromptTable.id)
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return PromptTemplate.model_validate(row, from_attributes=True)

    def list_all(self) -> list[PromptTemplate]:
        statement = select(PromptTable).order_by(PromptTable.name)
        rows = self._session.exec(statement).all()
        return [PromptTemplate.model_validate(row, from_attributes=True) for row in rows]

    def create(self, prompt: PromptTemplate) -> PromptTemplate:
        row = PromptTable.model_validate(prompt, from_attributes=True)
        self._session.add(row)
        flush_or_conflict(self._session, "Prompt could not be created")
        self._session.refresh(row)
        return PromptTemplate.model_validate(row, from_attributes=True)

    def update(self, prompt: PromptTemplate) -> PromptTemplate:
        row = self._session.get(PromptTable, prompt.id)
        if row is None:
            raise NotFoundError("Prompt not found", prompt_id=prompt.id)
        copy_onto(row, prompt)
        self._session.add(row)
        flush_or_conflict(self._session, "Prompt could not be updated")
        self._session.refresh(row)
        return PromptTemplate.model_validate(row, from_attributes=True)

    def delete(self, prompt_id: str) -> bool:
        row = self._session.get(PromptTable, prompt_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True
