"""LLM provider repository for data access operations."""

from sqlmodel import Session, select

from catalog_grader.core.errors import NotFoundError
from catalog_grader.entities.core._base import copy_onto, flush_or_conflict

from .entity import LLMProviderConfig
from .table import LLMProviderTable


class LLMProviderRepository:
    """Repository for LLMProviderConfig data access operations."""

    def __init__(self, session: Session):
        self._session = session

    def get(self, provider_id: str) -> LLMProviderConfig | None:
        row = self._session.get(LLMProviderTable, provider_id)
        if row is None:
            return None
        return LLMProviderConfig.model_validate(row, from_attributes=True)

    def get_by_name(self, name: str) -> LLMProviderConfig | None:
        statement = select(LLMProviderTable).where(LLMProviderTable.name == name)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return LLMProviderConfig.model_validate(row, from_attributes=True)

    def list_all(self) -> list[LLMProviderConfig]:
        statement = select(LLMProviderTable).order_by(LLMProviderTable.name)
        rows = self._session.exec(statement).all()
        return [LLMProviderConfig.model_validate(row, from_attributes=True) for row in rows]

    def create(self, provider: LLMProviderConfig) -> LLMProviderConfig:
        row = LLMProviderTable.model_validate(provider, from_attributes=True)
        self._session.add(row)
        flush_or_conflict(self._session, f"Provider {provider.name!r} already exists")
        self._session.refresh(row)
        return LLMProviderConfig.model_validate(row, from_attributes=True)

    def update(self, provider: LLMProviderConfig) -> LLMProviderConfig:
        row = self._session.get(LLMProviderTable, provider.id)
        if row is None:
            raise NotFoundError("LLM provider not found", provider_id=provider.id)
        copy_onto(row, provider)
        self._session.add(row)
        flush_or_conflict(self._session, f"Provider {provider.name!r} already exists")
        self._session.refresh(row)
        return LLMProviderConfig.model_validate(row, from_attributes=True)

    def delete(self, provider_id: str) -> bool:
        row = self._session.get(LLMProviderTable, provider_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True
