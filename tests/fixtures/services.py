from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass, field

import pytest
from fastapi.testclient import TestClient

from catalog_grader.api.http.app import app
from catalog_grader.api.http.app_data import ApplicationDependencies
from catalog_grader.core.errors import ProviderError
from catalog_grader.core.services import (
    CompletionProvider,
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
)
from catalog_grader.entities import LLMProviderConfig


@dataclass
class RecordedCall:
    provider: str
    prompt: str
    system: str | None


@dataclass
class FakeCompletionProvider(CompletionProvider):
    """Answers completions from a script, one reply per call.

    A scripted ``ProviderError`` is raised instead of returned.
    """

    replies: list[str | ProviderError] = field(default_factory=list)
    calls: list[RecordedCall] = field(default_factory=list)

    def script(self, *replies: str | ProviderError) -> None:
        self.replies = list(replies)

    def complete(
        self, provider: LLMProviderConfig, prompt: str, *, system: str | None = None
    ) -> str:
        self.calls.append(RecordedCall(provider=provider.name, prompt=prompt, system=system))
        if not self.replies:
            raise ProviderError("No scripted reply left", kind="unavailable")
        reply = self.replies.pop(0)
        if isinstance(reply, ProviderError):
            raise reply
        return reply


@pytest.fixture
def fake_provider() -> FakeCompletionProvider:
    return FakeCompletionProvider()


@pytest.fixture
def client(
    database_service: DbSessionService, fake_provider: FakeCompletionProvider
) -> Generator[TestClient]:
    """Test client wired to the per-test database and the scripted provider.

    The lifespan is not run; dependencies are installed directly.
    """
    app.state.app_dependencies = ApplicationDependencies(
        jwt_verify_service=JwtVerificationService(),
        jwt_generation_service=JwtGeneratorService(),
        database_service=database_service,
        completion_provider=fake_provider,
    )
    yield TestClient(app)
    del app.state.app_dependencies
