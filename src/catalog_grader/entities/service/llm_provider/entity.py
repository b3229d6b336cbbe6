"""Entity: LLM provider configuration."""

from pydantic import Field

from catalog_grader.entities.core._base import Entity


class LLMProviderConfig(Entity):
    """Credentials and endpoint for an OpenAI-compatible completion API.

    The API key is write-only: it is accepted on input and never serialized.
    """

    name: str = Field(min_length=1, description="Unique provider name, e.g. OpenAI")
    api_key: str = Field(min_length=1, exclude=True)
    base_url: str | None = Field(default=None, description="Override of the API base URL")
    model: str | None = Field(default=None, description="Chat model; config default if unset")
