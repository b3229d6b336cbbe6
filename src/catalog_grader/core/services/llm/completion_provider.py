"""Text completion over OpenAI-compatible chat APIs."""

import time
from abc import ABC, abstractmethod

import httpx
from loguru import logger
from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    OpenAI,
    RateLimitError,
)

from catalog_grader.core.errors import ProviderError
from catalog_grader.entities.service.llm_provider import LLMProviderConfig
from catalog_grader.runtime.context import get_config


class CompletionProvider(ABC):
    """Turns a prompt into completion text using a stored provider config."""

    @abstractmethod
    def complete(
        self, provider: LLMProviderConfig, prompt: str, *, system: str | None = None
    ) -> str:
        """Return the completion text.

        Raises:
            ProviderError: On timeout, quota exhaustion, an unreachable or
                failing endpoint, or a response without text.
        """


class OpenAICompletionProvider(CompletionProvider):
    """Chat-completions client built per call from the provider config.

    SDK retries are disabled; the configured timeout bounds every call.
    """

    def _build_client(self, provider: LLMProviderConfig, timeout: float) -> tuple[OpenAI, httpx.Client]:
        http_client = httpx.Client(timeout=timeout)
        client = OpenAI(
            api_key=provider.api_key,
            base_url=provider.base_url or None,
            http_client=http_client,
            max_retries=0,
        )
        return client, http_client

    def complete(
        self, provider: LLMProviderConfig, prompt: str, *, system: str | None = None
    ) -> str:
        llm_config = get_config().llm
        model = provider.model or llm_config.default_model
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        log = logger.bind(provider=provider.name, model=model)
        client, http_client = self._build_client(provider, llm_config.timeout_seconds)
        started = time.perf_counter()
        try:
            response = client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=llm_config.max_tokens,
            )
        except APITimeoutError as e:
            log.warning("Completion timed out after {}s", llm_config.timeout_seconds)
            raise ProviderError("Completion request timed out", kind="timeout") from e
        except APIConnectionError as e:
            log.error("Network error while calling completion API: {}", e)
            raise ProviderError("Completion endpoint unreachable", kind="unavailable") from e
        except RateLimitError as e:
            log.warning("Completion API rate limited or out of quota")
            raise ProviderError("Completion quota exhausted", kind="quota") from e
        except APIStatusError as e:
            body = e.response.text if e.response is not None else None
            log.error(
                "Completion API returned {}. Body preview: {!r}",
                e.status_code,
                body[:300] if body else None,
            )
            kind = "quota" if e.status_code in (402, 429) else "unavailable"
            raise ProviderError(
                f"Completion API returned {e.status_code}", kind=kind, status=e.status_code
            ) from e
        finally:
            http_client.close()

        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            log.warning("Completion returned no text")
            raise ProviderError("Completion returned no text", kind="malformed")

        log.bind(duration_ms=elapsed_ms).debug("Completion received")
        return content
