"""Three-step LLM product generation followed by one transactional persist."""

import json
import re
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from catalog_grader.core.errors import (
    CatalogError,
    GenerationError,
    NotFoundError,
    ValidationError,
)
from catalog_grader.core.services.database.db_utils import transaction
from catalog_grader.core.services.llm.completion_provider import CompletionProvider
from catalog_grader.entities.core.user import User
from catalog_grader.entities.service.attribute import AttributeRepository
from catalog_grader.entities.service.category import Category, CategoryRepository
from catalog_grader.entities.service.llm_provider import (
    LLMProviderConfig,
    LLMProviderRepository,
)
from catalog_grader.entities.service.product import (
    Product,
    ProductAttributeValue,
    ProductRepository,
)
from catalog_grader.entities.service.prompt import PromptRepository, PromptType
from catalog_grader.runtime.context import get_config

DEFAULT_PROMPTS: dict[PromptType, tuple[str, str]] = {
    PromptType.GENERATE_CANDIDATES: (
        "You are a helpful assistant that generates product information.",
        "Generate a list of {count} product names similar to: {product}\n"
        "Reply with one product name per line and nothing else.",
    ),
    PromptType.IDENTIFY_SUBCATEGORY: (
        "You are a helpful assistant that identifies product categories.",
        "Identify the most appropriate subcategory for this product: {product}\n"
        "Reply with the subcategory name only.",
    ),
    PromptType.MAP_ATTRIBUTES: (
        "You are a helpful assistant that identifies product attributes.",
        "List {count} key attributes for this product: {product}. "
        'Format as a JSON array of objects with "name" and "value" keys. '
        "Reply with the JSON only.",
    ),
}

_LIST_MARKER = re.compile(r"^(?:[-*•]+|\d+[.)])\s*")
_QUOTES = "\"'`“”‘’"
_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def render_prompt(template: str, *, product: str, count: int) -> str:
    """Fill ``{product}`` and ``{count}``; any other braces stay as written."""
    return template.replace("{product}", product).replace("{count}", str(count))


def normalize_candidates(text: str, limit: int) -> list[str]:
    """Turn a free-text list reply into at most ``limit`` distinct names.

    Lines are stripped of whitespace, one leading list marker (``-``, ``*``,
    ``•``, ``1.``, ``1)``) and surrounding quotes. Blank lines and
    case-insensitive repeats are dropped, first occurrence wins.
    """
    names: list[str] = []
    seen: set[str] = set()
    for line in text.splitlines():
        name = _LIST_MARKER.sub("", line.strip(), count=1).strip().strip(_QUOTES).strip()
        if not name:
            continue
        key = name.casefold()
        if key in seen:
            continue
        seen.add(key)
        names.append(name)
        if len(names) >= limit:
            break
    return names


def clean_subcategory(text: str) -> str:
    """Strip whitespace, surrounding quotes and one trailing period."""
    name = text.strip().strip(_QUOTES).strip()
    if name.endswith("."):
        name = name[:-1].rstrip()
    return name.strip(_QUOTES).strip()


def parse_attribute_mapping(text: str) -> list[tuple[str, str]]:
    """Parse a JSON array of ``{"name", "value"}`` objects.

    The reply must be the array and nothing else; a single surrounding
    markdown code fence is tolerated. Scalar values are stringified and a
    repeated name keeps its last value.

    Raises:
        ValueError: If the reply is not such an array, or the array is empty.
    """
    raw = text.strip()
    fenced = _FENCE.match(raw)
    if fenced:
        raw = fenced.group(1)

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Attribute mapping is not valid JSON: {e.msg}") from e

    if not isinstance(payload, list):
        raise ValueError("Attribute mapping must be a JSON array")
    if not payload:
        raise ValueError("Attribute mapping is empty")

    mapped: dict[str, str] = {}
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ValueError(f"Attribute #{index} is not an object")
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Attribute #{index} has no name")
        value = item.get("value")
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, (int, float)):
            value = str(value)
        elif not isinstance(value, str):
            raise ValueError(f"Attribute {name!r} has a non-scalar value")
        mapped[name.strip()] = value
    return list(mapped.items())


@dataclass
class GenerationResult:
    candidates: list[str]
    subcategory: Category
    attributes: list[tuple[str, str]]
    product: Product
    timings_ms: dict[str, float] = field(default_factory=dict)


class GenerationPipeline:
    """Seed text in, persisted AI-generated product out.

    The three completion steps have no side effects; only the final persist
    writes, inside one transaction. Any failure surfaces as a single
    GenerationError naming the failing step.
    """

    def __init__(self, session: Session, provider: CompletionProvider):
        self._session = session
        self._provider = provider
        self._timings: dict[str, float] = {}

    def run(
        self, seed_text: str, user: User, provider_name: str | None = None
    ) -> GenerationResult:
        seed = (seed_text or "").strip()
        if not seed:
            raise ValidationError("Seed text must not be blank")

        self._timings = {}
        llm_config = get_config().llm
        log = logger.bind(user_id=user.id)
        log.info("Generation started for {!r}", seed)

        with self._step("provider"):
            provider = self._resolve_provider(provider_name)

        with self._step("list_candidates"):
            reply = self._complete(
                provider,
                PromptType.GENERATE_CANDIDATES,
                product=seed,
                count=llm_config.candidate_count,
            )
            candidates = normalize_candidates(reply, llm_config.candidate_count)

        with self._step("identify_subcategory"):
            reply = self._complete(
                provider,
                PromptType.IDENTIFY_SUBCATEGORY,
                product=seed,
                count=llm_config.candidate_count,
            )
            name = clean_subcategory(reply)
            category = CategoryRepository(self._session).get_by_name(name)
            if category is None:
                raise NotFoundError(f"No category named {name!r}", subcategory=name)

        with self._step("map_attributes"):
            reply = self._complete(
                provider,
                PromptType.MAP_ATTRIBUTES,
                product=seed,
                count=llm_config.attribute_count,
            )
            attributes = parse_attribute_mapping(reply)

        with self._step("persist"):
            with transaction(self._session):
                product = self._persist(seed, category, attributes, user)

        log.bind(product_id=product.id, timings_ms=self._timings).info("Generation finished")
        return GenerationResult(
            candidates=candidates,
            subcategory=category,
            attributes=attributes,
            product=product,
            timings_ms=dict(self._timings),
        )

    @contextmanager
    def _step(self, name: str) -> Iterator[None]:
        started = time.perf_counter()
        outcome = "error"
        try:
            yield
            outcome = "ok"
        except GenerationError:
            raise
        except (CatalogError, ValueError, SQLAlchemyError) as e:
            logger.bind(step=name, error_type=type(e).__name__).warning(
                "Generation step failed: {}", e
            )
            raise GenerationError(
                f"Generation failed at step {name}: {e}", step=name, cause=e
            ) from e
        finally:
            elapsed = round((time.perf_counter() - started) * 1000, 1)
            self._timings[name] = elapsed
            logger.bind(step=name, duration_ms=elapsed, outcome=outcome).debug(
                "generation.step"
            )

    def _resolve_provider(self, provider_name: str | None) -> LLMProviderConfig:
        repository = LLMProviderRepository(self._session)
        if provider_name:
            provider = repository.get_by_name(provider_name)
            if provider is None:
                raise NotFoundError(f"LLM provider {provider_name!r} is not configured")
            return provider

        provider = repository.get_by_name(get_config().llm.default_provider)
        if provider is not None:
            return provider

        configured = repository.list_all()
        if len(configured) == 1:
            return configured[0]
        raise NotFoundError("LLM provider not configured")

    def _complete(
        self, provider: LLMProviderConfig, prompt_type: PromptType, *, product: str, count: int
    ) -> str:
        system, template = DEFAULT_PROMPTS[prompt_type]
        override = PromptRepository(self._session).latest_of_type(prompt_type)
        if override is not None:
            template = override.content
        prompt = render_prompt(template, product=product, count=count)
        return self._provider.complete(provider, prompt, system=system)

    def _persist(
        self,
        seed: str,
        category: Category,
        attributes: list[tuple[str, str]],
        user: User,
    ) -> Product:
        attribute_repository = AttributeRepository(self._session)
        values = [
            ProductAttributeValue(
                attribute_id=attribute_repository.get_or_create(name).id, value=value
            )
            for name, value in attributes
        ]
        product = Product(
            name=seed,
            category_id=category.id,
            created_by_id=user.id,
            ai_generated=True,
            attributes=values,
        )
        return ProductRepository(self._session).create(product)
