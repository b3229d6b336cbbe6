"""Product generation endpoint."""

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlmodel import Session

from catalog_grader.api.http.deps import get_completion_provider, get_current_user, get_session
from catalog_grader.core.services import CompletionProvider, GenerationPipeline
from catalog_grader.entities.core._base import CamelModel
from catalog_grader.entities.core.user import User
from catalog_grader.entities.service.category import Category
from catalog_grader.entities.service.product import Product

router = APIRouter()


class GenerateRequest(CamelModel):
    seed_text: str = Field(min_length=1, description="Product name or description to start from")
    provider_name: str | None = Field(default=None, description="LLM provider config to use")


class GeneratedAttribute(CamelModel):
    name: str
    value: str


class GenerateResponse(CamelModel):
    candidates: list[str]
    subcategory: Category
    attributes: list[GeneratedAttribute]
    saved_product: Product


@router.post("/generate", response_model=GenerateResponse)
def generate_product(
    payload: GenerateRequest,
    session: Session = Depends(get_session),
    provider: CompletionProvider = Depends(get_completion_provider),
    user: User = Depends(get_current_user),
) -> GenerateResponse:
    """Run the generation pipeline and return every intermediate result."""
    result = GenerationPipeline(session, provider).run(
        payload.seed_text, user, provider_name=payload.provider_name
    )
    return GenerateResponse(
        candidates=result.candidates,
        subcategory=result.subcategory,
        attributes=[GeneratedAttribute(name=n, value=v) for n, v in result.attributes],
        saved_product=result.product,
    )
