"""CSV bulk upload endpoint."""

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from catalog_grader.api.http.deps import get_current_user, get_session
from catalog_grader.core.errors import ValidationError
from catalog_grader.core.services.catalog import BulkUploader
from catalog_grader.entities.core._base import CamelModel
from catalog_grader.entities.core.user import User

router = APIRouter()


class BulkUploadResponse(CamelModel):
    message: str
    products_created: int
    product_ids: list[str]


@router.post("/bulk-upload", response_model=BulkUploadResponse)
async def bulk_upload(
    request: Request,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> BulkUploadResponse:
    """Import products from a CSV request body (``text/csv``)."""
    raw = await request.body()
    try:
        csv_text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValidationError("CSV body must be UTF-8") from e
    if not csv_text.strip():
        raise ValidationError("CSV body is empty")

    result = await run_in_threadpool(BulkUploader(session).upload, csv_text, user)
    return BulkUploadResponse(
        message="Bulk upload successful",
        products_created=result.created,
        product_ids=result.product_ids,
    )
