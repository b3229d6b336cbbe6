"""Catalog write helpers shared by the API, grading and bulk upload."""

from .attribute_values import AttributeInput, resolve_attribute_values
from .bulk_upload import BulkUploader, BulkUploadResult

__all__ = ["AttributeInput", "BulkUploadResult", "BulkUploader", "resolve_attribute_values"]
