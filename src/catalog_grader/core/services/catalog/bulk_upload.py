"""CSV product import."""

import csv
import io
from dataclasses import dataclass, field

from loguru import logger
from sqlmodel import Session

from catalog_grader.core.errors import ValidationError
from catalog_grader.core.services.database.db_utils import transaction
from catalog_grader.entities.core.user import User
from catalog_grader.entities.service.attribute import AttributeRepository
from catalog_grader.entities.service.category import CategoryRepository
from catalog_grader.entities.service.product import (
    Product,
    ProductAttributeValue,
    ProductRepository,
)

RESERVED_COLUMNS = ("name", "category", "description")


@dataclass
class BulkUploadResult:
    created: int
    product_ids: list[str] = field(default_factory=list)


class BulkUploader:
    """Imports products from CSV text in a single transaction.

    ``name`` and ``category`` columns are required (header match is
    case-insensitive), ``description`` is optional and every other column is
    an attribute. Categories are found by name or created as roots;
    attributes connect-or-create by name. Empty attribute cells are skipped.
    """

    def __init__(self, session: Session):
        self._session = session

    def upload(self, csv_text: str, user: User | None = None) -> BulkUploadResult:
        reader = csv.DictReader(io.StringIO(csv_text.lstrip("\ufeff")))
        if not reader.fieldnames:
            raise ValidationError("CSV has no header row")

        columns = {name.strip().lower(): name for name in reader.fieldnames if name}
        missing = [c for c in ("name", "category") if c not in columns]
        if missing:
            raise ValidationError(f"CSV is missing required column(s): {', '.join(missing)}")
        attribute_columns = [
            (header.strip(), header)
            for key, header in columns.items()
            if key not in RESERVED_COLUMNS
        ]

        categories = CategoryRepository(self._session)
        attributes = AttributeRepository(self._session)
        products = ProductRepository(self._session)
        result = BulkUploadResult(created=0)

        with transaction(self._session):
            for row in reader:
                line = reader.line_num
                name = (row.get(columns["name"]) or "").strip()
                category_name = (row.get(columns["category"]) or "").strip()
                if not name:
                    raise ValidationError(f"Line {line}: name is required", line=line)
                if not category_name:
                    raise ValidationError(f"Line {line}: category is required", line=line)

                description = None
                if "description" in columns:
                    description = (row.get(columns["description"]) or "").strip() or None

                values = []
                for attribute_name, header in attribute_columns:
                    cell = (row.get(header) or "").strip()
                    if not cell:
                        continue
                    attribute = attributes.get_or_create(attribute_name)
                    values.append(ProductAttributeValue(attribute_id=attribute.id, value=cell))

                product = products.create(
                    Product(
                        name=name,
                        description=description,
                        category_id=categories.get_or_create(category_name).id,
                        created_by_id=user.id if user else None,
                        attributes=values,
                    )
                )
                result.product_ids.append(product.id)
                result.created += 1

        logger.bind(created=result.created, user_id=user.id if user else None).info(
            "Bulk upload imported products"
        )
        return result
