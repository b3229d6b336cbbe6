"""Unit tests for CSV product import."""

import pytest

from catalog_grader.core.errors import ValidationError
from catalog_grader.core.services import BulkUploader
from catalog_grader.entities import AttributeRepository, CategoryRepository, ProductRepository


@pytest.fixture
def uploader(session):
    return BulkUploader(session)


class TestBulkUploader:
    def test_imports_rows_with_attributes(self, uploader, session, plain_user):
        csv_text = (
            "name,category,description,Color,Battery Life\n"
            "Sony WH-1000XM5,Headphones,Noise cancelling,Black,30h\n"
            "Kindle Paperwhite,E-Readers,,,\n"
        )

        result = uploader.upload(csv_text, plain_user)

        assert result.created == 2
        products = ProductRepository(session).list_all()
        by_name = {p.name: p for p in products}
        sony = by_name["Sony WH-1000XM5"]
        assert sony.description == "Noise cancelling"
        assert sony.created_by_id == plain_user.id
        assert sony.ai_generated is False
        assert {(v.attribute_name, v.value) for v in sony.attributes} == {
            ("Color", "Black"),
            ("Battery Life", "30h"),
        }
        kindle = by_name["Kindle Paperwhite"]
        assert kindle.description is None
        assert kindle.attributes == []
        assert sorted(result.product_ids) == sorted(p.id for p in products)

    def test_reuses_existing_categories_and_attributes(
        self, uploader, session, category
    ):
        """Names resolve to existing rows instead of creating duplicates."""
        uploader.upload("name,category,Color\nA,Headphones,Red\nB,Headphones,Blue\n")

        categories = CategoryRepository(session).list_all()
        assert [c.name for c in categories] == ["Headphones"]
        assert [a.name for a in AttributeRepository(session).list_all()] == ["Color"]
        assert {p.category_id for p in ProductRepository(session).list_all()} == {category.id}

    def test_headers_are_case_insensitive_and_bom_is_ignored(self, uploader, session):
        result = uploader.upload("\ufeffName,CATEGORY\nWidget,Tools\n")

        assert result.created == 1
        assert CategoryRepository(session).get_by_name("Tools") is not None

    def test_missing_required_column(self, uploader):
        with pytest.raises(ValidationError, match="category"):
            uploader.upload("name,description\nWidget,Useful\n")

    def test_bad_row_aborts_whole_upload(self, uploader, session):
        """Nothing is stored when any row is invalid."""
        csv_text = "name,category\nWidget,Tools\n,Tools\n"

        with pytest.raises(ValidationError, match="Line 3"):
            uploader.upload(csv_text)

        assert ProductRepository(session).list_all() == []
        assert CategoryRepository(session).list_all() == []

    def test_header_only(self, uploader):
        assert uploader.upload("name,category\n").created == 0

    def test_empty_text(self, uploader):
        with pytest.raises(ValidationError):
            uploader.upload("")
