"""Unit tests for the category tree."""

import pytest

from catalog_grader.core.errors import ConflictError, NotFoundError, ValidationError
from catalog_grader.entities import Category, CategoryRepository


@pytest.fixture
def repository(session):
    return CategoryRepository(session)


class TestCategoryRepository:
    def test_create_child(self, repository):
        parent = repository.create(Category(name="Audio"))
        child = repository.create(Category(name="Headphones", parent_id=parent.id))

        assert child.parent_id == parent.id
        assert [c.id for c in repository.list_children(parent.id)] == [child.id]

    def test_duplicate_name_conflicts(self, repository):
        repository.create(Category(name="Audio"))

        with pytest.raises(ConflictError):
            repository.create(Category(name="Audio"))

    def test_missing_parent(self, repository):
        with pytest.raises(NotFoundError):
            repository.create(Category(name="Orphan", parent_id="missing"))

    def test_cannot_parent_itself(self, repository):
        audio = repository.create(Category(name="Audio"))

        with pytest.raises(ValidationError):
            repository.update(audio.model_copy(update={"parent_id": audio.id}))

    def test_cannot_create_cycle(self, repository):
        """Moving an ancestor under its own descendant is rejected."""
        audio = repository.create(Category(name="Audio"))
        headphones = repository.create(Category(name="Headphones", parent_id=audio.id))
        earbuds = repository.create(Category(name="Earbuds", parent_id=headphones.id))

        with pytest.raises(ValidationError):
            repository.update(audio.model_copy(update={"parent_id": earbuds.id}))

    def test_reparent_to_root(self, repository):
        audio = repository.create(Category(name="Audio"))
        headphones = repository.create(Category(name="Headphones", parent_id=audio.id))

        moved = repository.update(headphones.model_copy(update={"parent_id": None}))

        assert moved.parent_id is None

    def test_delete_with_children_conflicts(self, repository):
        audio = repository.create(Category(name="Audio"))
        repository.create(Category(name="Headphones", parent_id=audio.id))

        with pytest.raises(ConflictError):
            repository.delete(audio.id)

        assert repository.get(audio.id) is not None

    def test_delete_with_products_conflicts(self, repository, make_product, category):
        make_product(category_id=category.id)

        with pytest.raises(ConflictError, match="1 product"):
            repository.delete(category.id)

    def test_delete_leaf(self, repository):
        audio = repository.create(Category(name="Audio"))

        assert repository.delete(audio.id) is True
        assert repository.get(audio.id) is None
        assert repository.delete(audio.id) is False

    def test_get_or_create(self, repository):
        created = repository.get_or_create("Audio")

        assert repository.get_or_create("Audio").id == created.id
        assert len(repository.list_all()) == 1
