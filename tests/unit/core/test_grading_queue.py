"""Unit tests for the grading queue."""

import threading
from datetime import timedelta

import pytest
from sqlmodel import Session, SQLModel, create_engine

from catalog_grader.core.errors import ConflictError, NotFoundError, QueueEmptyError
from catalog_grader.core.services import GradingQueue
from catalog_grader.core.services.catalog import AttributeInput
from catalog_grader.entities import (
    Category,
    CategoryRepository,
    MetricType,
    PerformanceMetricRepository,
    Product,
    ProductRepository,
    ProductTable,
    User,
    UserRepository,
    UserRole,
)
from catalog_grader.entities.core._base import utcnow
from catalog_grader.runtime.config.config_data import ConfigData
from catalog_grader.runtime.context import with_context


@pytest.fixture
def queue(session):
    return GradingQueue(session)


@pytest.fixture
def second_grader(make_user):
    return make_user("Gil", UserRole.GRADER)


class TestClaimNext:
    """Serving products to graders."""

    def test_serves_oldest_ungraded_first(self, queue, make_product, grader_user):
        first = make_product("First")
        make_product("Second")

        claimed = queue.claim_next(grader_user)

        assert claimed.id == first.id
        assert claimed.claimed_by_id == grader_user.id
        assert claimed.claimed_at is not None

    def test_skips_hand_entered_products(self, queue, make_product, grader_user):
        make_product("Manual", ai_generated=False)
        generated = make_product("Generated")

        assert queue.claim_next(grader_user).id == generated.id

    def test_serves_hand_entered_products_when_configured(
        self, queue, make_product, grader_user
    ):
        manual = make_product("Manual", ai_generated=False)
        make_product("Generated")
        override = ConfigData()
        override.grading.ai_generated_only = False

        with with_context(override):
            assert queue.claim_next(grader_user).id == manual.id

    def test_two_graders_never_share_a_product(
        self, queue, make_product, grader_user, second_grader
    ):
        first = make_product()
        second = make_product()

        claimed_a = queue.claim_next(grader_user)
        claimed_b = queue.claim_next(second_grader)

        assert claimed_a.id == first.id
        assert claimed_b.id == second.id

    def test_refetch_returns_held_claim(self, queue, make_product, grader_user):
        """Asking again while holding a live claim gives the same product."""
        first = make_product()
        make_product()

        assert queue.claim_next(grader_user).id == first.id
        assert queue.claim_next(grader_user).id == first.id

    def test_expired_claim_is_served_again(
        self, queue, session, make_product, grader_user, second_grader
    ):
        first = make_product()
        queue.claim_next(grader_user)

        row = session.get(ProductTable, first.id, populate_existing=True)
        row.claimed_at = utcnow() - timedelta(hours=2)
        session.add(row)
        session.commit()

        claimed = queue.claim_next(second_grader)

        assert claimed.id == first.id
        assert claimed.claimed_by_id == second_grader.id

    def test_lost_race_moves_to_next_product(
        self, queue, session, make_product, grader_user, second_grader, monkeypatch
    ):
        """A product claimed between selection and update is skipped."""
        first = make_product()
        second = make_product()
        products = ProductRepository(session)
        original_try_claim = ProductRepository.try_claim

        def racing_try_claim(self, product_id, grader_id, now, live_after):
            if product_id == first.id:
                original_try_claim(self, product_id, second_grader.id, now, live_after)
            return original_try_claim(self, product_id, grader_id, now, live_after)

        monkeypatch.setattr(ProductRepository, "try_claim", racing_try_claim)

        claimed = queue.claim_next(grader_user)

        assert claimed.id == second.id
        assert products.get(first.id).claimed_by_id == second_grader.id

    def test_many_lost_races_do_not_empty_the_queue(
        self, queue, session, make_product, grader_user, second_grader, monkeypatch
    ):
        """Losing several races in a row still ends with the free product."""
        products = [make_product() for _ in range(6)]
        contested = {p.id for p in products[:5]}
        original_try_claim = ProductRepository.try_claim

        def racing_try_claim(self, product_id, grader_id, now, live_after):
            if product_id in contested:
                original_try_claim(self, product_id, second_grader.id, now, live_after)
            return original_try_claim(self, product_id, grader_id, now, live_after)

        monkeypatch.setattr(ProductRepository, "try_claim", racing_try_claim)

        claimed = queue.claim_next(grader_user)

        assert claimed.id == products[5].id
        assert claimed.claimed_by_id == grader_user.id
        repository = ProductRepository(session)
        assert all(
            repository.get(product_id).claimed_by_id == second_grader.id
            for product_id in contested
        )

    def test_empty_queue(self, queue, grader_user):
        with pytest.raises(QueueEmptyError) as exc_info:
            queue.claim_next(grader_user)

        assert exc_info.value.status_code == 404
        assert exc_info.value.to_payload() == {
            "detail": "No products to grade",
            "error": "queue_empty",
        }

    def test_empty_when_everything_is_claimed(
        self, queue, make_product, grader_user, second_grader
    ):
        make_product()
        queue.claim_next(grader_user)

        with pytest.raises(QueueEmptyError):
            queue.claim_next(second_grader)


class TestSubmit:
    """Recording grading decisions."""

    def test_graded_product_leaves_the_queue(self, queue, make_product, grader_user):
        first = make_product()
        second = make_product()

        queue.submit(first.id, grader_user, approved=True)

        assert queue.claim_next(grader_user).id == second.id
        queue.submit(second.id, grader_user, approved=False)
        with pytest.raises(QueueEmptyError):
            queue.claim_next(grader_user)

    def test_records_grade_and_clears_claim(self, queue, make_product, grader_user):
        product = make_product()
        queue.claim_next(grader_user)

        graded = queue.submit(product.id, grader_user, approved=True)

        assert graded.approved is True
        assert graded.graded_by_id == grader_user.id
        assert graded.graded_at is not None
        assert graded.claimed_by_id is None
        assert graded.claimed_at is None

    def test_each_submission_appends_accuracy_sample(
        self, queue, session, make_product, grader_user
    ):
        """Regrading overwrites the decision but keeps the metric history."""
        product = make_product()

        queue.submit(product.id, grader_user, approved=True)
        regraded = queue.submit(product.id, grader_user, approved=False)

        assert regraded.approved is False
        samples = PerformanceMetricRepository(session).list_all(
            metric_type=MetricType.HUMAN_ACCURACY
        )
        assert [s.value for s in samples] == [1.0, 0.0]

    def test_recategorizes_product(self, queue, session, make_product, grader_user):
        product = make_product()
        earbuds = CategoryRepository(session).create(Category(name="Earbuds"))
        session.commit()

        graded = queue.submit(product.id, grader_user, approved=True, category_id=earbuds.id)

        assert graded.category_id == earbuds.id

    def test_replaces_attributes(self, queue, make_product, grader_user):
        product = make_product()

        graded = queue.submit(
            product.id,
            grader_user,
            approved=True,
            attributes=[
                AttributeInput(name="Color", value="Black"),
                AttributeInput(name="Color", value="Silver"),
            ],
        )

        assert [(v.attribute_name, v.value) for v in graded.attributes] == [("Color", "Silver")]

    def test_empty_attribute_list_keeps_values(self, queue, make_product, grader_user):
        product = make_product()
        queue.submit(
            product.id,
            grader_user,
            approved=True,
            attributes=[AttributeInput(name="Color", value="Black")],
        )

        regraded = queue.submit(product.id, grader_user, approved=False, attributes=[])

        assert [(v.attribute_name, v.value) for v in regraded.attributes] == [("Color", "Black")]

    def test_unknown_product(self, queue, grader_user):
        with pytest.raises(NotFoundError):
            queue.submit("missing", grader_user, approved=True)

    def test_unknown_category_changes_nothing(
        self, queue, session, make_product, grader_user
    ):
        product = make_product()

        with pytest.raises(NotFoundError):
            queue.submit(product.id, grader_user, approved=True, category_id="missing")

        assert ProductRepository(session).get(product.id).graded_at is None
        assert PerformanceMetricRepository(session).list_all() == []


class TestRelease:
    def test_release_returns_product_to_queue(
        self, queue, make_product, grader_user, second_grader
    ):
        product = make_product()
        queue.claim_next(grader_user)

        released = queue.release(product.id, grader_user)

        assert released.claimed_by_id is None
        assert queue.claim_next(second_grader).id == product.id

    def test_cannot_release_someone_elses_claim(
        self, queue, make_product, grader_user, second_grader
    ):
        product = make_product()
        queue.claim_next(grader_user)

        with pytest.raises(ConflictError):
            queue.release(product.id, second_grader)

    def test_unknown_product(self, queue, grader_user):
        with pytest.raises(NotFoundError):
            queue.release("missing", grader_user)


class TestConcurrentClaims:
    """Graders racing on separate connections to one database file."""

    GRADERS = 8

    @pytest.fixture
    def file_engine(self, tmp_path):
        engine = create_engine(
            f"sqlite:///{tmp_path / 'queue.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        SQLModel.metadata.create_all(engine)
        yield engine
        engine.dispose()

    def test_single_product_is_claimed_once(self, file_engine):
        with Session(file_engine, expire_on_commit=False) as setup:
            category = CategoryRepository(setup).create(Category(name="Headphones"))
            product = ProductRepository(setup).create(
                Product(name="Only one", category_id=category.id, ai_generated=True)
            )
            graders = [
                UserRepository(setup).create(
                    User(
                        name=f"Grader {i}",
                        email=f"grader{i}@example.com",
                        role=UserRole.GRADER,
                    )
                )
                for i in range(self.GRADERS)
            ]
            setup.commit()

        barrier = threading.Barrier(self.GRADERS)
        claimed: list[str] = []
        empty: list[str] = []
        failures: list[BaseException] = []

        def grade(grader):
            with Session(file_engine, expire_on_commit=False) as session:
                barrier.wait()
                try:
                    claimed.append(GradingQueue(session).claim_next(grader).id)
                except QueueEmptyError:
                    empty.append(grader.id)
                except Exception as exc:
                    failures.append(exc)

        threads = [threading.Thread(target=grade, args=(g,)) for g in graders]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        assert failures == []
        assert claimed == [product.id]
        assert len(empty) == self.GRADERS - 1
