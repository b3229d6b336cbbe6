"""Generation, grading, bulk upload and metrics endpoints."""

from catalog_grader.core.errors import ProviderError
from catalog_grader.entities import UserRole

CANDIDATES = "- Sony WH-1000XM4\n- Bose QC45\n- AirPods Max"
MAPPING = '[{"name": "Color", "value": "Black"}]'


class TestGenerationApi:
    def test_generate_returns_intermediate_results(
        self, client, user_headers, fake_provider, category, llm_provider
    ):
        fake_provider.script(CANDIDATES, "Headphones", MAPPING)

        response = client.post(
            "/generate", json={"seedText": "Sony WH-1000XM5"}, headers=user_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["candidates"] == ["Sony WH-1000XM4", "Bose QC45", "AirPods Max"]
        assert body["subcategory"]["id"] == category.id
        assert body["attributes"] == [{"name": "Color", "value": "Black"}]
        assert body["savedProduct"]["aiGenerated"] is True
        assert body["savedProduct"]["name"] == "Sony WH-1000XM5"

    def test_failure_reports_step(
        self, client, user_headers, fake_provider, category, llm_provider
    ):
        fake_provider.script(CANDIDATES, "Speakers", MAPPING)

        response = client.post(
            "/generate", json={"seedText": "Sony WH-1000XM5"}, headers=user_headers
        )

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "generation_failed"
        assert body["step"] == "identify_subcategory"
        assert client.get("/products/", headers=user_headers).json() == []

    def test_provider_failure_reports_step(
        self, client, user_headers, fake_provider, category, llm_provider
    ):
        fake_provider.script(ProviderError("Completion quota exhausted", kind="quota"))

        response = client.post(
            "/generate", json={"seedText": "Sony WH-1000XM5"}, headers=user_headers
        )

        assert response.status_code == 500
        assert response.json()["step"] == "list_candidates"

    def test_blank_seed(self, client, user_headers):
        response = client.post("/generate", json={"seedText": "   "}, headers=user_headers)

        assert response.status_code == 422

    def test_requires_authentication(self, client):
        assert client.post("/generate", json={"seedText": "Kindle"}).status_code == 401


class TestGradingApi:
    def test_claim_and_submit(self, client, grader_headers, grader_user, make_product):
        product = make_product()

        claimed = client.get("/grade/next", headers=grader_headers)
        assert claimed.status_code == 200
        assert claimed.json()["id"] == product.id
        assert claimed.json()["claimedById"] == grader_user.id

        graded = client.post(
            "/grade/submit",
            json={
                "productId": product.id,
                "approved": False,
                "attributes": [{"name": "Color", "value": "Silver"}],
            },
            headers=grader_headers,
        )
        assert graded.status_code == 200
        body = graded.json()
        assert body["approved"] is False
        assert body["gradedById"] == grader_user.id
        assert body["claimedById"] is None
        assert [(a["attributeName"], a["value"]) for a in body["attributes"]] == [
            ("Color", "Silver")
        ]

        empty = client.get("/grade/next", headers=grader_headers)
        assert empty.status_code == 404
        assert empty.json()["error"] == "queue_empty"
        assert empty.json()["detail"] == "No products to grade"

    def test_two_graders_get_different_products(
        self, client, grader_headers, make_user, auth_headers, make_product
    ):
        other_headers = auth_headers(make_user("Gil", UserRole.GRADER))
        first = make_product()
        second = make_product()

        a = client.get("/grade/next", headers=grader_headers).json()
        b = client.get("/grade/next", headers=other_headers).json()

        assert {a["id"], b["id"]} == {first.id, second.id}

    def test_release(self, client, grader_headers, make_product):
        product = make_product()
        client.get("/grade/next", headers=grader_headers)

        response = client.post(
            "/grade/release", json={"productId": product.id}, headers=grader_headers
        )

        assert response.status_code == 200
        assert response.json()["claimedById"] is None

    def test_submit_unknown_product(self, client, grader_headers):
        response = client.post(
            "/grade/submit",
            json={"productId": "missing", "approved": True},
            headers=grader_headers,
        )

        assert response.status_code == 404

    def test_performance(self, client, grader_headers, grader_user, make_product):
        for approved in (True, False, True):
            product = make_product()
            client.post(
                "/grade/submit",
                json={"productId": product.id, "approved": approved},
                headers=grader_headers,
            )

        body = client.get("/grade/performance", headers=grader_headers).json()

        assert body == [
            {
                "grader": {"id": grader_user.id, "name": "Grace"},
                "totalGraded": 3,
                "approved": 2,
                "rejected": 1,
            }
        ]

    def test_performance_bad_window(self, client, grader_headers):
        response = client.get(
            "/grade/performance?start=2024-02-01T00:00:00Z&end=2024-01-01T00:00:00Z",
            headers=grader_headers,
        )

        assert response.status_code == 422


class TestBulkUploadApi:
    def test_upload_csv(self, client, user_headers):
        response = client.post(
            "/bulk-upload",
            content="name,category,Color\nWidget,Tools,Red\nGadget,Tools,\n".encode(),
            headers={**user_headers, "Content-Type": "text/csv"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["productsCreated"] == 2
        assert len(body["productIds"]) == 2
        assert body["message"] == "Bulk upload successful"

    def test_missing_column(self, client, user_headers):
        response = client.post(
            "/bulk-upload",
            content=b"name\nWidget\n",
            headers={**user_headers, "Content-Type": "text/csv"},
        )

        assert response.status_code == 422
        assert "category" in response.json()["detail"]

    def test_empty_body(self, client, user_headers):
        response = client.post(
            "/bulk-upload", content=b"", headers={**user_headers, "Content-Type": "text/csv"}
        )

        assert response.status_code == 422

    def test_non_utf8_body(self, client, user_headers):
        response = client.post(
            "/bulk-upload",
            content="name,category\nCafé,Tools\n".encode("latin-1"),
            headers={**user_headers, "Content-Type": "text/csv"},
        )

        assert response.status_code == 422


class TestMetricsApi:
    def test_summary(self, client, admin_headers, grader_headers, make_product):
        for approved in (True, True, False, True):
            product = make_product()
            client.post(
                "/grade/submit",
                json={"productId": product.id, "approved": approved},
                headers=grader_headers,
            )

        body = client.get("/metrics", headers=admin_headers).json()

        assert body["totalProducts"] == 4
        assert body["gradedProducts"] == 4
        assert body["approvedProducts"] == 3
        assert body["accuracy"] == 75.0

    def test_bad_window(self, client, admin_headers):
        response = client.get(
            "/metrics?start=2024-02-01T00:00:00Z&end=2024-01-01T00:00:00Z",
            headers=admin_headers,
        )

        assert response.status_code == 422
