"""Tests for API Routes."""

from collections.abc import Generator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from buildersearch.config import get_settings
from buildersearch.config.errors import StorageError
from buildersearch.domains.search import SearchRankingEngine

from .deps import get_search_engine
from .main import create_app


@pytest.fixture
def mock_store() -> AsyncMock:
    """Create a mock record store."""
    mock = AsyncMock()
    mock.find.return_value = [
        {"title": "Red Shoes", "views": 5, "category": "footwear"},
        {"title": "Blue Shoes", "views": 50, "category": "footwear"},
        {"name": "Red Hat", "category": "hats"},
    ]
    return mock


@pytest.fixture
def engine(mock_store: AsyncMock) -> SearchRankingEngine:
    """Create an engine over the mock store."""
    return SearchRankingEngine(mock_store)


@pytest.fixture
def client(engine: SearchRankingEngine) -> Generator[TestClient, None, None]:
    """Create a test client with mocked dependencies."""
    app = create_app()
    app.dependency_overrides[get_search_engine] = lambda: engine

    yield TestClient(app)

    app.dependency_overrides.clear()


def test_health_endpoint(client: TestClient) -> None:
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "buildersearch"


def test_search_endpoint(client: TestClient) -> None:
    """Test search returns the envelope with ranked results."""
    response = client.post(
        "/api/search",
        json={"query": "red", "limit": 2, "sortBy": "relevance"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Search completed"

    data = body["data"]
    assert data["query"] == "red"
    assert data["resultCount"] == 2
    assert [r.get("title") or r.get("name") for r in data["results"]] == [
        "Red Shoes",
        "Red Hat",
    ]
    assert data["fromCache"] is False
    assert set(data["stats"]) == {"queriesExecuted", "cacheHits", "averageTime"}


def test_search_endpoint_caches_repeat_requests(
    client: TestClient, mock_store: AsyncMock
) -> None:
    """Test equivalent requests share a cache entry regardless of body order."""
    client.post("/api/search", json={"query": "red", "limit": 2})
    response = client.post("/api/search", json={"limit": 2, "query": "red"})

    assert response.json()["data"]["fromCache"] is True
    assert mock_store.find.await_count == 1


def test_search_endpoint_with_filters(client: TestClient) -> None:
    """Test filters are applied."""
    response = client.post(
        "/api/search",
        json={"query": "shoes", "filters": {"views": {"min": 10, "max": 100}}},
    )

    results = response.json()["data"]["results"]
    assert [r["title"] for r in results] == ["Blue Shoes"]


@pytest.mark.parametrize(
    "body",
    [{"query": ""}, {"limit": 5}, {"query": None}],
)
def test_search_endpoint_query_required(client: TestClient, body: dict) -> None:
    """Test a missing or empty query gets the 400 envelope."""
    response = client.post("/api/search", json=body)

    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert data["message"] == "Query is required"
    assert data["error"]["code"] == "VALIDATION_ERROR"
    assert data["errors"][0]["field"] == "query"


def test_advanced_search_endpoint_query_required(client: TestClient) -> None:
    """Test faceted search rejects a missing query the same way."""
    response = client.post("/api/search/advanced", json={"facetFields": ["category"]})

    assert response.status_code == 400
    assert response.json()["message"] == "Query is required"


def test_search_endpoint_limit_validation(client: TestClient) -> None:
    """Test search limit bounds."""
    response = client.post("/api/search", json={"query": "red", "limit": 0})
    assert response.status_code == 200
    assert response.json()["data"]["results"] == []

    response = client.post("/api/search", json={"query": "red", "limit": 500})
    assert response.status_code == 200
    assert response.json()["data"]["resultCount"] == 3

    response = client.post("/api/search", json={"query": "red", "limit": -1})
    assert response.status_code == 400
    assert response.json()["message"] == "Validation error"


def test_search_endpoint_invalid_sort(client: TestClient) -> None:
    """Test unknown sort order is rejected with field errors."""
    response = client.post("/api/search", json={"query": "red", "sortBy": "alphabetical"})

    assert response.status_code == 400
    data = response.json()
    assert data["message"] == "Validation error"
    assert data["errors"][0]["field"] == "sortBy"


def test_search_endpoint_store_failure(client: TestClient, mock_store: AsyncMock) -> None:
    """Test a failing store yields an empty successful response."""
    mock_store.find.side_effect = OSError("unavailable")

    response = client.post("/api/search", json={"query": "red"})

    assert response.status_code == 200
    assert response.json()["data"]["results"] == []


def test_advanced_search_endpoint(client: TestClient) -> None:
    """Test faceted search response."""
    response = client.post(
        "/api/search/advanced",
        json={"query": "shoes", "facetFields": ["category"]},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["resultCount"] == 3
    assert data["facets"]["category"] == [
        {"value": "footwear", "count": 2},
        {"value": "hats", "count": 1},
    ]
    assert data["appliedFilters"] == {}
    assert data["executionTime"].endswith("ms")


def test_stats_endpoint(client: TestClient) -> None:
    """Test stats reflect executed and cached queries."""
    client.post("/api/search", json={"query": "red"})
    client.post("/api/search", json={"query": "red"})

    response = client.get("/api/search/stats")

    assert response.status_code == 200
    stats = response.json()["data"]["searchStats"]
    assert stats["queriesExecuted"] == 1
    assert stats["cacheHits"] == 1
    assert stats["cachedQueries"] == 1


def test_clear_cache_endpoint(client: TestClient) -> None:
    """Test cache clearing."""
    client.post("/api/search", json={"query": "red"})

    response = client.delete("/api/search/cache")

    assert response.status_code == 200
    assert response.json()["data"]["cleared"] == 1


def test_build_index_endpoint(client: TestClient) -> None:
    """Test index build reports token count."""
    response = client.post("/api/search/index")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["tokens"] > 0
    assert data["indexes"] == ["default"]


def test_build_index_storage_error(client: TestClient, mock_store: AsyncMock) -> None:
    """Test storage errors map to 503 with an error code."""
    mock_store.find.side_effect = StorageError("Record file is not a JSON array")

    response = client.post("/api/search/index")

    assert response.status_code == 503
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "STORAGE_READ_FAILED"


def test_request_id_header(client: TestClient) -> None:
    """Test that responses include request ID."""
    response = client.get("/health")
    assert "x-request-id" in response.headers


def test_request_id_echoed(client: TestClient) -> None:
    """Test a provided request ID is echoed back."""
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["x-request-id"] == "abc-123"


def test_404_for_unknown_routes(client: TestClient) -> None:
    """Test 404 for non-existent routes."""
    response = client.get("/api/nonexistent")
    assert response.status_code == 404


def test_unexpected_error_envelope(engine: SearchRankingEngine) -> None:
    """Test an unexpected failure on a search route reports Search failed."""
    failing = AsyncMock(spec=engine)
    failing.execute.side_effect = RuntimeError("boom")

    app = create_app()
    app.dependency_overrides[get_search_engine] = lambda: failing
    response = TestClient(app).post("/api/search", json={"query": "red"})

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Search failed"
    assert body["error"]["code"] == "INTERNAL_ERROR"


def test_rate_limit(monkeypatch: pytest.MonkeyPatch, engine: SearchRankingEngine) -> None:
    """Test requests past the per-minute quota get 429 in the envelope."""
    monkeypatch.setenv("BUILDERSEARCH_RATE_LIMIT_RPM", "2")
    get_settings.cache_clear()
    try:
        app = create_app()
    finally:
        get_settings.cache_clear()
    app.dependency_overrides[get_search_engine] = lambda: engine
    client = TestClient(app)

    for _ in range(2):
        assert client.get("/api/search/stats").status_code == 200
    response = client.get("/api/search/stats")

    assert response.status_code == 429
    assert response.json()["error"]["code"] == "SECURITY_RATE_LIMITED"
    assert "retry-after" in response.headers
    assert client.get("/health").status_code == 200
