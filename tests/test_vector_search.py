import asyncio

import pytest
from qdrant_client import QdrantClient

from smart_shopper.main import app
from smart_shopper.services.embedding_service import EmbeddingService, strip_html
from smart_shopper.services.product_search import ProductSearchService
from smart_shopper.services.qdrant_service import QdrantService, get_qdrant_service, point_id

from tests.fakes import FakeOpenAI


@pytest.fixture
def qdrant_service() -> QdrantService:
    return QdrantService(client=QdrantClient(location=":memory:"), dimension=5)


@pytest.fixture
def product_search(product_store, qdrant_service) -> ProductSearchService:
    return ProductSearchService(EmbeddingService(client=FakeOpenAI()), qdrant_service, product_store)


def test_disabled_vector_search_is_unavailable():
    service = QdrantService()

    assert service.available is False
    assert service.get_count() == 0
    with pytest.raises(RuntimeError):
        service.query([0.0] * 5)


def test_add_query_and_clear(qdrant_service):
    written = qdrant_service.add_embeddings(
        ids=["a", "b"],
        embeddings=[[1.0, 0.0, 0.0, 0.0, 0.1], [0.0, 1.0, 0.0, 0.0, 0.1]],
        metadatas=[{"title": "Laptop A"}, {"title": "Chair B"}],
        documents=["Title: Laptop A", "Title: Chair B"],
    )

    assert written == 2
    assert qdrant_service.get_count() == 2

    hits = qdrant_service.query([1.0, 0.0, 0.0, 0.0, 0.1], n_results=1)
    assert hits[0]["product_id"] == "a"
    assert hits[0]["title"] == "Laptop A"
    assert "document" not in hits[0]
    assert hits[0]["score"] == pytest.approx(1.0)

    qdrant_service.clear()
    assert qdrant_service.get_count() == 0


def test_point_ids_are_stable():
    assert point_id("dell-xps-13") == point_id("dell-xps-13")
    assert point_id("dell-xps-13") != point_id("dell-inspiron-15")


def test_index_catalog_then_vector_search(product_search):
    result = asyncio.run(product_search.index_catalog())

    assert result["processed"] == 7
    assert result["successful"] == 7
    assert result["errors"] == []

    results = asyncio.run(product_search.search_products("laptop", limit=3))
    assert {r.id for r in results} == {"dell-inspiron-15", "dell-xps-13", "lenovo-ideapad-3"}
    assert all(0.0 <= r.score <= 1.0 for r in results)
    inspiron = next(r for r in results if r.id == "dell-inspiron-15")
    assert inspiron.description == "Everyday laptop for work and school"


def test_search_falls_back_to_catalog_when_vector_store_down(product_store):
    service = ProductSearchService(EmbeddingService(client=FakeOpenAI()), QdrantService(), product_store)

    results = asyncio.run(service.search_products("lenovo"))

    assert [r.id for r in results] == ["lenovo-ideapad-3"]
    assert results[0].score == 0.8


def test_product_text_includes_key_fields(catalog):
    text = EmbeddingService(client=FakeOpenAI()).extract_product_text(catalog[0])

    assert text.startswith("Title: Dell Inspiron 15 Laptop | Vendor: Dell | Category: Laptop | Price: $649.99")
    assert "Tags: laptop" in text


def test_strip_html():
    assert strip_html("<p>Hello <b>world</b></p>") == "Hello world"
    assert strip_html("<p>abcdef</p>", 3) == "abc"


def test_semantic_search_endpoint_uses_catalog_fallback(api):
    resp = api.post("/api/search/semantic", json={"q": "Dell", "limit": 5})

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["total"] == 2
    assert {r["id"] for r in data["results"]} == {"dell-inspiron-15", "dell-xps-13"}


def test_embedding_stats_without_vector_store(api):
    resp = api.get("/api/embeddings/stats")

    assert resp.status_code == 200
    assert resp.json() == {
        "total_products": 7,
        "products_with_embeddings": 0,
        "products_without_embeddings": 7,
        "progress_percentage": 0.0,
        "vector_store_available": False,
    }


def test_create_embeddings_requires_vector_store(api):
    resp = api.post("/api/embeddings/create", json={"limit": 5})

    assert resp.status_code == 502
    assert resp.json()["error"]["code"] == "UPSTREAM_ERROR"


def test_create_stats_and_clear_embeddings(api, qdrant_service):
    app.dependency_overrides[get_qdrant_service] = lambda: qdrant_service

    created = api.post("/api/embeddings/create", json={"limit": 100})

    assert created.status_code == 200
    body = created.json()
    assert body["successful"] == 7
    assert body["stats"]["progress_percentage"] == 100.0

    cleared = api.delete("/api/embeddings/clear")
    assert cleared.json() == {"success": True, "cleared_count": 7, "message": "Cleared 7 embeddings from Qdrant"}
    assert api.get("/api/embeddings/stats").json()["products_with_embeddings"] == 0
