# Path: tests/test_api.py
# Purpose: Exercise the FastAPI endpoints and their error status codes.
# Layer: tests.

import pytest
from fastapi.testclient import TestClient

from api import create_app
from ris.search import SimilaritySearcher
from ris.store import SqliteIndexStore


@pytest.fixture
def client(gallery, pipeline, searcher):
    pipeline.index_directory(gallery)
    return TestClient(create_app(searcher))


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_stats(client):
    assert client.get("/stats").json() == {"documents": 5}


def test_search_single_image(client, gallery):
    probe = gallery / "img_4.png"

    response = client.post("/search", json={"path": str(probe), "k": 2})

    assert response.status_code == 200
    (result,) = response.json()["results"]
    assert result["probe"] == str(probe)
    assert result["error"] is None
    assert [hit["rank"] for hit in result["hits"]] == [1, 2]
    assert result["hits"][0] == {"identifier": str(probe.resolve()), "score": 0.0, "rank": 1}


def test_search_defaults_to_three_hits(client, gallery):
    response = client.post("/search", json={"path": str(gallery / "img_0.png")})

    assert len(response.json()["results"][0]["hits"]) == 3


def test_search_missing_path(client, tmp_path):
    assert client.post("/search", json={"path": str(tmp_path / "missing.png")}).status_code == 404


def test_search_invalid_k(client, gallery):
    assert client.post("/search", json={"path": str(gallery), "k": 0}).status_code == 400


def test_search_extractor_mismatch(gallery, memory_store, searcher):
    memory_store.bind_signature("color_histogram:v1:bins=32:dim=96")
    client = TestClient(create_app(searcher))

    assert client.post("/search", json={"path": str(gallery)}).status_code == 409


def test_missing_index_is_unavailable(gallery, extractor, tmp_path):
    client = TestClient(create_app(SimilaritySearcher(extractor, SqliteIndexStore(tmp_path / "none"))))

    assert client.get("/stats").status_code == 503
    assert client.post("/search", json={"path": str(gallery)}).status_code == 503


def test_unconfigured_app():
    client = TestClient(create_app())

    assert client.get("/health").status_code == 200
    assert client.get("/stats").status_code == 500
    assert client.post("/search", json={"path": "x"}).status_code == 500
