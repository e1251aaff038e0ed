"""Tests for the HTTP API."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from qdrant_client import QdrantClient

from codeduck.config import load_config
from codeduck.core import EmbeddingError, VectorIndexError
from codeduck.storage import QdrantVectorIndex
from codeduck.web import create_app

from conftest import POINT_SOURCE


@pytest.fixture
def local_index():
    return QdrantVectorIndex(QdrantClient(":memory:"), collection_name="web")


@pytest.fixture
def client(generator, local_index):
    app = create_app(load_config(), generator=generator, index=local_index)
    return TestClient(app)


class TestIndexRoute:
    def test_index_then_search(self, client, tmp_path, write_source):
        write_source("geometry.rs", POINT_SOURCE)

        response = client.post("/api/index", json={"path": str(tmp_path)})
        assert response.status_code == 200
        assert response.json() == {"path": str(tmp_path), "indexed": 2}

        response = client.post("/api/search", json={"prompt": "distance between points", "top_k": 2})
        assert response.status_code == 200
        results = response.json()["results"]
        assert len(results) == 4
        assert [r["space"] for r in results] == ["code", "code", "nlp", "nlp"]
        names = {r["entity"]["name"] for r in results}
        assert names == {"Point", "distance"}
        assert results[0]["entity"]["context"]["file_path"] == "geometry.rs"

    def test_missing_folder(self, client, tmp_path):
        response = client.post("/api/index", json={"path": str(tmp_path / "gone")})
        assert response.status_code == 404

    def test_syntax_error_is_bad_request(self, client, tmp_path, write_source):
        write_source("bad.rs", "fn nope( {")

        response = client.post("/api/index", json={"path": str(tmp_path)})

        assert response.status_code == 400
        assert "bad.rs" in response.json()["detail"]


class TestSearchRoute:
    def test_empty_prompt(self, client):
        response = client.post("/api/search", json={"prompt": "  "})
        assert response.status_code == 422

    def test_invalid_top_k(self, client):
        response = client.post("/api/search", json={"prompt": "x", "top_k": 0})
        assert response.status_code == 422

    def test_index_failure_is_bad_gateway(self, generator):
        index = MagicMock()
        index.search_hits.side_effect = VectorIndexError("search failed: timed out", collection="web")
        client = TestClient(create_app(load_config(), generator=generator, index=index))

        response = client.post("/api/search", json={"prompt": "anything"})

        assert response.status_code == 502
        assert "timed out" in response.json()["detail"]

    def test_embedding_failure_is_server_error(self):
        generator = MagicMock()
        generator.embed_query.side_effect = EmbeddingError("model crashed", model="fake")
        client = TestClient(create_app(load_config(), generator=generator, index=MagicMock()))

        response = client.post("/api/search", json={"prompt": "anything"})

        assert response.status_code == 500


class TestHealthRoute:
    def test_reports_point_count(self, client, local_index, generator):
        local_index.ensure_collection()

        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["points"] == 0

    def test_unreachable_store(self, generator):
        index = MagicMock()
        index.count.side_effect = VectorIndexError("count failed")
        client = TestClient(create_app(load_config({"vector_store": {"qdrant": {"collection_name": "x"}}}),
                                       generator=generator, index=index))

        body = client.get("/api/health").json()

        assert body == {"status": "ok", "collection": "x", "points": None}

    def test_answers_while_models_are_loading(self, local_index):
        app = create_app(load_config(), index=local_index)
        state = app.state.codeduck
        client = TestClient(app)

        with state._generator_lock:
            response = client.get("/api/health")

        assert response.status_code == 200
