"""Tests for items API endpoints."""

from unittest.mock import patch

import duckdb
from fastapi.testclient import TestClient

from closet_filter.api.main import create_app


class TestListItems:
    """Tests for GET /api/items endpoint."""

    def test_list_default(self, client):
        response = client.get("/api/items")
        assert response.status_code == 200

        data = response.json()
        assert [item["note"] for item in data["items"]] == ["linen", "oxford", "wool blend"]
        assert data["pagination"] == {"offset": 0, "limit": 20, "total": 3}

    def test_filter_by_size(self, client):
        response = client.get("/api/items", params={"sizes": "100"})
        data = response.json()
        assert [(i["color"], i["category"]) for i in data["items"]] == [("red", "shirt"), ("blue", "shirt")]

    def test_filter_by_size_and_color(self, client):
        response = client.get("/api/items", params={"sizes": "100", "colors": "red"})
        assert [i["note"] for i in response.json()["items"]] == ["linen"]

    def test_search_text(self, client):
        response = client.get("/api/items", params={"search_text": "pants"})
        assert [i["category"] for i in response.json()["items"]] == ["pants"]

    def test_invalid_values_dropped(self, client):
        response = client.get("/api/items", params={"sizes": "abc,,-1", "colors": " , "})
        assert response.status_code == 200
        assert response.json()["pagination"]["total"] == 3

    def test_pagination(self, client):
        first = client.get("/api/items", params={"offset": 0, "limit": 2}).json()
        second = client.get("/api/items", params={"offset": 2, "limit": 2}).json()

        assert len(first["items"]) == 2
        assert len(second["items"]) == 1
        assert first["pagination"]["total"] == second["pagination"]["total"] == 3

    def test_invalid_window(self, client):
        assert client.get("/api/items", params={"offset": -1}).status_code == 422
        assert client.get("/api/items", params={"limit": 0}).status_code == 422

    def test_limit_capped_by_settings(self, seeded_repository, api_settings):
        settings = api_settings.model_copy(update={"max_page_size": 2, "default_page_size": 2})
        app = create_app(repository=seeded_repository, settings=settings)
        with TestClient(app) as client:
            assert client.get("/api/items").json()["pagination"]["limit"] == 2
            assert client.get("/api/items", params={"limit": 2}).status_code == 200
            response = client.get("/api/items", params={"limit": 3})
            assert response.status_code == 422
            assert response.json()["field"] == "limit"
            assert client.get("/api/filters/results", params={"limit": 3}).status_code == 422

    def test_storage_failure(self, client, seeded_repository):
        with patch.object(seeded_repository.db, "execute", side_effect=duckdb.Error("boom")):
            response = client.get("/api/items")
        assert response.status_code == 503


class TestCounts:
    """Tests for count endpoints."""

    def test_count(self, client):
        response = client.get("/api/items/count", params={"colors": "red"})
        assert response.json() == {"count": 2}

    def test_count_by(self, client):
        response = client.get("/api/items/counts/category")
        assert response.json() == [
            {"value": "pants", "count": 1},
            {"value": "shirt", "count": 2},
        ]

    def test_count_by_unknown_type(self, client):
        assert client.get("/api/items/counts/brand").status_code == 422
        assert client.get("/api/items/counts/search").status_code == 422


class TestItemCrud:
    """Tests for creating, reading and deleting items."""

    def test_create_and_get(self, client):
        response = client.post(
            "/api/items",
            json={"size": 120, "color": " green ", "category": "coat", "note": "wool"},
        )
        assert response.status_code == 201
        created = response.json()
        assert created["color"] == "green"

        fetched = client.get(f"/api/items/{created['id']}").json()
        assert fetched == created

    def test_create_invalid(self, client):
        response = client.post("/api/items", json={"size": 0, "color": "red", "category": "shirt"})
        assert response.status_code == 422

    def test_get_missing(self, client):
        assert client.get("/api/items/9999").status_code == 404

    def test_delete(self, client, item_ids):
        assert client.delete(f"/api/items/{item_ids['A']}").json() == {"deleted": item_ids["A"]}
        assert client.delete(f"/api/items/{item_ids['A']}").status_code == 404
        assert client.get("/api/items/count").json() == {"count": 2}
