"""
Tests for tag routes.
"""

from feedwise.services.tag_service import TAG_COLORS


class TestTagCrud:
    """Create, list, update and delete."""

    def test_create_and_list(self, client):
        response = client.post("/tags", json={"name": "Python", "color": "#10b981"})
        assert response.status_code == 201
        assert response.json()["name"] == "python"

        tags = client.get("/tags").json()
        assert [t["name"] for t in tags] == ["python"]
        assert tags[0]["color"] == "#10b981"

    def test_default_color(self, client):
        assert client.post("/tags", json={"name": "go"}).json()["color"] == "#3b82f6"

    def test_duplicate_name_rejected(self, client):
        client.post("/tags", json={"name": "python"})
        response = client.post("/tags", json={"name": "PYTHON"})
        assert response.status_code == 400

    def test_rename(self, client):
        tag_id = client.post("/tags", json={"name": "py"}).json()["id"]
        response = client.put(f"/tags/{tag_id}", json={"name": "Python"})
        assert response.status_code == 200
        assert response.json()["name"] == "python"

    def test_rename_collision_rejected(self, client):
        client.post("/tags", json={"name": "python"})
        tag_id = client.post("/tags", json={"name": "rust"}).json()["id"]
        response = client.put(f"/tags/{tag_id}", json={"name": "python"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Another tag with this name already exists"

    def test_delete(self, client):
        tag_id = client.post("/tags", json={"name": "temp"}).json()["id"]
        assert client.delete(f"/tags/{tag_id}").status_code == 200
        assert client.get("/tags").json() == []
        assert client.delete(f"/tags/{tag_id}").status_code == 404

    def test_tags_are_scoped_to_user(self, client):
        client.post("/tags", json={"name": "python"})
        assert client.get("/tags", headers={"X-User-Id": "2"}).json() == []


class TestScanArticles:
    """Tests for POST /tags/scan-articles."""

    def test_scan_tags_matching_articles(self, client_with_data):
        client, data = client_with_data
        response = client.post("/tags/scan-articles", json={"tag_name": "Packaging"})

        assert response.status_code == 200
        body = response.json()
        assert body["tag"]["name"] == "packaging"
        assert body["tag"]["color"] in TAG_COLORS
        assert body["tagged_article_ids"] == [data["article_ids"][0]]
        assert body["newly_tagged"] == 1

        article = client.get(f"/articles/{data['article_ids'][0]}").json()
        assert article["tags"] == ["python", "packaging"]

    def test_scan_is_idempotent(self, client_with_data):
        client, data = client_with_data
        client.post("/tags/scan-articles", json={"tag_name": "packaging"})
        body = client.post("/tags/scan-articles", json={"tag_name": "packaging"}).json()

        assert body["newly_tagged"] == 0
        assert len(client.get("/tags").json()) == 1

    def test_scan_reuses_existing_tag(self, client_with_data):
        client, data = client_with_data
        tag = client.post("/tags", json={"name": "snippet", "color": "#000000"}).json()
        body = client.post("/tags/scan-articles", json={"tag_name": "snippet"}).json()

        assert body["tag"] == tag
        assert len(body["tagged_article_ids"]) == 3

    def test_scan_requires_name(self, client):
        assert client.post("/tags/scan-articles", json={}).status_code == 422


class TestGetTag:
    """Tests for GET /tags/{tag_id}."""

    def test_get_tag(self, client):
        tag = client.post("/tags", json={"name": "python", "color": "#10b981"}).json()
        response = client.get(f"/tags/{tag['id']}")
        assert response.status_code == 200
        assert response.json() == tag

    def test_get_tag_not_found(self, client):
        response = client.get("/tags/999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Tag not found"

    def test_other_users_tag_not_found(self, client):
        tag_id = client.post("/tags", json={"name": "python"}).json()["id"]
        assert client.get(f"/tags/{tag_id}", headers={"X-User-Id": "2"}).status_code == 404


class TestBlankNames:
    """Names that are empty after stripping are rejected."""

    def test_scan_with_blank_name_rejected(self, client_with_data):
        client, data = client_with_data
        response = client.post("/tags/scan-articles", json={"tag_name": "   "})

        assert response.status_code == 422
        assert client.get("/tags").json() == []
        article = client.get(f"/articles/{data['article_ids'][0]}").json()
        assert article["tags"] == ["python"]

    def test_create_with_blank_name_rejected(self, client):
        assert client.post("/tags", json={"name": " \t "}).status_code == 422
        assert client.get("/tags").json() == []

    def test_rename_to_blank_rejected(self, client):
        tag_id = client.post("/tags", json={"name": "python"}).json()["id"]
        assert client.put(f"/tags/{tag_id}", json={"name": "   "}).status_code == 422
        assert client.get(f"/tags/{tag_id}").json()["name"] == "python"

    def test_names_are_stripped(self, client):
        assert client.post("/tags", json={"name": "  Rust  "}).json()["name"] == "rust"
