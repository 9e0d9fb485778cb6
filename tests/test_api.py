from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from translation_styles.api import app, get_store
from translation_styles.store import StyleStore


@pytest.fixture
def client(store: StyleStore):
    """Test client backed by an in-memory store."""
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create(client: TestClient, name: str = "Greetings", targets: list[tuple[str, bytes]] | None = None) -> dict:
    targets = targets or [("es-a.txt", b"Buenos dias a todos."), ("es-b.txt", b"Saludos a todo el mundo.")]
    files = [("source_files", ("en.txt", b"Good morning everyone.", "text/plain"))]
    files += [("target_files", (filename, content, "text/plain")) for filename, content in targets]
    response = client.post(
        "/api/styles",
        files=files,
        data={"name": name, "source_language": "en", "target_language": "es"},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_api_root(client):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "message" in data
    assert "version" in data


def test_create_style_from_uploads(client, store):
    style = _create(client)

    assert style["name"] == "Greetings"
    assert style["statistics"]["totalPairs"] == 2
    assert style["statistics"]["totalConflicts"] == 1
    assert style["conflicts"][0]["isResolved"] is False
    assert store.get_style_by_id(style["id"]) is not None


def test_create_style_rejects_blank_name(client):
    response = client.post(
        "/api/styles",
        files=[
            ("source_files", ("en.txt", b"Good morning everyone.", "text/plain")),
            ("target_files", ("es.txt", b"Buenos dias a todos.", "text/plain")),
        ],
        data={"name": "   ", "source_language": "en", "target_language": "es"},
    )
    assert response.status_code == 400
    assert "name" in response.json()["detail"]


def test_list_get_update_and_delete_style(client):
    style = _create(client)

    listed = client.get("/api/styles", params={"query": "greet"}).json()["styles"]
    assert [s["id"] for s in listed] == [style["id"]]

    assert client.get(f"/api/styles/{style['id']}").status_code == 200
    assert client.get("/api/styles/style-missing").status_code == 404

    patched = client.patch(f"/api/styles/{style['id']}", json={"is_active": False})
    assert patched.status_code == 200
    assert patched.json()["isActive"] is False
    ignored = client.patch(f"/api/styles/{style['id']}", json={"is_active": None, "name": None})
    assert ignored.status_code == 200
    assert ignored.json()["isActive"] is False
    assert ignored.json()["name"] == "Greetings"
    by_pair = client.get("/api/styles/by-language-pair", params={"source": "en", "target": "es"})
    assert by_pair.json()["styles"] == []

    assert client.delete(f"/api/styles/{style['id']}").status_code == 204
    assert client.delete(f"/api/styles/{style['id']}").status_code == 204
    assert client.get(f"/api/styles/{style['id']}").status_code == 404


def test_pair_curation_endpoints(client):
    style = _create(client)
    style_id = style["id"]

    added = client.post(f"/api/styles/{style_id}/pairs", json={"source_text": "Foo", "target_text": "Bar"})
    assert added.status_code == 201
    assert added.json()["statistics"]["totalPairs"] == 3
    pair_id = added.json()["translationPairs"][-1]["id"]

    rejected = client.post(f"/api/styles/{style_id}/pairs", json={"source_text": " ", "target_text": "Bar"})
    assert rejected.status_code == 400

    edited = client.patch(f"/api/styles/{style_id}/pairs/{pair_id}", json={"target_text": "Baz"})
    assert edited.json()["translationPairs"][-1]["targetText"] == "Baz"
    for body in ({"confidence": None}, {"frequency": None}, {"target_text": None}):
        assert client.patch(f"/api/styles/{style_id}/pairs/{pair_id}", json=body).status_code == 400

    refined = client.post(f"/api/styles/{style_id}/pairs/{pair_id}/refine", json={"reason": "Checked"})
    assert refined.json()["statistics"]["refinedPairs"] == 1
    assert client.post(f"/api/styles/{style_id}/pairs/{pair_id}/refine", json={"reason": ""}).status_code == 400

    pairs = client.get(f"/api/styles/{style_id}/pairs", params={"query": "foo"}).json()
    assert [p["id"] for p in pairs["pairs"]] == [pair_id]
    assert pairs["total"] == 3

    deleted = client.delete(f"/api/styles/{style_id}/pairs/{pair_id}")
    assert deleted.json()["statistics"]["totalPairs"] == 2
    assert client.delete(f"/api/styles/{style_id}/pairs/{pair_id}").status_code == 404


def test_conflict_resolution_endpoints(client):
    style = _create(client)
    style_id = style["id"]
    conflict_id = style["conflicts"][0]["id"]

    bad = client.post(f"/api/styles/{style_id}/conflicts/{conflict_id}/resolve", json={"target_text": "Nope"})
    assert bad.status_code == 400

    resolved = client.post(
        f"/api/styles/{style_id}/conflicts/{conflict_id}/resolve", json={"target_text": "Buenos dias a todos"}
    )
    assert resolved.status_code == 200
    assert resolved.json()["statistics"]["accuracy"] == 1.0
    assert resolved.json()["conflicts"][0]["resolvedTranslation"] == "Buenos dias a todos"

    lookup = client.get(
        "/api/lookup", params={"text": "good morning everyone", "source_language": "en", "target_language": "es"}
    ).json()
    assert lookup["exact"]["targetText"] == "Buenos dias a todos"
    assert lookup["exact"]["resolved"] is True

    reopened = client.post(f"/api/styles/{style_id}/conflicts/{conflict_id}/unresolve")
    assert reopened.json()["conflicts"][0]["isResolved"] is False
    assert "resolvedTranslation" not in reopened.json()["conflicts"][0]

    missing = client.post(f"/api/styles/{style_id}/conflicts/conflict-missing/unresolve")
    assert missing.status_code == 404


def test_analysis_endpoint(client):
    style = _create(client)
    analysis = client.get(f"/api/styles/{style['id']}/analysis").json()
    assert analysis["totalPairs"] == 2
    assert analysis["quality"] == 0.5
    assert analysis["recommendations"]
    assert client.get("/api/styles/style-missing/analysis").status_code == 404
