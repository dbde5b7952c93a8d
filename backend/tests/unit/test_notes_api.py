"""API tests for notes and spaces against an in-memory row backend."""

import json
from typing import Any, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from backend.mindit.api.main import create_app
from backend.mindit.api.middleware import AuthContext, get_auth_context
from backend.mindit.services.supabase import SupabaseClient, get_supabase_client

CREATED_AT = "2025-01-15T10:30:00Z"


class FakeRowBackend:
    """Answers the row API for ``notes`` and ``spaces`` from plain lists."""

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {"notes": [], "spaces": []}
        self.requests: List[httpx.Request] = []
        self._next_id = 0

    def seed(self, table: str, **row: Any) -> Dict[str, Any]:
        self._next_id += 1
        stored = {"id": f"{table}-{self._next_id}", "created_at": CREATED_AT, **row}
        self.tables[table].append(stored)
        return stored

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        table = request.url.path.rsplit("/", 1)[-1]
        filters = {
            key: value.removeprefix("eq.")
            for key, value in request.url.params.items()
            if key not in ("select", "order")
        }
        rows = self.tables[table]
        matching = [row for row in rows if all(str(row.get(k)) == v for k, v in filters.items())]

        if request.method == "GET":
            return httpx.Response(200, json=matching)
        if request.method == "POST":
            return httpx.Response(201, json=[self.seed(table, **json.loads(request.content))])
        if request.method == "PATCH":
            for row in matching:
                row.update(json.loads(request.content))
            return httpx.Response(200, json=matching)
        if request.method == "DELETE":
            self.tables[table] = [row for row in rows if row not in matching]
            return httpx.Response(200, json=matching)
        return httpx.Response(405)


@pytest.fixture
def backend() -> FakeRowBackend:
    return FakeRowBackend()


@pytest.fixture
def client(tmp_path, backend, backend_config, make_session) -> TestClient:
    app = create_app(frontend_dist=tmp_path / "missing")
    supabase = SupabaseClient(backend_config, transport=httpx.MockTransport(backend))
    session = make_session()
    app.dependency_overrides[get_supabase_client] = lambda: supabase
    app.dependency_overrides[get_auth_context] = lambda: AuthContext(
        user_id="user-1", access_token=session.access_token, session=session
    )
    return TestClient(app)


def test_notes_require_a_session(tmp_path, backend, backend_config) -> None:
    app = create_app(frontend_dist=tmp_path / "missing")
    supabase = SupabaseClient(backend_config, transport=httpx.MockTransport(backend))
    app.dependency_overrides[get_supabase_client] = lambda: supabase

    response = TestClient(app).get("/api/notes")

    assert response.status_code == 401
    assert response.json()["error"] == "unauthorized"
    assert backend.requests == []


def test_list_notes_only_returns_own_rows(client, backend) -> None:
    backend.seed("notes", user_id="user-1", title="Mine", content="a", space_id=None)
    backend.seed("notes", user_id="user-2", title="Theirs", content="b", space_id=None)

    response = client.get("/api/notes")

    assert response.status_code == 200
    assert [note["title"] for note in response.json()] == ["Mine"]
    sent = backend.requests[-1]
    assert sent.headers["Authorization"] == "Bearer access-user-1"
    assert sent.url.params["user_id"] == "eq.user-1"
    assert sent.url.params["order"] == "created_at.desc"


def test_list_notes_filters_by_space(client, backend) -> None:
    backend.seed("notes", user_id="user-1", title="In space", content="", space_id="s1")
    backend.seed("notes", user_id="user-1", title="Loose", content="", space_id=None)

    response = client.get("/api/notes", params={"space_id": "s1"})

    assert [note["title"] for note in response.json()] == ["In space"]


def test_create_note_stamps_owner(client, backend) -> None:
    response = client.post("/api/notes", json={"title": "Ideas", "content": "first"})

    assert response.status_code == 201
    body = response.json()
    assert body["title"] == "Ideas"
    assert body["user_id"] == "user-1"
    assert backend.tables["notes"][0]["user_id"] == "user-1"


def test_create_note_in_unknown_space_is_not_found(client, backend) -> None:
    response = client.post("/api/notes", json={"title": "Ideas", "space_id": "missing"})

    assert response.status_code == 404
    assert backend.tables["notes"] == []


def test_get_note_owned_by_someone_else_is_not_found(client, backend) -> None:
    other = backend.seed("notes", user_id="user-2", title="Theirs", content="", space_id=None)

    response = client.get(f"/api/notes/{other['id']}")

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_update_note_writes_only_sent_fields(client, backend) -> None:
    note = backend.seed("notes", user_id="user-1", title="Old", content="keep", space_id=None)

    response = client.patch(f"/api/notes/{note['id']}", json={"title": "New"})

    assert response.status_code == 200
    assert response.json()["title"] == "New"
    assert response.json()["content"] == "keep"
    assert json.loads(backend.requests[-1].content) == {"title": "New"}


def test_delete_note(client, backend) -> None:
    note = backend.seed("notes", user_id="user-1", title="Gone", content="", space_id=None)

    response = client.delete(f"/api/notes/{note['id']}")

    assert response.status_code == 204
    assert backend.tables["notes"] == []
    assert client.delete(f"/api/notes/{note['id']}").status_code == 404


def test_create_space_defaults_icon(client) -> None:
    response = client.post("/api/spaces", json={"name": "Research", "color": "#6366f1"})

    assert response.status_code == 201
    assert response.json()["icon"] == "folder"


def test_create_space_rejects_unknown_icon(client, backend) -> None:
    response = client.post(
        "/api/spaces", json={"name": "Research", "color": "#6366f1", "icon": "unicorn"}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"
    assert backend.tables["spaces"] == []


def test_list_and_update_spaces(client, backend) -> None:
    space = backend.seed("spaces", user_id="user-1", name="Work", color="#000", icon="briefcase")

    listed = client.get("/api/spaces")
    updated = client.patch(f"/api/spaces/{space['id']}", json={"icon": "rocket"})

    assert [s["name"] for s in listed.json()] == ["Work"]
    assert updated.status_code == 200
    assert updated.json()["icon"] == "rocket"


def test_delete_unknown_space(client) -> None:
    response = client.delete("/api/spaces/nope")

    assert response.status_code == 404
    assert response.json()["error"] == "space_not_found"


def test_backend_failure_maps_to_bad_gateway(tmp_path, backend_config, make_session) -> None:
    app = create_app(frontend_dist=tmp_path / "missing")
    failing = SupabaseClient(
        backend_config,
        transport=httpx.MockTransport(
            lambda request: httpx.Response(500, json={"message": "db down"})
        ),
    )
    session = make_session()
    app.dependency_overrides[get_supabase_client] = lambda: failing
    app.dependency_overrides[get_auth_context] = lambda: AuthContext(
        user_id="user-1", access_token=session.access_token, session=session
    )

    response = TestClient(app).get("/api/notes")

    assert response.status_code == 502
    assert response.json()["message"] == "db down"
    assert response.json()["detail"] == {"upstream_status": 500}
