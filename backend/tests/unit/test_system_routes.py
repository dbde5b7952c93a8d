import logging

from fastapi.testclient import TestClient

from backend.mindit.api.main import create_app
from backend.mindit.api.middleware import AuthContext, get_auth_context
from backend.mindit.api.routes.system import LOG_BUFFER, memory_handler


def _client(tmp_path, make_session=None) -> TestClient:
    app = create_app(frontend_dist=tmp_path / "missing")
    if make_session is not None:
        session = make_session()
        app.dependency_overrides[get_auth_context] = lambda: AuthContext(
            user_id="user-1", access_token=session.access_token, session=session
        )
    return TestClient(app)


def test_health(tmp_path) -> None:
    response = _client(tmp_path).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_memory_handler_keeps_extra_fields() -> None:
    LOG_BUFFER.clear()
    record = logging.LogRecord("mindit.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.user_id = "user-1"

    memory_handler.emit(record)

    entry = LOG_BUFFER[-1]
    assert entry["message"] == "hello world"
    assert entry["logger"] == "mindit.test"
    assert entry["extra"] == {"user_id": "user-1"}


def test_logs_require_session(tmp_path) -> None:
    response = _client(tmp_path).get("/api/system/logs")

    assert response.status_code == 401


def test_logs_are_returned_to_signed_in_user(tmp_path, make_session) -> None:
    client = _client(tmp_path, make_session)
    LOG_BUFFER.clear()
    logging.getLogger("mindit.test").warning("disk nearly full", extra={"free_mb": 12})

    response = client.get("/api/system/logs")

    assert response.status_code == 200
    messages = [entry["message"] for entry in response.json()]
    assert "disk nearly full" in messages


def test_page_routes_without_frontend_build(tmp_path) -> None:
    client = _client(tmp_path)

    assert client.get("/signup").json() == {
        "status": "ok",
        "service": "Mind-It API",
        "page": "/signup",
    }
    assert client.get("/api/unknown").status_code == 404
