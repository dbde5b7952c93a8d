import pytest

from backend.mindit.api.middleware import build_envelope


@pytest.mark.parametrize(
    "status_code,detail,expected",
    [
        (404, None, {"error": "not_found", "message": "Resource not found", "detail": None}),
        (401, "Token expired", {"error": "unauthorized", "message": "Token expired", "detail": None}),
        (
            404,
            {"error": "space_not_found", "message": "Space 'x' not found"},
            {"error": "space_not_found", "message": "Space 'x' not found", "detail": None},
        ),
        (
            502,
            {"message": "db down", "upstream_status": 500},
            {"error": "upstream_error", "message": "db down", "detail": {"upstream_status": 500}},
        ),
        (418, None, {"error": "internal_error", "message": "Internal server error", "detail": None}),
    ],
)
def test_build_envelope(status_code: int, detail, expected) -> None:
    assert build_envelope(status_code, detail) == expected
