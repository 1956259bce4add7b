"""Tests for the error kind to HTTP response mapping."""

import pytest

from task_api.errors import OPENAPI_ERRORS, ApiError, ErrorKind, error_response, to_json_response


@pytest.mark.parametrize("kind, status_code, message", [
    (ErrorKind.BAD_REQUEST, 400, "Bad Request"),
    (ErrorKind.NOT_FOUND, 404, "Not Found"),
    (ErrorKind.INTERNAL_SERVER_ERROR, 500, "Internal Server Error"),
])
def test_error_response(kind, status_code, message):
    assert error_response(kind) == (status_code, {"error": message})


def test_every_kind_is_mapped():
    for kind in ErrorKind:
        status_code, body = error_response(kind)
        assert 400 <= status_code < 600
        assert set(body) == {"error"}


def test_json_response_body():
    response = to_json_response(ErrorKind.NOT_FOUND)
    assert response.status_code == 404
    assert response.body == b'{"error":"Not Found"}'


def test_api_error_carries_kind():
    exc = ApiError(ErrorKind.BAD_REQUEST)
    assert exc.kind is ErrorKind.BAD_REQUEST


def test_openapi_errors_cover_all_statuses():
    assert set(OPENAPI_ERRORS) == {400, 404, 500}
