import asyncio
import json

import pytest
from starlette.requests import Request

from app.controllers.base import REQUEST_ID_HEADER, BaseController, Result
from app.errors import (
    ErrorType,
    ForbiddenError,
    InternalServerError,
    InvalidParameterError,
    NotFoundError,
    UnauthorizedError,
    error_body,
    error_name,
    status_code_for,
)


def _request(path: str = "/api/things", method: str = "GET") -> Request:
    return Request(
        {
            "type": "http",
            "method": method,
            "scheme": "http",
            "server": ("testserver", 80),
            "path": path,
            "root_path": "",
            "query_string": b"",
            "headers": [],
        }
    )


@pytest.mark.parametrize(
    "exc, status, error_type",
    [
        (InvalidParameterError("bad"), 400, ErrorType.INVALID_PARAMETER),
        (UnauthorizedError("who are you"), 401, ErrorType.UNAUTHORIZED),
        (ForbiddenError("nope"), 403, ErrorType.FORBIDDEN),
        (NotFoundError("missing"), 404, ErrorType.NOT_FOUND),
        (InternalServerError("broken"), 500, ErrorType.INTERNAL_SERVER_ERROR),
        (RuntimeError("unexpected"), 500, ErrorType.INTERNAL_SERVER_ERROR),
    ],
)
def test_each_error_kind_has_a_fixed_status_and_type(exc, status, error_type):
    assert status_code_for(exc) == status
    assert error_body(exc)["error"]["type"] == error_type.value


def test_invalid_parameter_body_carries_fields():
    body = error_body(InvalidParameterError("Invalid request body", {"name": "name is required"}))

    assert body == {
        "error": {
            "message": "Invalid request body",
            "fields": {"name": "name is required"},
            "type": "INVALID_PARAMETER",
        }
    }


def test_fields_are_omitted_when_absent():
    assert "fields" not in error_body(InvalidParameterError("Expecting value"))["error"]
    assert "fields" not in error_body(NotFoundError("missing"))["error"]


def test_unknown_errors_surface_their_message_or_a_generic_one():
    assert error_body(ValueError("boom"))["error"]["message"] == "boom"
    assert error_body(ValueError())["error"]["message"] == "Internal server error"
    assert error_name(ValueError()) == "UnknownError"
    assert error_name(ForbiddenError("x")) == "ForbiddenError"


def test_handle_request_returns_data_with_handler_status():
    async def _handler():
        return Result(data={"ok": True}, status=201)

    response = asyncio.run(BaseController().handle_request(_request(method="POST"), _handler))

    assert response.status_code == 201
    assert json.loads(response.body) == {"data": {"ok": True}}
    assert response.headers[REQUEST_ID_HEADER]


def test_handle_request_defaults_to_200():
    async def _handler():
        return Result(data=[])

    response = asyncio.run(BaseController().handle_request(_request(), _handler))

    assert response.status_code == 200
    assert json.loads(response.body) == {"data": []}


def test_handle_request_maps_taxonomy_errors():
    async def _handler():
        raise NotFoundError("Event not found")

    response = asyncio.run(BaseController().handle_request(_request(), _handler))

    assert response.status_code == 404
    assert json.loads(response.body) == {"error": {"message": "Event not found", "type": "NOT_FOUND"}}


def test_handle_request_collapses_unknown_errors_to_500(caplog):
    async def _handler():
        raise KeyError("capacity")

    with caplog.at_level("ERROR"):
        response = asyncio.run(BaseController().handle_request(_request(), _handler))

    assert response.status_code == 500
    body = json.loads(response.body)
    assert body["error"]["type"] == "INTERNAL_SERVER_ERROR"
    assert "Traceback" not in body["error"]["message"]
    assert any(getattr(record, "context", {}).get("errorType") == "UnknownError" for record in caplog.records)
