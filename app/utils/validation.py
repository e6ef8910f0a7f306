"""Request validation on top of pydantic.

Bodies and query strings are parsed into schema models; any violation is
raised as ``InvalidParameterError`` whose ``fields`` map each dotted field
path to a single user-facing message.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from app.errors import InvalidParameterError

_LOGGER = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

INVALID_BODY_MESSAGE = "Invalid request body"
INVALID_QUERY_MESSAGE = "Invalid query parameters"

# pydantic error type -> type name as the client sees it in JSON
_EXPECTED_TYPES: dict[str, str] = {
    "string_type": "string",
    "int_type": "number",
    "int_parsing": "number",
    "int_from_float": "integer",
    "float_type": "number",
    "float_parsing": "number",
    "decimal_type": "number",
    "bool_type": "boolean",
    "bool_parsing": "boolean",
    "dict_type": "object",
    "model_type": "object",
    "model_attributes_type": "object",
    "list_type": "array",
}


def _received_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _plural(count: Any, noun: str) -> str:
    return noun if count == 1 else f"{noun}s"


def _offset_bound(bound: Any, delta: int) -> Any:
    """Shift an inclusive integer bound by ``delta`` to express it as an exclusive one.

    Returns ``None`` for non-integral bounds, which have no exclusive
    neighbour to display.
    """

    try:
        value = float(bound)
    except (TypeError, ValueError):
        return None
    if not value.is_integer():
        return None
    return int(value) + delta


def _too_small(path: str, kind: str, ctx: Mapping[str, Any]) -> str:
    if kind == "string_too_short":
        minimum = ctx.get("min_length")
        subject = path or "String"
        return f"{subject} must be at least {minimum} {_plural(minimum, 'character')}"
    if kind == "too_short":
        minimum = ctx.get("min_length")
        subject = path or "Array"
        return f"{subject} must have at least {minimum} {_plural(minimum, 'element')}"

    subject = path or "Number"
    if kind == "greater_than":
        return f"{subject} must be greater than {ctx.get('gt')}"
    exclusive = _offset_bound(ctx.get("ge"), -1)
    if exclusive is None:
        return f"{subject} must be at least {ctx.get('ge')}"
    return f"{subject} must be greater than {exclusive}"


def _too_big(path: str, kind: str, ctx: Mapping[str, Any]) -> str:
    if kind == "string_too_long":
        maximum = ctx.get("max_length")
        subject = path or "String"
        return f"{subject} must be at most {maximum} characters"
    if kind == "too_long":
        maximum = ctx.get("max_length")
        subject = path or "Array"
        return f"{subject} must have at most {maximum} {_plural(maximum, 'element')}"

    subject = path or "Number"
    if kind == "less_than":
        return f"{subject} must be less than {ctx.get('lt')}"
    exclusive = _offset_bound(ctx.get("le"), 1)
    if exclusive is None:
        return f"{subject} must be at most {ctx.get('le')}"
    return f"{subject} must be less than {exclusive}"


def issue_message(error: Mapping[str, Any]) -> str:
    """Translate one pydantic error dict into its user-facing message."""

    path = ".".join(str(part) for part in error.get("loc", ()))
    kind = error.get("type", "")
    ctx = error.get("ctx") or {}

    if kind == "missing":
        return f"{path} is required" if path else "Required"

    if kind in _EXPECTED_TYPES:
        expected = _EXPECTED_TYPES[kind]
        if path:
            return f"type of {path} must be {expected}"
        return f"Expected {expected}, received {_received_type(error.get('input'))}"

    if kind == "iso_datetime":
        if path:
            return f"{path} must be a valid ISO 8601 datetime format"
        return "Invalid ISO 8601 datetime format"

    if kind in {"string_too_short", "too_short", "greater_than", "greater_than_equal"}:
        return _too_small(path, kind, ctx)

    if kind in {"string_too_long", "too_long", "less_than", "less_than_equal"}:
        return _too_big(path, kind, ctx)

    if kind in {"enum", "literal_error"}:
        return f"{path} must be a valid enum value" if path else "Invalid enum value"

    return error.get("msg") or "Invalid value"


def field_errors(exc: ValidationError) -> dict[str, str]:
    """Collapse a ``ValidationError`` into ``{path: message}``, first message per path."""

    fields: dict[str, str] = {}
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"])
        fields.setdefault(path, issue_message(error))
    return fields


def parse_payload(schema: type[ModelT], payload: Any, message: str) -> ModelT:
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise InvalidParameterError(message, field_errors(exc)) from exc


async def validate_request_body(request: Request, schema: type[ModelT]) -> ModelT:
    """Parse the JSON body of ``request`` against ``schema``."""

    try:
        body = await request.json()
    except ValueError as exc:
        _LOGGER.debug("Request body is not valid JSON: %s", exc)
        raise InvalidParameterError(str(exc) or INVALID_BODY_MESSAGE) from exc
    return parse_payload(schema, body, INVALID_BODY_MESSAGE)


async def validate_query_params(request: Request, schema: type[ModelT]) -> ModelT:
    """Parse the query string of ``request`` against ``schema``.

    Repeated keys keep their last value.
    """

    params = dict(request.query_params)
    return parse_payload(schema, params, INVALID_QUERY_MESSAGE)


__all__ = [
    "INVALID_BODY_MESSAGE",
    "INVALID_QUERY_MESSAGE",
    "field_errors",
    "issue_message",
    "parse_payload",
    "validate_query_params",
    "validate_request_body",
]
