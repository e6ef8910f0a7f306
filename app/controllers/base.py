from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

from fastapi import Request
from fastapi.responses import JSONResponse

from app.errors import error_body, error_name, status_code_for

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass
class Result(Generic[T]):
    data: T
    status: int = 200


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class BaseController:
    """Shared request boundary: request ids, timing logs and error-to-response mapping."""

    async def handle_request(
        self,
        request: Request,
        handler: Callable[[], Awaitable[Result[Any]]],
    ) -> JSONResponse:
        """Run ``handler`` and turn its result, or whatever it raised, into a response.

        Every error is caught here and nowhere else; errors outside the
        taxonomy become a 500 carrying the raw message.
        """

        started = time.perf_counter()
        request_id = str(uuid.uuid4())
        headers = {REQUEST_ID_HEADER: request_id}

        _LOGGER.info(
            "Request started",
            extra={
                "context": {
                    "requestId": request_id,
                    "method": request.method,
                    "pathname": request.url.path,
                    "url": str(request.url),
                }
            },
        )

        try:
            result = await handler()
        except Exception as exc:
            _LOGGER.error(
                str(exc) or type(exc).__name__,
                exc_info=exc,
                extra={
                    "context": {
                        "requestId": request_id,
                        "durationMs": _elapsed_ms(started),
                        "errorType": error_name(exc),
                    }
                },
            )
            return JSONResponse(error_body(exc), status_code=status_code_for(exc), headers=headers)

        _LOGGER.info(
            "Request completed",
            extra={"context": {"requestId": request_id, "durationMs": _elapsed_ms(started)}},
        )
        return JSONResponse({"data": result.data}, status_code=result.status, headers=headers)
