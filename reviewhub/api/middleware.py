"""HTTP Middleware — request ids, access logging, and request timeout.

Invariants:
    - Every response carries X-Request-ID (echoed from the request when present)
    - One access-log line per request: method, path, status, duration, request id
    - A request exceeding the timeout has its handler cancelled, which rolls
      back any open transaction, before the 504 is sent

Design Decisions:
    - Plain ASGI middleware, not @app.middleware("http"): BaseHTTPMiddleware runs
      the downstream app in its own task, so cancelling the wait would leave the
      handler running and committing after the client was told it failed
"""

import asyncio
import logging
import time
import uuid

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from reviewhub.core.errors import ErrorCategory, ErrorSeverity
from reviewhub.infrastructure.observability import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware:
    """Tags each HTTP request with an id, bounds its duration, logs it."""

    def __init__(self, app: ASGIApp, timeout_seconds: float):
        self.app = app
        self.timeout_seconds = timeout_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        scope.setdefault("state", {})["request_id"] = request_id
        token = request_id_var.set(request_id)
        start = time.perf_counter()
        response_status = status.HTTP_500_INTERNAL_SERVER_ERROR
        response_started = False

        async def send_with_request_id(message: Message) -> None:
            nonlocal response_status, response_started
            if message["type"] == "http.response.start":
                response_started = True
                response_status = message["status"]
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
            await send(message)

        try:
            await asyncio.wait_for(
                self.app(scope, receive, send_with_request_id),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Request timed out after {self.timeout_seconds}s",
                extra={"path": scope["path"]},
            )
            if not response_started:
                await _timeout_response()(scope, receive, send_with_request_id)
        finally:
            logger.info(
                "http request",
                extra={
                    "method": scope["method"],
                    "path": scope["path"],
                    "status": response_status,
                    "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                },
            )
            request_id_var.reset(token)


def _timeout_response() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        content={
            "error": {
                "code": "TIMEOUT",
                "message": "Request timed out",
                "category": ErrorCategory.TIMEOUT.value,
                "severity": ErrorSeverity.ERROR.value,
            },
        },
    )


def register_middleware(app: FastAPI, timeout_seconds: float) -> None:
    """Attach the request logging/timeout middleware to `app`."""
    app.add_middleware(RequestContextMiddleware, timeout_seconds=timeout_seconds)
