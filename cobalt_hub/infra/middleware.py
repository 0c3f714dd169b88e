"""Request middleware for tracking, CORS, and other cross-cutting concerns."""

import logging
import uuid
import time
from typing import Any, Callable, Dict
from fastapi import Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from cobalt_hub.infra.config import config
from cobalt_hub.infra.metrics import request_count, request_duration

REQUEST_ID_HEADER = "X-Request-ID"
RESPONSE_TIME_HEADER = "X-Response-Time-Ms"

logger = logging.getLogger("cobalt_hub.request")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's X-Request-ID or assign one, and echo it back."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _route_label(request: Request) -> str:
    """Route template (``/webhook/{path}``) so metric labels stay bounded."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def _request_fields(request: Request) -> Dict[str, Any]:
    return {
        "request_id": getattr(request.state, "request_id", "unknown"),
        "method": request.method,
        "path": request.url.path,
    }


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request and record request count and latency."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        logger.info(
            "Request started",
            extra={**_request_fields(request), "client": request.client.host if request.client else None},
        )

        try:
            response = await call_next(request)
        except Exception as e:
            request_count.labels(method=request.method, endpoint=_route_label(request), status="500").inc()
            logger.error(
                "Request failed",
                extra={
                    **_request_fields(request),
                    "error": str(e),
                    "duration_ms": int((time.time() - start_time) * 1000),
                },
                exc_info=True,
            )
            raise

        elapsed = time.time() - start_time
        endpoint = _route_label(request)
        request_count.labels(method=request.method, endpoint=endpoint, status=str(response.status_code)).inc()
        request_duration.labels(method=request.method, endpoint=endpoint).observe(elapsed)

        duration_ms = int(elapsed * 1000)
        logger.info(
            "Request completed",
            extra={**_request_fields(request), "status_code": response.status_code, "duration_ms": duration_ms},
        )
        response.headers[RESPONSE_TIME_HEADER] = str(duration_ms)
        return response


def setup_cors(app):
    """
    Allow the chat front-end origins listed in CORS_ORIGINS.

    Without a list, development allows any origin and other environments
    allow none. A ``*`` entry is ignored outside development.
    """
    if config.CORS_ORIGINS:
        allowed_origins = [origin.strip() for origin in config.CORS_ORIGINS.split(",") if origin.strip()]
        if config.APP_ENV != "development":
            allowed_origins = [origin for origin in allowed_origins if origin != "*"]
    elif config.APP_ENV == "development":
        allowed_origins = ["*"]
    else:
        allowed_origins = []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, RESPONSE_TIME_HEADER],
    )
