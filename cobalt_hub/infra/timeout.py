"""Request timeout middleware."""

import asyncio
import logging
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from cobalt_hub.infra.config import config

logger = logging.getLogger(__name__)


class TimeoutMiddleware(BaseHTTPMiddleware):
    """Cap the wall time of a request, e.g. a large batch against a slow connector."""

    def __init__(self, app, timeout: Optional[float] = None):
        """
        Args:
            app: FastAPI application
            timeout: Seconds before the request is answered with 504
                (default: REQUEST_TIMEOUT_SECONDS)
        """
        super().__init__(app)
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT_SECONDS

    async def dispatch(self, request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(
                "Request timed out",
                extra={"path": request.url.path, "timeout_seconds": self.timeout},
            )
            return JSONResponse(
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                content={"detail": f"Request timeout after {self.timeout} seconds"},
            )
