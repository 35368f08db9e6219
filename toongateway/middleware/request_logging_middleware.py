# -*- coding: utf-8 -*-
"""Location: ./toongateway/middleware/request_logging_middleware.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Request Logging Middleware.

Logs one line per request with method, path, status code, duration and
client address. Request bodies are never logged: they are user documents of
up to a megabyte.
"""

# Standard
import time

# Third-Party
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

# First-Party
from toongateway.services.logging_service import LoggingService
from toongateway.utils.rate_limiter import get_client_ip

# Initialize logging service first
logging_service = LoggingService()
logger = logging_service.get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log completion of every HTTP request.

    Examples:
        >>> middleware = RequestLoggingMiddleware(None, log_requests=False)
        >>> middleware.log_requests
        False
    """

    def __init__(self, app: ASGIApp, log_requests: bool = True):
        """Initialize the middleware.

        Args:
            app: The wrapped ASGI application.
            log_requests: Whether to log completed requests at INFO.
        """
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next):
        """Time the downstream handler and log the outcome.

        Args:
            request (Request): The incoming HTTP request.
            call_next (Callable): The next middleware or endpoint.

        Returns:
            Response: The downstream response.

        Raises:
            Exception: Any exception from downstream, after logging it.
        """
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.exception(f"{request.method} {request.url.path} failed after {duration_ms:.1f}ms")
            raise

        if self.log_requests:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                f"{request.method} {request.url.path} {response.status_code} {duration_ms:.1f}ms",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 1),
                    "client_ip": get_client_ip(request),
                },
            )
        return response
