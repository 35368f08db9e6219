# -*- coding: utf-8 -*-
"""Location: ./toongateway/utils/rate_limiter.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Per-client request limits.

- :class:`RateLimiter`: sliding-window limiter keyed by client IP. Clients
  that stay idle longer than ``idle_expiry`` seconds are forgotten.
- :func:`enforce_rate_limit`: FastAPI dependency answering 429.
- :class:`BodySizeLimitMiddleware`: rejects bodies whose ``Content-Length``
  exceeds ``settings.max_body_bytes`` with 413 before they are read.

Examples:
    >>> limiter = RateLimiter(requests=2, window=1.0, idle_expiry=60)
    >>> [limiter.allow("10.0.0.1", now=100.0) for _ in range(3)]
    [True, True, False]
    >>> limiter.allow("10.0.0.1", now=101.5)
    True
"""

# Standard
from collections import defaultdict
import threading
import time
from typing import Dict, List, Optional

# Third-Party
from fastapi import HTTPException, Request, status
from starlette.middleware.base import BaseHTTPMiddleware

# First-Party
from toongateway.config import settings
from toongateway.services.logging_service import LoggingService
from toongateway.utils.orjson_response import ORJSONResponse

# Initialize logging service first
logging_service = LoggingService()
logger = logging_service.get_logger(__name__)


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request.

    Args:
        request: FastAPI request object

    Returns:
        str: Client IP address

    Examples:
        >>> from unittest.mock import MagicMock
        >>> mock_request = MagicMock()
        >>> mock_request.headers = {"X-Forwarded-For": "192.168.1.1, 10.0.0.1"}
        >>> get_client_ip(mock_request)
        '192.168.1.1'
        >>> mock_request.headers = {"X-Real-IP": "10.0.0.5"}
        >>> get_client_ip(mock_request)
        '10.0.0.5'
        >>> mock_request.headers = {}
        >>> mock_request.client.host = "127.0.0.1"
        >>> get_client_ip(mock_request)
        '127.0.0.1'
        >>> mock_request.client = None
        >>> get_client_ip(mock_request)
        'unknown'
    """
    # Check for X-Forwarded-For header (proxy/load balancer)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    # Check for X-Real-IP header
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    # Fall back to direct client connection
    if request.client:
        return request.client.host

    return "unknown"


class RateLimiter:
    """Sliding-window request limiter keyed by client.

    Attributes:
        requests: Requests allowed within ``window``.
        window: Window length in seconds.
        idle_expiry: Seconds after which an idle client's history is dropped.
    """

    def __init__(self, requests: int, window: float, idle_expiry: float):
        """Initialize the limiter.

        Args:
            requests: Requests allowed within ``window``.
            window: Window length in seconds.
            idle_expiry: Seconds after which an idle client's history is dropped.
        """
        self.requests = requests
        self.window = window
        self.idle_expiry = idle_expiry
        self._storage: Dict[str, List[float]] = defaultdict(list)
        self._last_sweep = 0.0
        self._lock = threading.Lock()

    def allow(self, client: str, now: Optional[float] = None) -> bool:
        """Record a request and decide whether it is allowed.

        Rejected requests are not recorded.

        Args:
            client: Client key, usually the IP address.
            now: Current time; defaults to ``time.monotonic()``.

        Returns:
            bool: True if the request is within the limit.
        """
        now = time.monotonic() if now is None else now
        with self._lock:
            self._sweep(now)
            window_start = now - self.window
            # prune old timestamps
            history = [ts for ts in self._storage[client] if ts > window_start]
            if len(history) >= self.requests:
                self._storage[client] = history
                return False
            history.append(now)
            self._storage[client] = history
            return True

    def _sweep(self, now: float) -> None:
        """Forget clients idle for longer than ``idle_expiry``.

        Args:
            now: Current time.

        Examples:
            >>> limiter = RateLimiter(requests=1, window=1.0, idle_expiry=10)
            >>> limiter.allow("a", now=0.0), limiter.allow("b", now=5.0)
            (True, True)
            >>> limiter.allow("c", now=12.0)
            True
            >>> sorted(limiter.clients())
            ['b', 'c']
        """
        if now - self._last_sweep < self.idle_expiry / 2:
            return
        self._last_sweep = now
        cutoff = now - self.idle_expiry
        for client in [c for c, stamps in self._storage.items() if not stamps or stamps[-1] <= cutoff]:
            del self._storage[client]

    def clients(self) -> List[str]:
        """List clients with recorded history.

        Returns:
            List[str]: Client keys.
        """
        with self._lock:
            return list(self._storage)

    def reset(self) -> None:
        """Forget all clients."""
        with self._lock:
            self._storage.clear()
            self._last_sweep = 0.0


_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Return the process-wide limiter, creating it from settings on first use.

    Returns:
        RateLimiter: The shared limiter.
    """
    global _limiter  # pylint: disable=global-statement
    if _limiter is None:
        _limiter = RateLimiter(settings.rate_limit_requests, settings.rate_limit_window, settings.rate_limit_idle_expiry)
    return _limiter


def reset_rate_limiter() -> None:
    """Drop the shared limiter so the next request rebuilds it from settings."""
    global _limiter  # pylint: disable=global-statement
    _limiter = None


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency rejecting clients over their request budget.

    Args:
        request: Incoming request.

    Raises:
        HTTPException: 429 when the client exceeded the limit.
    """
    if not settings.rate_limit_enabled:
        return
    client_ip = get_client_ip(request)
    if not get_rate_limiter().allow(client_ip):
        logger.warning(f"Rate limit exceeded for IP {client_ip} on {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Rate limit exceeded. Maximum {settings.rate_limit_requests} requests per {settings.rate_limit_window:g} seconds.",
        )


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared body size exceeds ``settings.max_body_bytes``."""

    async def dispatch(self, request: Request, call_next):
        """Check ``Content-Length`` before the body is read.

        Args:
            request (Request): The incoming HTTP request.
            call_next (Callable): The next middleware or endpoint.

        Returns:
            Response: 413 for oversized bodies, otherwise the downstream response.
        """
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > settings.max_body_bytes:
            logger.warning(f"Rejected {content_length}-byte body on {request.url.path}")
            return ORJSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={"detail": f"Request body too large (maximum {settings.max_body_bytes} bytes)"},
            )
        return await call_next(request)
