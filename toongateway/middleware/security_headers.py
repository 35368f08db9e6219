# -*- coding: utf-8 -*-
"""Location: ./toongateway/middleware/security_headers.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Security Headers Middleware.

Adds browser hardening headers to every response, adds HSTS to requests that
arrived over HTTPS (directly or behind a proxy setting ``X-Forwarded-Proto``),
and strips headers that disclose server software.
"""

# Third-Party
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

# First-Party
from toongateway.config import settings

CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        "script-src 'self'",
        "style-src 'self'",
        "img-src 'self' data:",
        "font-src 'self'",
        "connect-src 'self'",
        "frame-ancestors 'none'",
    ]
) + ";"

_DISCLOSING_HEADERS = ("X-Powered-By", "Server")


def _is_https(request: Request) -> bool:
    """Tell whether the client connection used HTTPS.

    Args:
        request: Incoming request.

    Returns:
        bool: True for https scheme or ``X-Forwarded-Proto: https``.

    Examples:
        >>> from unittest.mock import MagicMock
        >>> req = MagicMock()
        >>> req.url.scheme = "http"
        >>> req.headers = {"X-Forwarded-Proto": "HTTPS"}
        >>> _is_https(req)
        True
        >>> req.headers = {}
        >>> _is_https(req)
        False
    """
    forwarded_proto = request.headers.get("X-Forwarded-Proto", "")
    return request.url.scheme == "https" or forwarded_proto.split(",")[0].strip().lower() == "https"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        """Add the headers after the downstream handler has produced a response.

        Args:
            request (Request): The incoming HTTP request.
            call_next (Callable): The next middleware or endpoint.

        Returns:
            Response: The response with security headers applied.
        """
        response = await call_next(request)
        if not settings.security_headers_enabled:
            return response

        response.headers["X-Content-Type-Options"] = "nosniff"
        if settings.x_frame_options:
            response.headers["X-Frame-Options"] = settings.x_frame_options
        response.headers["X-XSS-Protection"] = "0"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = CONTENT_SECURITY_POLICY

        if settings.hsts_enabled and _is_https(request):
            hsts = f"max-age={settings.hsts_max_age}"
            if settings.hsts_include_subdomains:
                hsts += "; includeSubDomains"
            response.headers["Strict-Transport-Security"] = hsts

        for header in _DISCLOSING_HEADERS:
            if header in response.headers:
                del response.headers[header]

        return response
