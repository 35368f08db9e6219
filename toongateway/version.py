# -*- coding: utf-8 -*-
"""Location: ./toongateway/version.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

version.py - diagnostics endpoint (JSON)
A FastAPI router that mounts at /version and returns a machine-readable
diagnostics payload: application name and version, uptime, platform details
and the active token counting backend.

Examples:
    >>> from toongateway.services.token_service import TokenEstimator
    >>> payload = _build_payload(TokenEstimator())
    >>> payload["tokenizer"]["backend"]
    'approximate'
    >>> sorted(payload["app"])
    ['name', 'version']
"""

# Standard
from datetime import datetime, timezone
import platform
import socket
import time
from typing import Any, Dict

# Third-Party
from fastapi import APIRouter, Depends

# First-Party
from toongateway import __version__
from toongateway.config import settings
from toongateway.services.token_service import get_token_estimator, TokenEstimator
from toongateway.utils.orjson_response import ORJSONResponse

# Globals

START_TIME = time.time()
HOSTNAME = socket.gethostname()
router = APIRouter(tags=["meta"])


def _build_payload(estimator: TokenEstimator) -> Dict[str, Any]:
    """Build the diagnostics payload.

    Args:
        estimator (TokenEstimator): Estimator whose backend is reported.

    Returns:
        Dict[str, Any]: Timestamp, host, uptime, application, platform and tokenizer details.
    """
    return {
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "host": HOSTNAME,
        "uptime_seconds": int(time.time() - START_TIME),
        "app": {
            "name": settings.app_name,
            "version": __version__,
        },
        "platform": {
            "python": platform.python_version(),
            "fastapi": __import__("fastapi").__version__,
            "os": f"{platform.system()} {platform.release()} ({platform.machine()})",
        },
        "tokenizer": {
            "encoding": settings.tokenizer_encoding,
            "backend": estimator.backend,
        },
        "limits": {
            "max_input_chars": settings.max_input_chars,
            "max_body_bytes": settings.max_body_bytes,
            "processing_timeout": settings.processing_timeout,
        },
    }


@router.get("/version", summary="Diagnostics")
async def version_endpoint(estimator: TokenEstimator = Depends(get_token_estimator)) -> ORJSONResponse:
    """Serve diagnostics as JSON.

    Args:
        estimator (TokenEstimator): Injected token estimator.

    Returns:
        ORJSONResponse: The diagnostics payload.
    """
    return ORJSONResponse(content=_build_payload(estimator))
