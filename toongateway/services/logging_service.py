# -*- coding: utf-8 -*-
"""Location: ./toongateway/services/logging_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Logging Service Implementation.
This module configures process-wide logging for the TOON Gateway: a single
stdout handler on the root logger, rendered either as plain text or as one
JSON object per line (serialized with orjson). Modules obtain their loggers
through :meth:`LoggingService.get_logger`.

Examples:
    >>> service = LoggingService()
    >>> service.get_logger("toongateway.example").name
    'toongateway.example'
"""

# Standard
from datetime import datetime, timezone
import logging
import sys
from typing import Any, Dict, Optional, TextIO

# Third-Party
import orjson

# First-Party
from toongateway.config import settings

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Marker attribute so repeated configuration replaces only our own handler
_HANDLER_MARKER = "_toongateway_handler"

# LogRecord attributes that are not user-supplied extras
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line.

    Examples:
        >>> record = logging.LogRecord("toon", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        >>> out = orjson.loads(JsonFormatter().format(record))
        >>> (out["level"], out["logger"], out["message"])
        ('INFO', 'toon', 'hello world')
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a record.

        Args:
            record: Log record.

        Returns:
            str: JSON document for the record.
        """
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(payload, default=str).decode()


class LoggingService:
    """Configure the root logger and hand out named loggers.

    Configuration is idempotent: calling :meth:`configure` again replaces the
    handler installed by a previous call instead of stacking a new one.
    """

    def __init__(self) -> None:
        """Initialize the service without touching global logging state."""
        self._loggers: Dict[str, logging.Logger] = {}
        self._handler: Optional[logging.Handler] = None

    async def initialize(self) -> None:
        """Configure logging at application startup."""
        self.configure()

    async def shutdown(self) -> None:
        """Flush and detach the handler installed by this service."""
        if self._handler is not None:
            self._handler.flush()
            logging.getLogger().removeHandler(self._handler)
            self._handler = None

    def configure(self, level: Optional[str] = None, log_format: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
        """Install the stream handler on the root logger.

        Args:
            level: Log level name; defaults to ``settings.log_level``.
            log_format: ``"text"`` or ``"json"``; defaults to ``settings.log_format``.
            stream: Output stream; defaults to stdout.
        """
        root = logging.getLogger()
        for handler in list(root.handlers):
            if getattr(handler, _HANDLER_MARKER, False):
                root.removeHandler(handler)

        handler = logging.StreamHandler(stream or sys.stdout)
        if (log_format or settings.log_format) == "json":
            handler.setFormatter(JsonFormatter())
        else:
            handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT))
        setattr(handler, _HANDLER_MARKER, True)

        root.addHandler(handler)
        self._handler = handler
        self.set_level(level or settings.log_level)

    def set_level(self, level: str) -> None:
        """Change the root log level.

        Args:
            level: Level name such as ``"DEBUG"``.

        Examples:
            >>> svc = LoggingService()
            >>> svc.set_level("warning")
            >>> logging.getLogger().level == logging.WARNING
            True
        """
        logging.getLogger().setLevel(level.upper())

    def configure_uvicorn_after_startup(self) -> None:
        """Route uvicorn's loggers through the root handler."""
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
            uvicorn_logger = logging.getLogger(name)
            uvicorn_logger.handlers.clear()
            uvicorn_logger.propagate = True

    def get_logger(self, name: str) -> logging.Logger:
        """Return a named logger.

        Args:
            name: Logger name, usually ``__name__``.

        Returns:
            logging.Logger: The logger.
        """
        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(name)
        return self._loggers[name]
