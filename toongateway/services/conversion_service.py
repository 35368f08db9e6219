# -*- coding: utf-8 -*-
"""Location: ./toongateway/services/conversion_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Conversion Service Implementation.
This module orchestrates the three gateway operations:

- JSON → TOON: parse, normalize and re-parse only if the direct parse fails,
  encode, then score both texts with the token estimator.
- JSON repair: run the full rule pipeline on text that does not parse and
  verify the result.
- Token counting.

The synchronous methods are pure computations. The ``*_async`` variants run
them in a worker thread under ``processing_timeout`` seconds.

Examples:
    >>> from toongateway.services.token_service import TokenEstimator
    >>> service = ConversionService(TokenEstimator(), timeout=5, max_input_chars=1000)
    >>> result = service.convert('{"tags": ["a", "b"]}')
    >>> (result.toon, result.fixed)
    ('tags[2]: a,b', False)
    >>> service.convert("{id: 1,}").message
    'JSON corrected automatically'
    >>> service.fix_json('[1, 2,]').changes
    ['Removed comma before ]']
"""

# Standard
import asyncio
from typing import Any, Callable, Optional, Tuple, TypeVar

# Third-Party
import orjson

# First-Party
from toongateway.config import settings
from toongateway.repair import normalize, repair, RepairResult
from toongateway.schemas import JsonToToonResponse, TokenCountResult
from toongateway.services.logging_service import LoggingService
from toongateway.services.token_service import TokenEstimator
from toongateway.toon import build_options, ToonEncoder

# Initialize logging service first
logging_service = LoggingService()
logger = logging_service.get_logger(__name__)

FIXED_MESSAGE = "JSON corrected automatically"

T = TypeVar("T")


class ConversionError(Exception):
    """Base class for conversion service errors."""


class InputTooLargeError(ConversionError):
    """Raised when the submitted text exceeds ``max_input_chars``."""

    def __init__(self, length: int, limit: int):
        """Initialize the error.

        Args:
            length: Submitted length in characters.
            limit: Configured maximum.
        """
        self.length = length
        self.limit = limit
        super().__init__(f"Input too large: {length} characters (maximum {limit:,})")


class JsonParseError(ConversionError):
    """Raised when input is not JSON even after normalization.

    Examples:
        >>> err = JsonParseError("{", "Invalid JSON: unexpected end")
        >>> (str(err), err.original)
        ('Invalid JSON: unexpected end', '{')
    """

    def __init__(self, original: str, message: str):
        """Initialize the error.

        Args:
            original: The submitted text.
            message: Description of the parse failure.
        """
        self.original = original
        super().__init__(message)


class RepairFailedError(JsonParseError):
    """Raised when the repair pipeline could not produce valid JSON."""


class ProcessingTimeoutError(ConversionError):
    """Raised when a request exceeds its processing time budget."""


def _loads(text: str) -> Any:
    """Parse JSON text.

    Args:
        text: JSON text.

    Returns:
        The parsed value.

    Raises:
        orjson.JSONDecodeError: If the text is not valid JSON.
    """
    return orjson.loads(text)


class ConversionService:
    """Request-level orchestration of parse, repair, encode and scoring."""

    def __init__(self, estimator: TokenEstimator, timeout: Optional[float] = None, max_input_chars: Optional[int] = None):
        """Initialize the service.

        Args:
            estimator: Token estimator used for savings and counts.
            timeout: Seconds allowed per request; defaults to ``settings.processing_timeout``.
            max_input_chars: Longest accepted input; defaults to ``settings.max_input_chars``.
        """
        self.estimator = estimator
        self.timeout = timeout if timeout is not None else settings.processing_timeout
        self.max_input_chars = max_input_chars if max_input_chars is not None else settings.max_input_chars

    def _check_size(self, text: str) -> None:
        """Reject oversized input.

        Args:
            text: Submitted text.

        Raises:
            InputTooLargeError: If ``text`` is longer than ``max_input_chars``.
        """
        if len(text) > self.max_input_chars:
            raise InputTooLargeError(len(text), self.max_input_chars)

    def parse(self, text: str) -> Tuple[Any, bool]:
        """Parse JSON, normalizing it first only if the direct parse fails.

        Args:
            text: JSON text.

        Returns:
            Tuple of (parsed value, whether normalization was needed).

        Raises:
            JsonParseError: If the normalized text still does not parse.

        Examples:
            >>> from toongateway.services.token_service import TokenEstimator
            >>> svc = ConversionService(TokenEstimator(), timeout=1, max_input_chars=100)
            >>> svc.parse('{"a": [1, 2]}')
            ({'a': [1, 2]}, False)
            >>> svc.parse('{"a": [1, 2,],}')
            ({'a': [1, 2]}, True)
        """
        try:
            return _loads(text), False
        except orjson.JSONDecodeError:
            pass

        normalized = normalize(text)
        try:
            value = _loads(normalized)
        except orjson.JSONDecodeError as e:
            raise JsonParseError(text, f"Invalid JSON: {e}") from e
        logger.debug("Input parsed after normalization")
        return value, True

    def convert(self, json_text: str, delimiter: Optional[str] = None, length_marker: bool = False, indent: Optional[int] = None) -> JsonToToonResponse:
        """Convert JSON text to TOON.

        Args:
            json_text: JSON text, possibly malformed.
            delimiter: ``","``, ``"\\t"`` or ``"|"``; empty selects ``settings.default_delimiter``.
            length_marker: Prefix array counts with ``#``.
            indent: Spaces per level; 0 or None selects ``settings.default_indent``.

        Returns:
            JsonToToonResponse: The TOON text, whether the input was fixed, and token savings.

        Raises:
            InputTooLargeError: If the input is too long.
            InvalidOptionError: If an option is invalid.
            JsonParseError: If the input cannot be parsed.
        """
        self._check_size(json_text)
        options = build_options(indent_width=indent or settings.default_indent, delimiter=delimiter or settings.default_delimiter, length_marker=length_marker)
        value, fixed = self.parse(json_text)
        toon = ToonEncoder(options).encode(value)
        return JsonToToonResponse(
            toon=toon,
            fixed=fixed,
            message=FIXED_MESSAGE if fixed else None,
            token_savings=self.estimator.savings(json_text, toon),
        )

    def fix_json(self, json_text: str) -> RepairResult:
        """Repair malformed JSON.

        Text that already parses is returned unchanged with an empty change log.

        Args:
            json_text: JSON text, possibly malformed.

        Returns:
            RepairResult: Valid JSON text and the applied changes.

        Raises:
            InputTooLargeError: If the input is too long.
            RepairFailedError: If the repaired text still does not parse.

        Examples:
            >>> from toongateway.services.token_service import TokenEstimator
            >>> svc = ConversionService(TokenEstimator(), timeout=1, max_input_chars=100)
            >>> svc.fix_json('{"ok": true}')
            RepairResult(text='{"ok": true}', changes=[])
            >>> try:
            ...     svc.fix_json('{"a" 1}')
            ... except RepairFailedError as e:
            ...     print(e.original)
            {"a" 1}
        """
        self._check_size(json_text)
        try:
            _loads(json_text)
            return RepairResult(text=json_text, changes=[])
        except orjson.JSONDecodeError:
            pass

        result = repair(json_text)
        try:
            _loads(result.text)
        except orjson.JSONDecodeError as e:
            raise RepairFailedError(json_text.strip(), f"Could not repair JSON: {e}") from e
        logger.debug(f"Repaired JSON with {len(result.changes)} changes")
        return result

    def count(self, text: str) -> TokenCountResult:
        """Count tokens, words and characters.

        Args:
            text: Input text.

        Returns:
            TokenCountResult: The statistics.

        Raises:
            InputTooLargeError: If the input is too long.
        """
        self._check_size(text)
        return self.estimator.count(text)

    async def _run_with_budget(self, func: Callable[..., T], *args: Any) -> T:
        """Run ``func`` in a worker thread under the time budget.

        Args:
            func: Synchronous callable.
            *args: Positional arguments for ``func``.

        Returns:
            The callable's result.

        Raises:
            ProcessingTimeoutError: If the budget expires first.
        """
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"{func.__name__} exceeded the {self.timeout}s processing budget")
            raise ProcessingTimeoutError("Processing time exceeded") from e

    async def convert_async(self, json_text: str, delimiter: Optional[str] = None, length_marker: bool = False, indent: Optional[int] = None) -> JsonToToonResponse:
        """Time-budgeted :meth:`convert`.

        Args:
            json_text: JSON text.
            delimiter: Body delimiter.
            length_marker: Prefix counts with ``#``.
            indent: Spaces per level.

        Returns:
            JsonToToonResponse: See :meth:`convert`.
        """
        return await self._run_with_budget(self.convert, json_text, delimiter, length_marker, indent)

    async def fix_json_async(self, json_text: str) -> RepairResult:
        """Time-budgeted :meth:`fix_json`.

        Args:
            json_text: JSON text.

        Returns:
            RepairResult: See :meth:`fix_json`.
        """
        return await self._run_with_budget(self.fix_json, json_text)

    async def count_async(self, text: str) -> TokenCountResult:
        """Time-budgeted :meth:`count`.

        Args:
            text: Input text.

        Returns:
            TokenCountResult: See :meth:`count`.
        """
        return await self._run_with_budget(self.count, text)
