# -*- coding: utf-8 -*-
"""Location: ./toongateway/services/token_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Token Estimation Service.
Counts model tokens with a tiktoken encoding (``o200k_base`` by default) and
falls back to a regex approximation when the encoding cannot be loaded, for
example when its BPE file cannot be downloaded.

The tiktoken encoding lives in a :class:`TokenizerHandle`: it is built lazily,
exactly once, under a lock, and afterwards every caller sees the same cached
encoding or the same cached failure. The FastAPI app owns one handle and
passes an estimator to request handlers through a dependency.

Examples:
    >>> approximate_token_count("hello, world")
    3
    >>> approximate_token_count("   ")
    0
    >>> calculate_savings(100, 60)
    TokenSavings(json_tokens=100, toon_tokens=60, saved=40, percentage=40.0)
    >>> calculate_savings(0, 5) is None
    True
"""

# Standard
import re
import threading
from typing import Any, Optional

# Third-Party
from fastapi import Request
import tiktoken

# First-Party
from toongateway.schemas import TokenCountResult, TokenSavings
from toongateway.services.logging_service import LoggingService

# Initialize logging service first
logging_service = LoggingService()
logger = logging_service.get_logger(__name__)

APPROXIMATE_BACKEND = "approximate"

_SEGMENT_RE = re.compile(r"\w+|[^\w\s]", re.ASCII)
_ALPHA_RE = re.compile(r"[a-zA-Z]+")


def approximate_token_count(text: str) -> int:
    """Estimate tokens without a tokenizer.

    Words and single punctuation marks count one token each; purely
    alphabetic runs longer than 8 characters count 2 and longer than 12
    count 3. This is a planning estimate, not a model-accurate count.

    Args:
        text: Input text.

    Returns:
        int: Estimated token count, 0 for empty or whitespace-only text.

    Examples:
        >>> approximate_token_count("internationalization")
        3
        >>> approximate_token_count("tokenizer")
        2
        >>> approximate_token_count('{"id": 1}')
        7
    """
    total = 0
    for segment in _SEGMENT_RE.findall(text):
        if len(segment) > 8 and _ALPHA_RE.fullmatch(segment):
            total += 3 if len(segment) > 12 else 2
        else:
            total += 1
    return total


def calculate_savings(json_tokens: int, toon_tokens: int) -> Optional[TokenSavings]:
    """Compare two token counts.

    Args:
        json_tokens: Tokens in the JSON input.
        toon_tokens: Tokens in the TOON output.

    Returns:
        Optional[TokenSavings]: The comparison, or None unless both counts are positive.

    Examples:
        >>> calculate_savings(3, 4).percentage
        -33.33
    """
    if json_tokens <= 0 or toon_tokens <= 0:
        return None
    saved = json_tokens - toon_tokens
    return TokenSavings(json_tokens=json_tokens, toon_tokens=toon_tokens, saved=saved, percentage=round(saved / json_tokens * 100, 2))


class TokenizerHandle:
    """Once-only holder for a tiktoken encoding.

    Examples:
        >>> handle = TokenizerHandle("no_such_encoding")
        >>> handle.get() is None
        True
        >>> handle.error is not None
        True
    """

    def __init__(self, encoding_name: str = "o200k_base"):
        """Initialize the handle without loading anything.

        Args:
            encoding_name: tiktoken encoding name.
        """
        self.encoding_name = encoding_name
        self._lock = threading.Lock()
        self._loaded = False
        self._encoding: Optional[Any] = None
        self._error: Optional[Exception] = None

    def get(self) -> Optional[Any]:
        """Return the encoding, loading it on first use.

        Returns:
            The tiktoken ``Encoding``, or None if it could not be constructed.
        """
        if not self._loaded:
            with self._lock:
                if not self._loaded:
                    try:
                        self._encoding = tiktoken.get_encoding(self.encoding_name)
                    except Exception as e:
                        self._error = e
                        logger.warning(f"Tokenizer '{self.encoding_name}' unavailable, using approximate token counts: {e}")
                    self._loaded = True
        return self._encoding

    @property
    def error(self) -> Optional[Exception]:
        """Construction failure, if any.

        Returns:
            The cached exception, or None.
        """
        self.get()
        return self._error


class TokenEstimator:
    """Count tokens with an optional tokenizer handle.

    Without a handle, or when the handle failed to load, the approximation
    is used.

    Examples:
        >>> estimator = TokenEstimator()
        >>> estimator.backend
        'approximate'
        >>> estimator.count_tokens("a b c")
        3
        >>> estimator.count("one  two").characters
        6
    """

    def __init__(self, handle: Optional[TokenizerHandle] = None):
        """Initialize the estimator.

        Args:
            handle: Tokenizer handle, or None to always approximate.
        """
        self.handle = handle

    @property
    def backend(self) -> str:
        """Name of the active counting backend.

        Returns:
            str: ``"tiktoken/<encoding>"`` or ``"approximate"``.
        """
        if self.handle is not None and self.handle.get() is not None:
            return f"tiktoken/{self.handle.encoding_name}"
        return APPROXIMATE_BACKEND

    def count_tokens(self, text: str) -> int:
        """Count tokens in ``text``.

        Special-token strings such as ``<|endoftext|>`` are counted as plain text.

        Args:
            text: Input text.

        Returns:
            int: Token count, 0 for empty or whitespace-only text.
        """
        if not text.strip():
            return 0
        encoding = self.handle.get() if self.handle is not None else None
        if encoding is None:
            return approximate_token_count(text)
        return len(encoding.encode(text, disallowed_special=()))

    def count(self, text: str) -> TokenCountResult:
        """Compute the full statistics reported by the count-tokens API.

        Args:
            text: Input text.

        Returns:
            TokenCountResult: Tokens, words and character counts.
        """
        return TokenCountResult(
            tokens=self.count_tokens(text),
            words=len(text.split()),
            characters=len(text.replace(" ", "")),
            characters_with_spaces=len(text),
        )

    def savings(self, json_text: str, toon_text: str) -> Optional[TokenSavings]:
        """Score a conversion.

        Args:
            json_text: Original JSON text.
            toon_text: TOON output.

        Returns:
            Optional[TokenSavings]: See :func:`calculate_savings`.
        """
        return calculate_savings(self.count_tokens(json_text), self.count_tokens(toon_text))


def get_token_estimator(request: Request) -> TokenEstimator:
    """FastAPI dependency returning the estimator owned by the application.

    Args:
        request: Incoming request.

    Returns:
        TokenEstimator: ``request.app.state.token_estimator``.
    """
    return request.app.state.token_estimator
