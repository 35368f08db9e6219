# -*- coding: utf-8 -*-
"""Location: ./toongateway/toon/options.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

TOON encoding options.

Examples:
    >>> opts = EncodingOptions()
    >>> (opts.indent_width, opts.delimiter, opts.length_marker)
    (2, ',', False)
    >>> EncodingOptions(delimiter="|").header_markers
    ('|', '|')
    >>> build_options(delimiter=";")
    Traceback (most recent call last):
        ...
    toongateway.toon.options.InvalidOptionError: invalid delimiter: ';' (must be ',', '\\t', or '|')
"""

# Standard
from typing import Any, Dict, Optional, Tuple

# Third-Party
from pydantic import BaseModel, ConfigDict, Field, field_validator, PositiveInt, ValidationError

COMMA = ","
TAB = "\t"
PIPE = "|"
DELIMITERS: Tuple[str, ...] = (COMMA, TAB, PIPE)

# (count-to-brace marker, header field separator) per body delimiter
_HEADER_MARKERS: Dict[str, Tuple[str, str]] = {
    COMMA: ("", ","),
    TAB: (" ", " "),
    PIPE: ("|", "|"),
}


class InvalidOptionError(ValueError):
    """Raised when encoding options are rejected before any processing."""


class EncodingOptions(BaseModel):
    """Immutable options for a single encode call.

    Attributes:
        indent_width: Spaces per nesting level.
        delimiter: Separator for inline arrays and tabular rows.
        length_marker: Prefix array counts with ``#``.
    """

    model_config = ConfigDict(frozen=True)

    indent_width: PositiveInt = 2
    delimiter: str = Field(default=COMMA)
    length_marker: bool = False

    @field_validator("delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        """Accept only the three TOON delimiters.

        Args:
            v: Candidate delimiter.

        Returns:
            The delimiter.

        Raises:
            ValueError: If the delimiter is not comma, tab or pipe.
        """
        if v not in DELIMITERS:
            raise ValueError(f"invalid delimiter: {v!r} (must be ',', '\\t', or '|')")
        return v

    @property
    def indent(self) -> str:
        """One indentation unit.

        Returns:
            ``indent_width`` spaces.
        """
        return " " * self.indent_width

    @property
    def count_prefix(self) -> str:
        """Prefix placed before every array count.

        Returns:
            ``"#"`` when length markers are enabled, else ``""``.
        """
        return "#" if self.length_marker else ""

    @property
    def header_markers(self) -> Tuple[str, str]:
        """Markers that keep array headers self-describing.

        Returns:
            Tuple of (marker between count and ``]``, separator between tabular header fields).
        """
        return _HEADER_MARKERS[self.delimiter]


def build_options(indent_width: Optional[int] = None, delimiter: Optional[str] = None, length_marker: bool = False) -> EncodingOptions:
    """Build options, treating empty values as "use the default".

    Args:
        indent_width: Spaces per level; ``None`` or ``0`` selects the default.
        delimiter: Body delimiter; ``None`` or ``""`` selects the default.
        length_marker: Whether to prefix counts with ``#``.

    Returns:
        Validated options.

    Raises:
        InvalidOptionError: If any option is invalid.

    Examples:
        >>> build_options(indent_width=0, delimiter="").indent_width
        2
        >>> build_options(indent_width=4, delimiter="\\t").delimiter
        '\\t'
        >>> build_options(indent_width=-1)
        Traceback (most recent call last):
            ...
        toongateway.toon.options.InvalidOptionError: invalid indent width: -1 (must be positive)
    """
    values: Dict[str, Any] = {"length_marker": length_marker}
    if indent_width:
        if indent_width < 0:
            raise InvalidOptionError(f"invalid indent width: {indent_width} (must be positive)")
        values["indent_width"] = indent_width
    if delimiter:
        if delimiter not in DELIMITERS:
            raise InvalidOptionError(f"invalid delimiter: {delimiter!r} (must be ',', '\\t', or '|')")
        values["delimiter"] = delimiter
    try:
        return EncodingOptions(**values)
    except ValidationError as exc:
        raise InvalidOptionError(str(exc)) from exc
