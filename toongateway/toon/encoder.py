# -*- coding: utf-8 -*-
"""Location: ./toongateway/toon/encoder.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

TOON (Token-Oriented Object Notation) encoder.

TOON is a compact, indentation-structured rendering of the JSON data model
designed for LLM prompts. This encoder is canonical: object keys are always
emitted in sorted order, so logically equal documents produce identical text.

Token Reduction Strategies:
1. Keys and simple string values are emitted without quotation marks
2. Arrays of scalars are written inline: key[N]: v1,v2,v3
3. Arrays of same-shaped flat objects become tables: key[N]{f1,f2}: + rows
4. Everything else falls back to "- " list entries

Examples:
    >>> from toongateway.toon.encoder import encode
    >>> encode({"name": "Alice", "id": 123})
    'id: 123\\nname: Alice'
    >>> print(encode({"users": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]}))
    users[2]{id,name}:
        1,Alice
        2,Bob
    >>> encode({"tags": ["foo", "bar"]})
    'tags[2]: foo,bar'
"""

# Standard
from decimal import Decimal
import math
import re
from typing import Any, Dict, List, Optional

# First-Party
from toongateway.common.models import is_scalar, kind_of, ValueKind
from toongateway.toon.options import COMMA, EncodingOptions

# Deepest container nesting that is encoded before the sentinel is substituted
MAX_DEPTH = 100
DEPTH_SENTINEL = '"[MAX_DEPTH_EXCEEDED]"'

_RESERVED_WORDS = frozenset({"true", "false", "null"})

# Characters that always force a string value into quotes (besides the active delimiter)
_VALUE_SPECIAL_CHARS = frozenset(':"\'\\\n\t\r')

# Object-line keys and tabular-header keys use slightly different sets
_OBJECT_KEY_SPECIAL_CHARS = frozenset(" ,:\"'[]{}")
_HEADER_KEY_SPECIAL_CHARS = frozenset(" :\"'[]{}")

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r"}

# Strings a number parser would accept: decimal, hex float, inf/infinity and nan
_NUMERIC_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
    r"|0[xX]_?(?:[0-9a-fA-F](?:_?[0-9a-fA-F])*\.?(?:[0-9a-fA-F](?:_?[0-9a-fA-F])*)?|\.[0-9a-fA-F](?:_?[0-9a-fA-F])*)[pP][+-]?[0-9]+"
    r"|(?i:inf|infinity))"
    r"|(?i:nan)"
)


def encode_number(value: float) -> str:
    """Encode a number in canonical TOON form.

    Args:
        value: Integer or float to encode.

    Returns:
        Canonical numeral; ``null`` for NaN and infinities.

    Examples:
        >>> encode_number(0)
        '0'
        >>> encode_number(-0.0)
        '0'
        >>> encode_number(3.0)
        '3'
        >>> encode_number(3.14)
        '3.14'
        >>> encode_number(1e20)
        '100000000000000000000'
        >>> encode_number(1e-7)
        '0.0000001'
        >>> encode_number(float("nan"))
        'null'
    """
    if isinstance(value, int):
        return str(value)
    if math.isnan(value) or math.isinf(value):
        return "null"
    if value == 0:
        return "0"
    if value.is_integer():
        return str(int(value))
    # repr() is the shortest round-trip form; Decimal drops any exponent
    return format(Decimal(repr(value)), "f")


def _is_numeric_literal(s: str) -> bool:
    """Check whether a string would be read back as a number.

    Decimal and hexadecimal float forms plus the inf, infinity and nan
    spellings (any case) count. Digits are ASCII only and underscores are
    allowed only after a hex prefix.

    Args:
        s: Candidate string.

    Returns:
        True if the string is a numeric literal.

    Examples:
        >>> _is_numeric_literal("1e5")
        True
        >>> _is_numeric_literal("-Infinity")
        True
        >>> _is_numeric_literal("0x1p3")
        True
        >>> _is_numeric_literal("1_000")
        False
        >>> _is_numeric_literal("\u0661")
        False
        >>> _is_numeric_literal("abc")
        False
    """
    return _NUMERIC_RE.fullmatch(s) is not None


def _has_control_chars(s: str) -> bool:
    """Check for characters below U+0020.

    Args:
        s: String to check.

    Returns:
        True if any control character is present.
    """
    return any(ord(c) < 32 for c in s)


def needs_quotes(s: str, delimiter: str = COMMA) -> bool:
    """Determine if a string value must be quoted.

    Args:
        s: String value.
        delimiter: Active delimiter.

    Returns:
        True if the bare form would be ambiguous.

    Examples:
        >>> needs_quotes("hello world")
        False
        >>> needs_quotes("")
        True
        >>> needs_quotes("TRUE")
        True
        >>> needs_quotes("42")
        True
        >>> needs_quotes("- item")
        True
        >>> needs_quotes("-item")
        False
        >>> needs_quotes("a|b")
        False
        >>> needs_quotes("a|b", "|")
        True
        >>> needs_quotes("[tag]")
        True
    """
    if not s:
        return True
    if s != s.strip():
        return True
    if delimiter in s:
        return True
    if any(c in _VALUE_SPECIAL_CHARS for c in s):
        return True
    if s.lower() in _RESERVED_WORDS:
        return True
    if _is_numeric_literal(s):
        return True
    if s.startswith("- "):
        return True
    return s[0] in "[{"


def quote_string(s: str) -> str:
    """Quote and escape a string unconditionally.

    Args:
        s: String to quote.

    Returns:
        Double-quoted string with ``\\``, ``"``, newline, tab and carriage
        return escaped, and other control characters as ``\\uXXXX``.

    Examples:
        >>> quote_string('say "hi"')
        '"say \\\\"hi\\\\""'
        >>> quote_string("a\\nb")
        '"a\\\\nb"'
        >>> quote_string("\\x01")
        '"\\\\u0001"'
    """
    out = ['"']
    for char in s:
        escaped = _ESCAPES.get(char)
        if escaped is not None:
            out.append(escaped)
        elif ord(char) < 32:
            out.append(f"\\u{ord(char):04x}")
        else:
            out.append(char)
    out.append('"')
    return "".join(out)


def encode_string(s: str, delimiter: str = COMMA) -> str:
    """Encode a string value, quoting only when necessary.

    Args:
        s: String to encode.
        delimiter: Active delimiter.

    Returns:
        Bare or quoted string.

    Examples:
        >>> encode_string("simple")
        'simple'
        >>> encode_string("true")
        '"true"'
        >>> encode_string("")
        '""'
    """
    return quote_string(s) if needs_quotes(s, delimiter) else s


def encode_key(key: str, delimiter: str = COMMA, in_header: bool = False) -> str:
    """Encode an object key or a tabular header field.

    Args:
        key: Key to encode.
        delimiter: Active delimiter, only relevant inside tabular headers.
        in_header: True when the key is a field of a tabular header.

    Returns:
        Bare or quoted key.

    Examples:
        >>> encode_key("name")
        'name'
        >>> encode_key("first name")
        '"first name"'
        >>> encode_key("a,b")
        '"a,b"'
        >>> encode_key("a,b", delimiter="|", in_header=True)
        'a,b'
        >>> encode_key("a|b", delimiter="|", in_header=True)
        '"a|b"'
        >>> encode_key("-x")
        '"-x"'
        >>> encode_key("10")
        '"10"'
    """
    if not key:
        return '""'
    special = _HEADER_KEY_SPECIAL_CHARS if in_header else _OBJECT_KEY_SPECIAL_CHARS
    if (
        (in_header and delimiter in key)
        or any(c in special for c in key)
        or key.startswith("-")
        or _is_numeric_literal(key)
        or _has_control_chars(key)
    ):
        return quote_string(key)
    return key


class ToonEncoder:
    """Encode parsed JSON values as TOON text with fixed options.

    Instances hold no per-call state and can be shared between threads.

    Examples:
        >>> from toongateway.toon.options import EncodingOptions
        >>> ToonEncoder(EncodingOptions(length_marker=True)).encode({"tags": ["a", "b"]})
        'tags[#2]: a,b'
        >>> print(ToonEncoder(EncodingOptions(delimiter="|")).encode([{"a": 1, "b": "x|y"}]))
        [1|]{a|b}:
          1|"x|y"
    """

    def __init__(self, options: Optional[EncodingOptions] = None) -> None:
        """Initialize the encoder.

        Args:
            options: Encoding options; defaults are used when omitted.
        """
        self.options = options or EncodingOptions()
        self._indent = self.options.indent
        self._delimiter = self.options.delimiter
        self._count_prefix = self.options.count_prefix

    def encode(self, value: Any) -> str:
        """Encode a value.

        Args:
            value: Parsed JSON value.

        Returns:
            TOON text.
        """
        return self._encode_value(value, 0)

    def _encode_value(self, value: Any, depth: int) -> str:
        """Dispatch on the value's kind.

        Args:
            value: Value to encode.
            depth: Nesting level of the value.

        Returns:
            Encoded value.

        Raises:
            TypeError: If the value is not part of the JSON data model.
        """
        if depth > MAX_DEPTH:
            return DEPTH_SENTINEL

        match kind_of(value):
            case ValueKind.NULL:
                return "null"
            case ValueKind.BOOL:
                return "true" if value else "false"
            case ValueKind.NUMBER:
                return encode_number(value)
            case ValueKind.STRING:
                return encode_string(value, self._delimiter)
            case ValueKind.OBJECT:
                return self._encode_object(value, depth)
            case ValueKind.ARRAY:
                return self._encode_array(list(value), depth)
        raise TypeError(f"Object of type {type(value).__name__} is not TOON serializable")

    def _encode_object(self, obj: Dict[str, Any], depth: int) -> str:
        """Encode an object, one line per sorted key.

        Args:
            obj: Object to encode.
            depth: Nesting level; lines are indented by ``depth`` units.

        Returns:
            Encoded lines; empty for an empty object.
        """
        prefix = self._indent * depth
        lines: List[str] = []
        for key in sorted(obj):
            value = obj[key]
            encoded_key = encode_key(key, self._delimiter)
            kind = kind_of(value)

            if kind in (ValueKind.OBJECT, ValueKind.ARRAY) and depth + 1 > MAX_DEPTH:
                lines.append(f"{prefix}{encoded_key}: {DEPTH_SENTINEL}")
            elif kind is ValueKind.OBJECT:
                lines.append(f"{prefix}{encoded_key}:")
                if value:
                    lines.append(self._encode_object(value, depth + 1))
            elif kind is ValueKind.ARRAY:
                lines.append(f"{prefix}{encoded_key}{self._encode_array(list(value), depth + 1)}")
            else:
                lines.append(f"{prefix}{encoded_key}: {self._encode_value(value, depth)}")
        return "\n".join(lines)

    def _encode_array(self, arr: List[Any], depth: int) -> str:
        """Encode an array in tabular, inline or list form.

        The returned text starts with the ``[N]`` header (no indentation) so
        callers can attach it to a key.

        Args:
            arr: Array to encode.
            depth: Nesting level of the array; body lines sit one unit deeper.

        Returns:
            Encoded array.
        """
        if not arr:
            return f"[{self._count_prefix}0]:"

        fields = self._tabular_fields(arr)
        if fields is not None:
            return self._encode_tabular(arr, fields, depth)

        if all(is_scalar(item) for item in arr):
            return self._encode_inline(arr, depth)

        return self._encode_list(arr, depth)

    @staticmethod
    def _tabular_fields(arr: List[Any]) -> Optional[List[str]]:
        """Return the shared sorted fields if the array can be a table.

        Args:
            arr: Non-empty array.

        Returns:
            Sorted field names, or None if the array is not tabular.
        """
        first = arr[0]
        if not isinstance(first, dict) or not first:
            return None
        fields = sorted(first)
        field_set = set(fields)
        for item in arr:
            if not isinstance(item, dict) or item.keys() != field_set:
                return None
            if not all(is_scalar(v) for v in item.values()):
                return None
        return fields

    def _encode_tabular(self, arr: List[Dict[str, Any]], fields: List[str], depth: int) -> str:
        """Encode a header plus one delimited row per object.

        Args:
            arr: Same-shaped flat objects.
            fields: Sorted field names.
            depth: Nesting level of the array.

        Returns:
            Header and rows.
        """
        count_marker, field_sep = self.options.header_markers
        header_fields = field_sep.join(encode_key(f, self._delimiter, in_header=True) for f in fields)
        header = f"[{self._count_prefix}{len(arr)}{count_marker}]{{{header_fields}}}:"

        row_prefix = self._indent * (depth + 1)
        rows = [row_prefix + self._delimiter.join(self._encode_value(item[f], depth) for f in fields) for item in arr]
        return header + "\n" + "\n".join(rows)

    def _encode_inline(self, arr: List[Any], depth: int) -> str:
        """Encode an array of scalars on one line.

        Args:
            arr: Array of scalars.
            depth: Nesting level of the array.

        Returns:
            Header followed by the delimited values.
        """
        count_marker, _ = self.options.header_markers
        values = self._delimiter.join(self._encode_value(item, depth) for item in arr)
        return f"[{self._count_prefix}{len(arr)}{count_marker}]: {values}"

    def _encode_list(self, arr: List[Any], depth: int) -> str:
        """Encode mixed or nested content as ``- `` entries.

        Args:
            arr: Array with at least one non-scalar element.
            depth: Nesting level of the array.

        Returns:
            Header and list entries.
        """
        item_prefix = self._indent * (depth + 1)
        lines = [f"[{self._count_prefix}{len(arr)}]:"]

        for item in arr:
            kind = kind_of(item)
            if kind is ValueKind.OBJECT and item and depth + 1 <= MAX_DEPTH:
                # Body is encoded one unit below the dash; its first line moves onto the dash line
                body = self._encode_object(item, depth + 2).split("\n")
                lines.append(f"{item_prefix}- {body[0][len(item_prefix) + len(self._indent):]}")
                lines.extend(body[1:])
            elif kind is ValueKind.OBJECT and not item:
                lines.append(f"{item_prefix}- ")
            elif kind is ValueKind.ARRAY:
                nested = self._encode_value(item, depth + 1).split("\n")
                lines.append(f"{item_prefix}- {nested[0]}")
                lines.extend(f"{item_prefix}  {line}" for line in nested[1:])
            elif kind is ValueKind.OBJECT:
                lines.append(f"{item_prefix}- {DEPTH_SENTINEL}")
            else:
                lines.append(f"{item_prefix}- {self._encode_value(item, depth)}")

        return "\n".join(lines)


def encode(value: Any, options: Optional[EncodingOptions] = None) -> str:
    """Encode a parsed JSON value as TOON.

    Args:
        value: Parsed JSON value.
        options: Encoding options; defaults when omitted.

    Returns:
        TOON text.

    Examples:
        >>> encode(None)
        'null'
        >>> encode([1, "two", True])
        '[3]: 1,two,true'
        >>> encode([])
        '[0]:'
        >>> encode({})
        ''
        >>> print(encode({"a": {}, "b": {"c": 1}}))
        a:
        b:
          c: 1
    """
    return ToonEncoder(options).encode(value)
