# -*- coding: utf-8 -*-
"""Location: ./toongateway/toon/rows.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Reader for TOON scalars and delimited rows.

This is the inverse of the scalar side of the encoder: it reads back the
cells of an inline array or a tabular row. It does not decode whole
documents.

Examples:
    >>> split_row('1,"a,b",true', ",")
    ['1', '"a,b"', 'true']
    >>> [parse_scalar(cell) for cell in split_row('1,"a,b",true', ",")]
    [1, 'a,b', True]
    >>> read_inline_array("tags[3]: foo,bar,baz")
    ['foo', 'bar', 'baz']
"""

# Standard
import re
from typing import Any, Dict, List, Optional, Tuple

# First-Party
from toongateway.toon.options import COMMA, PIPE, TAB

_NUMBER_RE = re.compile(r"^-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?$")

# key[#N<marker>]: values  or  key[#N<marker>]{fields}:
_HEADER_RE = re.compile(r'^(?P<key>"(?:[^"\\]|\\.)*"|[^\[\s"]*)\[(?P<hash>#?)(?P<count>\d+)(?P<marker>[ |]?)\](?:\{(?P<fields>.*)\})?:(?P<rest>.*)$')

_UNESCAPES = {"\\": "\\", '"': '"', "n": "\n", "t": "\t", "r": "\r"}


def _read_quoted(token: str) -> Tuple[str, str]:
    """Read a quoted string from the start of ``token``.

    Args:
        token: Text starting with ``"``.

    Returns:
        Tuple of (decoded string, remaining text).

    Raises:
        ValueError: If the string is unterminated or has an invalid escape.

    Examples:
        >>> _read_quoted('"a\\\\"b" rest')
        ('a"b', ' rest')
        >>> _read_quoted('"\\\\u0041"')
        ('A', '')
    """
    if not token.startswith('"'):
        raise ValueError("Expected quoted string")

    out: List[str] = []
    i = 1
    while i < len(token):
        char = token[i]
        if char == '"':
            return "".join(out), token[i + 1 :]
        if char == "\\":
            if i + 1 >= len(token):
                raise ValueError("Unterminated escape sequence")
            nxt = token[i + 1]
            if nxt in _UNESCAPES:
                out.append(_UNESCAPES[nxt])
                i += 2
                continue
            if nxt == "u" and i + 6 <= len(token):
                out.append(chr(int(token[i + 2 : i + 6], 16)))
                i += 6
                continue
            raise ValueError(f"Invalid escape sequence: \\{nxt}")
        out.append(char)
        i += 1

    raise ValueError("Unterminated string")


def is_quoted_literal(token: str) -> bool:
    """Check whether ``token`` is exactly one well-formed quoted string.

    Args:
        token: Candidate token.

    Returns:
        True if the whole token is a quoted string.

    Examples:
        >>> is_quoted_literal('"- item"')
        True
        >>> is_quoted_literal('"a" b')
        False
        >>> is_quoted_literal("plain")
        False
    """
    if not token.startswith('"'):
        return False
    try:
        _, rest = _read_quoted(token)
    except ValueError:
        return False
    return rest == ""


def parse_scalar(token: str) -> Any:
    """Read one scalar cell.

    Args:
        token: Encoded scalar.

    Returns:
        None, bool, int, float or str.

    Examples:
        >>> parse_scalar("null") is None
        True
        >>> parse_scalar("false")
        False
        >>> parse_scalar("-12")
        -12
        >>> parse_scalar("0.5")
        0.5
        >>> parse_scalar('"true"')
        'true'
        >>> parse_scalar("hello world")
        'hello world'
    """
    if token == "null":
        return None
    if token == "true":
        return True
    if token == "false":
        return False
    if token.startswith('"'):
        value, rest = _read_quoted(token)
        if rest:
            raise ValueError(f"Unexpected text after quoted string: {rest!r}")
        return value
    if _NUMBER_RE.match(token):
        if "." in token or "e" in token.lower():
            return float(token)
        return int(token)
    return token


def split_row(line: str, delimiter: str = COMMA) -> List[str]:
    """Split a row into cells, respecting quoted cells.

    Args:
        line: Row text (leading indentation is ignored).
        delimiter: Active delimiter.

    Returns:
        Raw cell tokens.

    Examples:
        >>> split_row("    1\\tWidget", "\\t")
        ['1', 'Widget']
        >>> split_row('"x|y"|2', "|")
        ['"x|y"', '2']
    """
    line = line.lstrip(" ")
    cells: List[str] = []
    current: List[str] = []
    in_quotes = False
    escape = False

    for char in line:
        if escape:
            current.append(char)
            escape = False
        elif char == "\\" and in_quotes:
            current.append(char)
            escape = True
        elif char == '"':
            current.append(char)
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            cells.append("".join(current))
            current = []
        else:
            current.append(char)

    cells.append("".join(current))
    return cells


def _delimiter_for_marker(marker: str) -> str:
    """Map a header count marker to its body delimiter.

    Args:
        marker: ``""``, ``" "`` or ``"|"``.

    Returns:
        The body delimiter.
    """
    return {"": COMMA, " ": TAB, "|": PIPE}[marker]


def read_inline_array(line: str) -> List[Any]:
    """Read back a one-line primitive array.

    Args:
        line: ``key[N]: v1,v2`` or ``[N]: v1,v2``.

    Returns:
        The scalar values.

    Raises:
        ValueError: If the header is malformed or the count does not match.

    Examples:
        >>> read_inline_array("[#2|]: a|b")
        ['a', 'b']
        >>> read_inline_array("[0]:")
        []
    """
    match = _HEADER_RE.match(line.strip(" "))
    if not match or match.group("fields") is not None:
        raise ValueError(f"Not an inline array: {line[:50]}")
    count = int(match.group("count"))
    rest = match.group("rest")
    if count == 0:
        return []
    if not rest.startswith(" "):
        raise ValueError(f"Missing values after header: {line[:50]}")
    values = [parse_scalar(cell) for cell in split_row(rest[1:], _delimiter_for_marker(match.group("marker")))]
    if len(values) != count:
        raise ValueError(f"Expected {count} values, found {len(values)}")
    return values


def read_table(text: str) -> List[Dict[str, Any]]:
    """Read back a tabular array (header plus rows).

    Args:
        text: Header line followed by row lines.

    Returns:
        One dict per row.

    Raises:
        ValueError: If the header is malformed or a row has the wrong width.

    Examples:
        >>> read_table("items[2 ]{id name}:\\n    1\\tWidget\\n    2\\tGadget")
        [{'id': 1, 'name': 'Widget'}, {'id': 2, 'name': 'Gadget'}]
    """
    lines = [line for line in text.split("\n") if line.strip()]
    match = _HEADER_RE.match(lines[0].strip(" ")) if lines else None
    if not match or match.group("fields") is None:
        raise ValueError("Not a tabular array header")

    marker = match.group("marker")
    delimiter = _delimiter_for_marker(marker)
    field_sep = {"": ",", " ": " ", "|": "|"}[marker]
    fields = [parse_scalar(f) if f.startswith('"') else f for f in split_row(match.group("fields"), field_sep)]

    rows: List[Dict[str, Any]] = []
    for line in lines[1:]:
        cells = split_row(line, delimiter)
        if len(cells) != len(fields):
            raise ValueError(f"Row has {len(cells)} cells, header has {len(fields)} fields")
        rows.append({f: parse_scalar(c) for f, c in zip(fields, cells)})

    count = int(match.group("count"))
    if len(rows) != count:
        raise ValueError(f"Expected {count} rows, found {len(rows)}")
    return rows


def read_header(line: str) -> Optional[Dict[str, Any]]:
    """Parse an array header line.

    Args:
        line: Candidate header line.

    Returns:
        Dict with ``key``, ``count``, ``length_marker``, ``delimiter`` and
        ``fields`` (None for non-tabular headers), or None if ``line`` is not
        an array header.

    Examples:
        >>> read_header("users[#2]{id,name}:")["count"]
        2
        >>> read_header("name: Alice") is None
        True
    """
    match = _HEADER_RE.match(line.strip(" "))
    if not match:
        return None
    key = match.group("key")
    return {
        "key": parse_scalar(key) if key.startswith('"') else key,
        "count": int(match.group("count")),
        "length_marker": match.group("hash") == "#",
        "delimiter": _delimiter_for_marker(match.group("marker")),
        "fields": match.group("fields"),
    }


def verify_document(text: str) -> int:
    """Read back every inline and tabular array in a TOON document.

    List-form headers are skipped; their items are checked line by line.

    Args:
        text: TOON document.

    Returns:
        int: Number of arrays that were read back.

    Raises:
        ValueError: If an array header disagrees with its values or rows.

    Examples:
        >>> verify_document("tags[2]: a,b\\nusers[1]{id}:\\n    7")
        2
        >>> verify_document("tags[3]: a,b")
        Traceback (most recent call last):
            ...
        ValueError: Expected 3 values, found 2
    """
    lines = text.split("\n")
    checked = 0
    i = 0
    while i < len(lines):
        line = lines[i].strip(" ")
        if line.startswith("- "):
            line = line[2:]
        header = read_header(line)
        i += 1
        if header is None:
            continue
        if header["fields"] is not None:
            read_table("\n".join([line] + lines[i : i + header["count"]]))
            i += header["count"]
            checked += 1
        elif header["count"] == 0 or not line.endswith(":"):
            read_inline_array(line)
            checked += 1
    return checked
