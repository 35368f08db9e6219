# -*- coding: utf-8 -*-
"""Location: ./toongateway/common/models.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Value model for parsed JSON documents.

A parsed JSON document is represented with plain Python values:

- ``None`` for null
- ``bool`` for booleans
- ``int`` / ``float`` for numbers
- ``str`` for strings
- ``dict`` (string keys) for objects
- ``list`` (or ``tuple``) for arrays

The encoder dispatches on :class:`ValueKind` so that every kind is handled
explicitly.

Examples:
    >>> kind_of(None)
    <ValueKind.NULL: 'null'>
    >>> kind_of(True)
    <ValueKind.BOOL: 'bool'>
    >>> kind_of(1.5)
    <ValueKind.NUMBER: 'number'>
    >>> kind_of({"a": 1})
    <ValueKind.OBJECT: 'object'>
    >>> is_scalar([1])
    False
"""

# Standard
from enum import Enum
from typing import Any, Dict, List, Tuple, Union

JsonScalar = Union[None, bool, int, float, str]
JsonValue = Union[JsonScalar, Dict[str, Any], List[Any], Tuple[Any, ...]]


class ValueKind(str, Enum):
    """The six kinds of JSON value."""

    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    OBJECT = "object"
    ARRAY = "array"


def kind_of(value: Any) -> ValueKind:
    """Classify a parsed JSON value.

    ``bool`` is checked before numbers because it is a subclass of ``int``.

    Args:
        value: Parsed JSON value.

    Returns:
        The value's kind.

    Raises:
        TypeError: If the value is not part of the JSON data model.

    Examples:
        >>> kind_of(0)
        <ValueKind.NUMBER: 'number'>
        >>> kind_of(False)
        <ValueKind.BOOL: 'bool'>
        >>> kind_of((1, 2))
        <ValueKind.ARRAY: 'array'>
        >>> kind_of(object())
        Traceback (most recent call last):
            ...
        TypeError: Object of type object is not part of the JSON data model
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, dict):
        return ValueKind.OBJECT
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    raise TypeError(f"Object of type {type(value).__name__} is not part of the JSON data model")


def is_scalar(value: Any) -> bool:
    """Return True for null, boolean, number and string values.

    Args:
        value: Parsed JSON value.

    Returns:
        True if the value is not an object or array.
    """
    return kind_of(value) not in (ValueKind.OBJECT, ValueKind.ARRAY)
