# -*- coding: utf-8 -*-
"""Location: ./toongateway/toon/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

TOON (Token-Oriented Object Notation) encoding.

Examples:
    >>> from toongateway.toon import encode, build_options
    >>> print(encode({"tags": ["a", "b"]}, build_options(delimiter="|")))
    tags[2|]: a|b
"""

# First-Party
from toongateway.toon.encoder import encode, ToonEncoder
from toongateway.toon.options import build_options, EncodingOptions, InvalidOptionError
from toongateway.toon.rows import is_quoted_literal, parse_scalar, split_row

__all__ = [
    "EncodingOptions",
    "InvalidOptionError",
    "ToonEncoder",
    "build_options",
    "encode",
    "is_quoted_literal",
    "parse_scalar",
    "split_row",
]
