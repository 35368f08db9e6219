# -*- coding: utf-8 -*-
"""Location: ./toongateway/utils/orjson_response.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

JSON response class rendered with orjson.

Examples:
    >>> ORJSONResponse(content={"toon": "a: 1"}).body
    b'{"toon":"a: 1"}'
    >>> ORJSONResponse(content={"x": 1}).media_type
    'application/json'
"""

# Standard
from typing import Any

# Third-Party
from fastapi.responses import JSONResponse
import orjson


class ORJSONResponse(JSONResponse):
    """JSONResponse that serializes with orjson.

    Non-string dict keys are stringified and unknown types fall back to ``str``.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:
        """Serialize ``content``.

        Args:
            content: JSON-compatible content.

        Returns:
            bytes: UTF-8 JSON document.
        """
        return orjson.dumps(content, default=str, option=orjson.OPT_NON_STR_KEYS)
