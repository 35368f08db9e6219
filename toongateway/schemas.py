# -*- coding: utf-8 -*-
"""Location: ./toongateway/schemas.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

TOON Gateway Schema Definitions.
This module provides Pydantic models for request validation and response
serialization of the conversion API. Wire names are camelCase
(``lengthMarker``, ``tokenSavings``, ``charactersWithSpaces``); Python
attribute names are snake_case and both are accepted on input.

Examples:
    >>> req = JsonToToonRequest.model_validate({"json": "{}", "lengthMarker": True})
    >>> (req.json_text, req.length_marker, req.delimiter)
    ('{}', True, None)
    >>> TokenSavings(json_tokens=10, toon_tokens=6, saved=4, percentage=40.0).model_dump(by_alias=True)
    {'json': 10, 'toon': 6, 'saved': 4, 'percentage': 40.0}
"""

# Standard
from typing import List, Optional

# Third-Party
from pydantic import BaseModel, ConfigDict, Field


class BaseModelWithConfigDict(BaseModel):
    """Base model accepting both field names and aliases."""

    model_config = ConfigDict(populate_by_name=True)


# --- Token accounting ---


class TokenSavings(BaseModelWithConfigDict):
    """Token comparison between the JSON input and its TOON encoding.

    Attributes:
        json_tokens: Tokens in the JSON text as submitted.
        toon_tokens: Tokens in the TOON output.
        saved: ``json_tokens - toon_tokens`` (may be negative).
        percentage: ``saved / json_tokens * 100`` rounded to 2 decimals.
    """

    json_tokens: int = Field(..., alias="json")
    toon_tokens: int = Field(..., alias="toon")
    saved: int
    percentage: float


class TokenCountResult(BaseModelWithConfigDict):
    """Statistics for a piece of text.

    Attributes:
        tokens: Model token count.
        words: Whitespace-separated word count.
        characters: Length with ASCII spaces removed.
        characters_with_spaces: Full length.
    """

    tokens: int
    words: int
    characters: int
    characters_with_spaces: int = Field(..., alias="charactersWithSpaces")


# --- Requests ---


class JsonToToonRequest(BaseModelWithConfigDict):
    """Request body for ``POST /api/json-to-toon``.

    Empty ``delimiter`` and zero ``indent`` select the defaults.
    """

    json_text: str = Field(..., alias="json", description="JSON text to convert")
    delimiter: Optional[str] = Field(default=None, description="',', '\\t' or '|'")
    length_marker: bool = Field(default=False, alias="lengthMarker")
    indent: Optional[int] = Field(default=None, description="Spaces per nesting level")


class FixJsonRequest(BaseModelWithConfigDict):
    """Request body for ``POST /api/fix-json``."""

    json_text: str = Field(..., alias="json", description="Malformed JSON text")


class CountTokensRequest(BaseModel):
    """Request body for ``POST /api/count-tokens``."""

    text: str


# --- Responses ---


class JsonToToonResponse(BaseModelWithConfigDict):
    """Successful conversion.

    Attributes:
        toon: Encoded document.
        fixed: Whether the input had to be normalized before it parsed.
        message: Human-readable note, set when ``fixed`` is true.
        token_savings: Present only when both token counts are positive.
    """

    toon: str
    fixed: bool = False
    message: Optional[str] = None
    token_savings: Optional[TokenSavings] = Field(default=None, alias="tokenSavings")


class FixJsonResponse(BaseModel):
    """Successful repair.

    Attributes:
        fixed: Valid JSON text.
        changes: One entry per rewrite, in application order.
    """

    fixed: str
    changes: List[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error body for conversion failures.

    Attributes:
        error: Human-readable description.
        original: The submitted text, when the failure concerns it.
    """

    error: str
    original: Optional[str] = None


class HealthResponse(BaseModel):
    """Liveness probe body."""

    status: str = "healthy"
