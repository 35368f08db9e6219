# -*- coding: utf-8 -*-
"""Location: ./toongateway/utils/error_formatter.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

TOON Gateway centralized error formatting.
This module transforms technical Pydantic validation errors and conversion
failures into user-friendly messages suitable for API responses.

The ErrorFormatter class handles:
- Pydantic ValidationError / FastAPI RequestValidationError formatting
- Mapping technical error messages to user-friendly explanations
- Consistent error response structure

Examples:
    >>> from pydantic import BaseModel
    >>> class M(BaseModel):
    ...     text: str
    >>> try:
    ...     M()
    ... except ValidationError as e:
    ...     result = ErrorFormatter.format_validation_error(e)
    >>> result["message"]
    'Validation failed: Text is required'
    >>> result["success"]
    False
"""

# Standard
from typing import Any, Dict, Union

# Third-Party
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

# First-Party
from toongateway.services.logging_service import LoggingService

# Initialize logging service first
logging_service = LoggingService()
logger = logging_service.get_logger(__name__)


class ErrorFormatter:
    """Transform technical errors into user-friendly messages.

    Examples:
        >>> ErrorFormatter._get_user_message("indent", "Input should be a valid integer")
        'Indent must be an integer'
    """

    @staticmethod
    def format_validation_error(error: Union[ValidationError, RequestValidationError]) -> Dict[str, Any]:
        """Convert Pydantic errors to user-friendly format.

        Args:
            error: The validation error to format

        Returns:
            Dict[str, Any]: A dictionary with formatted error details containing:
                - message: General error description
                - details: List of field-specific errors
                - success: Always False for errors

        Examples:
            >>> from pydantic import BaseModel, field_validator
            >>> class Opts(BaseModel):
            ...     delimiter: str
            ...     indent: int
            ...     @field_validator('delimiter')
            ...     @classmethod
            ...     def check(cls, v):
            ...         raise ValueError("invalid delimiter: ';'")
            >>> try:
            ...     Opts(delimiter=';', indent='x')
            ... except ValidationError as e:
            ...     result = ErrorFormatter.format_validation_error(e)
            >>> len(result["details"])
            2
            >>> result["details"][0]["message"]
            "Delimiter must be ',', a tab, or '|'"
        """
        errors = []
        user_message = "Invalid request"

        for err in error.errors():
            loc = err.get("loc", ["field"])
            field = str(loc[-1]) if loc else "field"
            msg = err.get("msg", "Invalid value")

            user_message = ErrorFormatter._get_user_message(field, msg)
            errors.append({"field": field, "message": user_message})

        # Log the full error for debugging
        logger.debug(f"Validation error: {error}")

        return {"message": f"Validation failed: {user_message}", "details": errors, "success": False}

    @staticmethod
    def _get_user_message(field: str, technical_msg: str) -> str:
        """Map technical validation messages to user-friendly ones.

        Args:
            field (str): The field name that failed validation
            technical_msg (str): The technical validation message from Pydantic

        Returns:
            str: User-friendly error message with field context

        Examples:
            >>> ErrorFormatter._get_user_message("json", "Field required")
            'Json is required'
            >>> ErrorFormatter._get_user_message("text", "Input should be a valid string")
            'Text must be a string'
            >>> ErrorFormatter._get_user_message("body", "JSON decode error")
            'Request body is not valid JSON'
            >>> ErrorFormatter._get_user_message("custom", "Something else")
            'Invalid custom'
        """
        mappings = {
            "Field required": f"{field.title()} is required",
            "Input should be a valid string": f"{field.title()} must be a string",
            "Input should be a valid integer": f"{field.title()} must be an integer",
            "Input should be a valid boolean": f"{field.title()} must be a boolean",
            "invalid delimiter": "Delimiter must be ',', a tab, or '|'",
            "invalid indent width": "Indent must be a positive integer",
            "JSON decode error": "Request body is not valid JSON",
        }

        for pattern, friendly_msg in mappings.items():
            if pattern in technical_msg:
                return friendly_msg

        # Default fallback
        return f"Invalid {field}"

    @staticmethod
    def format_conversion_error(error: Exception, original: Any = None) -> Dict[str, Any]:
        """Build the error body for a failed conversion or repair.

        Args:
            error: The conversion failure.
            original: Submitted text, echoed back when known.

        Returns:
            Dict[str, Any]: ``{"error": ...}`` plus ``original`` when given.

        Examples:
            >>> ErrorFormatter.format_conversion_error(ValueError("bad"), "{")
            {'error': 'bad', 'original': '{'}
            >>> ErrorFormatter.format_conversion_error(ValueError("slow"))
            {'error': 'slow'}
        """
        body: Dict[str, Any] = {"error": str(error)}
        if original is not None:
            body["original"] = original
        return body
