# -*- coding: utf-8 -*-
"""Location: ./toongateway/main.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

TOON Gateway - Main FastAPI Application.

This module defines the HTTP surface of the TOON Gateway:

- ``POST /api/json-to-toon``: convert JSON text (repairing it if needed) to TOON
  and report token savings.
- ``POST /api/fix-json``: repair malformed JSON and list the applied changes.
- ``POST /api/count-tokens``: count tokens, words and characters.
- ``GET /health`` and ``GET /version``.

Conversion endpoints are rate limited per client IP. All responses carry
security headers; CORS is configured from ``settings.allowed_origins``.

Examples:
    >>> app.title
    'TOON_Gateway'
    >>> sorted(r.path for r in app.routes if r.path.startswith("/api"))
    ['/api/count-tokens', '/api/fix-json', '/api/json-to-toon']
"""

# Standard
from contextlib import asynccontextmanager
from typing import AsyncIterator

# Third-Party
from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

# First-Party
from toongateway import __version__
from toongateway.config import settings
from toongateway.middleware.request_logging_middleware import RequestLoggingMiddleware
from toongateway.middleware.security_headers import SecurityHeadersMiddleware
from toongateway.schemas import CountTokensRequest, ErrorResponse, FixJsonRequest, FixJsonResponse, HealthResponse, JsonToToonRequest, JsonToToonResponse, TokenCountResult
from toongateway.services.conversion_service import ConversionService, InputTooLargeError, JsonParseError, ProcessingTimeoutError
from toongateway.services.logging_service import LoggingService
from toongateway.services.token_service import get_token_estimator, TokenEstimator, TokenizerHandle
from toongateway.toon import InvalidOptionError
from toongateway.utils.error_formatter import ErrorFormatter
from toongateway.utils.orjson_response import ORJSONResponse
from toongateway.utils.rate_limiter import BodySizeLimitMiddleware, enforce_rate_limit
from toongateway.version import router as version_router

# Initialize logging service first
logging_service = LoggingService()
logger = logging_service.get_logger("toongateway")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """
    Manage the application's startup and shutdown lifecycle.

    Args:
        _app (FastAPI): FastAPI app

    Yields:
        None
    """
    await logging_service.initialize()
    logging_service.configure_uvicorn_after_startup()
    logger.info(f"Starting {settings.app_name} {__version__} (tokenizer encoding: {settings.tokenizer_encoding})")
    settings.log_summary()
    try:
        yield
    finally:
        logger.info(f"Shutting down {settings.app_name}")
        await logging_service.shutdown()


app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description="Convert JSON to TOON (Token-Oriented Object Notation), repair malformed JSON and count tokens",
    root_path=settings.app_root_path,
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
)

# One tokenizer handle per application; the encoding itself loads on first use
app.state.token_estimator = TokenEstimator(TokenizerHandle(settings.tokenizer_encoding))


def get_conversion_service(estimator: TokenEstimator = Depends(get_token_estimator)) -> ConversionService:
    """Build the conversion service for a request.

    Args:
        estimator: Injected token estimator.

    Returns:
        ConversionService: Service bound to the application's estimator.
    """
    return ConversionService(estimator)


# Exception handlers


@app.exception_handler(ValidationError)
async def validation_exception_handler(_request: Request, exc: ValidationError):
    """Handle Pydantic validation errors globally.

    Args:
        _request: The FastAPI request object that triggered the validation error.
        exc: The Pydantic ValidationError exception.

    Returns:
        ORJSONResponse: A 422 Unprocessable Entity response with formatted validation error details.

    Examples:
        >>> from pydantic import BaseModel
        >>> import asyncio
        >>> class TestModel(BaseModel):
        ...     text: str
        >>> try:
        ...     TestModel(text=1)
        ... except ValidationError as e:
        ...     result = asyncio.run(validation_exception_handler(None, e))
        >>> result.status_code
        422
    """
    return ORJSONResponse(status_code=422, content=ErrorFormatter.format_validation_error(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(_request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors (automatic request parsing).

    Args:
        _request: The FastAPI request object that triggered validation error.
        exc: The RequestValidationError exception containing failure details.

    Returns:
        ORJSONResponse: A 422 Unprocessable Entity response with error details.
    """
    return ORJSONResponse(status_code=422, content=ErrorFormatter.format_validation_error(exc))


@app.exception_handler(InvalidOptionError)
async def invalid_option_exception_handler(_request: Request, exc: InvalidOptionError):
    """Reject invalid encoding options.

    Args:
        _request: The FastAPI request object.
        exc: The rejected option.

    Returns:
        ORJSONResponse: 422 with ``{"error": ...}``.

    Examples:
        >>> import asyncio
        >>> asyncio.run(invalid_option_exception_handler(None, InvalidOptionError("invalid delimiter: ';'"))).status_code
        422
    """
    return ORJSONResponse(status_code=422, content=ErrorFormatter.format_conversion_error(exc))


@app.exception_handler(JsonParseError)
async def json_parse_exception_handler(_request: Request, exc: JsonParseError):
    """Report input that could not be parsed or repaired.

    Args:
        _request: The FastAPI request object.
        exc: Parse or repair failure carrying the original text.

    Returns:
        ORJSONResponse: 422 with ``{"error", "original"}``.
    """
    return ORJSONResponse(status_code=422, content=ErrorFormatter.format_conversion_error(exc, exc.original))


@app.exception_handler(InputTooLargeError)
async def input_too_large_exception_handler(_request: Request, exc: InputTooLargeError):
    """Reject oversized input.

    Args:
        _request: The FastAPI request object.
        exc: The size failure.

    Returns:
        ORJSONResponse: 413 with ``{"detail": ...}``.
    """
    return ORJSONResponse(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, content={"detail": str(exc)})


@app.exception_handler(ProcessingTimeoutError)
async def timeout_exception_handler(_request: Request, exc: ProcessingTimeoutError):
    """Report an expired processing budget.

    Args:
        _request: The FastAPI request object.
        exc: The timeout.

    Returns:
        ORJSONResponse: 504 with ``{"error": ...}``.
    """
    return ORJSONResponse(status_code=status.HTTP_504_GATEWAY_TIMEOUT, content=ErrorFormatter.format_conversion_error(exc))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Log unexpected failures and answer 500.

    Args:
        request: The FastAPI request object.
        exc: The unexpected exception.

    Returns:
        ORJSONResponse: 500 with a generic ``{"error": ...}``.
    """
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return ORJSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": "Internal server error"})


# Routers

api_router = APIRouter(
    prefix="/api",
    tags=["Conversion"],
    dependencies=[Depends(enforce_rate_limit)],
    responses={
        413: {"description": "Input too large"},
        422: {"model": ErrorResponse, "description": "Invalid JSON or options"},
        429: {"description": "Rate limit exceeded"},
        504: {"model": ErrorResponse, "description": "Processing timed out"},
    },
)


@api_router.post("/json-to-toon", response_model=JsonToToonResponse, response_model_exclude_none=True)
async def json_to_toon(payload: JsonToToonRequest, service: ConversionService = Depends(get_conversion_service)) -> JsonToToonResponse:
    """
    Convert JSON text to TOON.

    Args:
        payload: JSON text plus optional delimiter, length marker and indent.
        service: Injected conversion service.

    Returns:
        JsonToToonResponse: TOON text, whether the input was fixed, and token savings.
    """
    result = await service.convert_async(payload.json_text, payload.delimiter, payload.length_marker, payload.indent)
    logger.debug(f"Converted {len(payload.json_text)} chars of JSON to {len(result.toon)} chars of TOON (fixed={result.fixed})")
    return result


@api_router.post("/fix-json", response_model=FixJsonResponse)
async def fix_json(payload: FixJsonRequest, service: ConversionService = Depends(get_conversion_service)) -> FixJsonResponse:
    """
    Repair malformed JSON.

    Args:
        payload: JSON text to repair.
        service: Injected conversion service.

    Returns:
        FixJsonResponse: Valid JSON text and the list of applied changes.
    """
    result = await service.fix_json_async(payload.json_text)
    return FixJsonResponse(fixed=result.text, changes=result.changes)


@api_router.post("/count-tokens", response_model=TokenCountResult)
async def count_tokens(payload: CountTokensRequest, service: ConversionService = Depends(get_conversion_service)) -> TokenCountResult:
    """
    Count tokens, words and characters.

    Args:
        payload: Text to measure.
        service: Injected conversion service.

    Returns:
        TokenCountResult: The statistics.
    """
    return await service.count_async(payload.text)


@app.get("/health", response_model=HealthResponse)
async def healthcheck() -> HealthResponse:
    """
    Liveness probe.

    Returns:
        HealthResponse: ``{"status": "healthy"}``.
    """
    return HealthResponse()


app.include_router(api_router)
app.include_router(version_router)

# Middleware: the last one added runs first
app.add_middleware(BodySizeLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.allowed_origins),
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=600,  # Cache preflight requests for 10 minutes
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware, log_requests=settings.log_requests)
