# -*- coding: utf-8 -*-
"""Location: ./toongateway/config.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

TOON Gateway Configuration.
This module defines configuration settings for the TOON Gateway using Pydantic.
It loads configuration from environment variables with sensible defaults.

Environment variables:
- APP_NAME: Service name (default: "TOON_Gateway")
- HOST: Host to bind to (default: "127.0.0.1")
- PORT: Port to listen on (default: 8080)
- LOG_LEVEL: Logging level (default: "INFO")
- LOG_FORMAT: "text" or "json" (default: "text")
- TOKENIZER_ENCODING: tiktoken encoding name (default: "o200k_base")
- PROCESSING_TIMEOUT: Per-request time budget in seconds (default: 5.0)
- MAX_INPUT_CHARS: Longest accepted JSON/text field (default: 500000)
- MAX_BODY_BYTES: Largest accepted request body (default: 1048576)
- RATE_LIMIT_ENABLED: Per-client rate limiting (default: True)
- RATE_LIMIT_REQUESTS: Requests allowed per window (default: 10)
- RATE_LIMIT_WINDOW: Window length in seconds (default: 1.0)
- ALLOWED_ORIGINS: CORS origins, JSON array or CSV (default: "*")

Examples:
    >>> from toongateway.config import Settings
    >>> s = Settings(log_level="debug")
    >>> s.log_level
    'DEBUG'
    >>> s.default_delimiter
    ','
    >>> try:
    ...     Settings(default_delimiter=";")
    ... except ValueError as e:
    ...     print('error')
    error
"""

# Standard
from functools import lru_cache
import logging
from typing import Annotated, Any, Literal, Optional, Set

# Third-Party
import orjson
from pydantic import Field, field_validator, PositiveFloat, PositiveInt
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# First-Party
from toongateway.toon.options import DELIMITERS

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    TOON Gateway configuration settings.

    Examples:
        >>> s = Settings()
        >>> s.app_name
        'TOON_Gateway'
        >>> s.port
        8080
        >>> s.tokenizer_encoding
        'o200k_base'
        >>> s.max_input_chars
        500000
        >>> isinstance(s.allowed_origins, set)
        True
    """

    # Basic Settings
    app_name: str = "TOON_Gateway"
    host: str = "127.0.0.1"
    port: PositiveInt = Field(default=8080, ge=1, le=65535)
    app_root_path: str = ""

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text"] = "text"
    log_requests: bool = Field(default=True, description="Log method, path, status and duration of every request")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Normalize and validate the log level value.

        Args:
            v (str): The log level string provided via configuration or environment.

        Returns:
            str: The validated and normalized (uppercase) log level.

        Raises:
            ValueError: If the provided value is not a known level.
        """
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_up = v.upper()
        if v_up not in allowed:
            raise ValueError(f"Invalid log_level: {v}")
        return v_up

    # Conversion
    tokenizer_encoding: str = Field(default="o200k_base", description="tiktoken encoding used for exact token counts")
    processing_timeout: PositiveFloat = Field(default=5.0, description="Seconds allowed for parse, repair, encode and scoring of one request")
    max_input_chars: PositiveInt = Field(default=500_000, description="Maximum characters in the json/text request field")
    max_body_bytes: PositiveInt = Field(default=1_048_576, description="Maximum request body size in bytes")
    default_indent: PositiveInt = 2
    default_delimiter: str = ","

    @field_validator("default_delimiter")
    @classmethod
    def validate_default_delimiter(cls, v: str) -> str:
        """Accept only the TOON delimiters.

        Args:
            v: Candidate delimiter.

        Returns:
            str: The delimiter.

        Raises:
            ValueError: If the delimiter is not comma, tab or pipe.
        """
        if v not in DELIMITERS:
            raise ValueError(f"Invalid default_delimiter: {v!r}")
        return v

    # Rate limiting
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_requests: PositiveInt = Field(default=10, description="Requests allowed per client within rate_limit_window")
    rate_limit_window: PositiveFloat = Field(default=1.0, description="Sliding window length in seconds")
    rate_limit_idle_expiry: PositiveInt = Field(default=180, description="Seconds after which an idle client's history is dropped")

    # Security Headers Configuration
    security_headers_enabled: bool = Field(default=True)
    x_frame_options: Optional[str] = Field(default="DENY")

    @field_validator("x_frame_options")
    @classmethod
    def normalize_x_frame_options(cls, v: Optional[str]) -> Optional[str]:
        """Convert string 'null' or 'none' to Python None to disable iframe restrictions.

        Args:
            v: The x_frame_options value from environment/config

        Returns:
            None if v is "null" or "none" (case-insensitive), otherwise returns v unchanged
        """
        if isinstance(v, str) and v.lower() in ("null", "none"):
            return None
        return v

    hsts_enabled: bool = Field(default=True)
    hsts_max_age: int = Field(default=31536000)  # 1 year
    hsts_include_subdomains: bool = Field(default=True)

    # Tell pydantic *not* to touch this env var - our validator will.
    allowed_origins: Annotated[Set[str], NoDecode] = {"*"}

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_allowed_origins(cls, v: Any) -> Set[str]:
        """Parse allowed origins from environment variable or config value.

        Args:
            v: JSON array string, comma-separated string, or iterable.

        Returns:
            Set[str]: A set of allowed origin strings.

        Examples:
            >>> sorted(Settings._parse_allowed_origins('["https://a.com", "https://b.com"]'))
            ['https://a.com', 'https://b.com']
            >>> sorted(Settings._parse_allowed_origins("https://x.com , https://y.com"))
            ['https://x.com', 'https://y.com']
            >>> Settings._parse_allowed_origins(["*"])
            {'*'}
        """
        if isinstance(v, str):
            v = v.strip()
            if v[:1] in "\"'" and v[-1:] == v[:1]:  # strip 1 outer quote pair
                v = v[1:-1]
            try:
                parsed = set(orjson.loads(v))
            except orjson.JSONDecodeError:
                parsed = {s.strip() for s in v.split(",") if s.strip()}
            return parsed
        return set(v)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    def log_summary(self) -> None:
        """Log the effective settings at INFO level."""
        logger.info(f"Application settings summary: {self.model_dump()}")


@lru_cache()
def get_settings(**kwargs: Any) -> Settings:
    """Get cached settings instance.

    Args:
        **kwargs: Keyword arguments to pass to the Settings setup.

    Returns:
        Settings: A cached instance of the Settings class.

    Examples:
        >>> settings = get_settings()
        >>> isinstance(settings, Settings)
        True
        >>> settings is get_settings()
        True
    """
    return Settings(**kwargs)


# Lazy "instance" of settings
class LazySettingsWrapper:
    """Lazily initialize settings singleton on getattr"""

    def __getattr__(self, key: str) -> Any:
        """Get the real settings object and forward to it

        Args:
            key: The key to fetch from settings

        Returns:
            Any: The value of the attribute on the settings
        """
        return getattr(get_settings(), key)


settings = LazySettingsWrapper()
