# -*- coding: utf-8 -*-
"""Location: ./tests/conftest.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Shared fixtures for the TOON Gateway test suite.
"""

# Standard
import logging
from unittest.mock import patch

# Third-Party
from fastapi.testclient import TestClient
import pytest

# First-Party
from toongateway.config import settings
from toongateway.main import app
from toongateway.services.token_service import get_token_estimator, TokenEstimator
from toongateway.utils.rate_limiter import reset_rate_limiter


@pytest.fixture
def estimator():
    """Token estimator that never loads a tokenizer."""
    return TokenEstimator()


@pytest.fixture
def client(estimator):
    """Test client with the approximate estimator and rate limiting disabled."""
    app.dependency_overrides[get_token_estimator] = lambda: estimator
    reset_rate_limiter()
    with patch.object(settings, "rate_limit_enabled", False):
        yield TestClient(app)
    app.dependency_overrides.clear()
    reset_rate_limiter()


@pytest.fixture
def limited_client(estimator):
    """Test client allowing two requests per minute per client."""
    app.dependency_overrides[get_token_estimator] = lambda: estimator
    reset_rate_limiter()
    with patch.object(settings, "rate_limit_enabled", True), patch.object(settings, "rate_limit_requests", 2), patch.object(settings, "rate_limit_window", 60.0):
        yield TestClient(app)
    app.dependency_overrides.clear()
    reset_rate_limiter()


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
