# -*- coding: utf-8 -*-
"""Location: ./tests/unit/toongateway/test_main.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Tests for the HTTP API.
"""

# Standard
import time
from unittest.mock import patch

# Third-Party
from fastapi.testclient import TestClient
import orjson

# First-Party
from toongateway.config import settings
from toongateway.main import app
from toongateway.services.conversion_service import ConversionService


class TestJsonToToon:
    """Test POST /api/json-to-toon."""

    def test_converts_valid_json(self, client: TestClient):
        """Valid JSON converts with savings and no message."""
        payload = {"json": '{"users": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]}'}
        response = client.post("/api/json-to-toon", json=payload)
        assert response.status_code == 200
        body = response.json()
        assert body["toon"] == "users[2]{id,name}:\n    1,Alice\n    2,Bob"
        assert body["fixed"] is False
        assert "message" not in body
        assert set(body["tokenSavings"]) == {"json", "toon", "saved", "percentage"}
        assert body["tokenSavings"]["saved"] == body["tokenSavings"]["json"] - body["tokenSavings"]["toon"]

    def test_fixes_malformed_json(self, client: TestClient):
        """Malformed JSON is normalized and flagged."""
        response = client.post("/api/json-to-toon", json={"json": '{name: "x", n: 1,}'})
        assert response.status_code == 200
        body = response.json()
        assert body["toon"] == "n: 1\nname: x"
        assert body["fixed"] is True
        assert body["message"] == "JSON corrected automatically"

    def test_tab_delimiter(self, client: TestClient):
        """The tab delimiter marks the header."""
        payload = {"json": '{"items": [{"id": 1, "name": "Widget"}, {"id": 2, "name": "Gadget"}]}', "delimiter": "\t"}
        body = client.post("/api/json-to-toon", json=payload).json()
        assert body["toon"] == "items[2 ]{id name}:\n    1\tWidget\n    2\tGadget"

    def test_length_marker_and_indent(self, client: TestClient):
        """lengthMarker and indent are honored."""
        payload = {"json": '{"a": {"tags": ["foo", "bar", "baz"]}}', "lengthMarker": True, "indent": 4}
        body = client.post("/api/json-to-toon", json=payload).json()
        assert body["toon"] == "a:\n    tags[#3]: foo,bar,baz"

    def test_empty_object_omits_savings(self, client: TestClient):
        """No savings are reported for empty output."""
        body = client.post("/api/json-to-toon", json={"json": "{}"}).json()
        assert body == {"toon": "", "fixed": False}

    def test_invalid_delimiter(self, client: TestClient):
        """Invalid delimiters are rejected with 422."""
        response = client.post("/api/json-to-toon", json={"json": "[1]", "delimiter": ";"})
        assert response.status_code == 422
        assert response.json()["error"].startswith("invalid delimiter")

    def test_invalid_json(self, client: TestClient):
        """Unparseable input echoes the original."""
        response = client.post("/api/json-to-toon", json={"json": "definitely not json"})
        assert response.status_code == 422
        body = response.json()
        assert body["error"].startswith("Invalid JSON")
        assert body["original"] == "definitely not json"

    def test_missing_field(self, client: TestClient):
        """Missing fields use the validation error format."""
        response = client.post("/api/json-to-toon", json={"delimiter": ","})
        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed: Json is required"

    def test_body_not_json(self, client: TestClient):
        """A body that is not JSON is a validation error."""
        response = client.post("/api/json-to-toon", content=b"{", headers={"Content-Type": "application/json"})
        assert response.status_code == 422
        assert response.json()["message"] == "Validation failed: Request body is not valid JSON"


class TestFixJson:
    """Test POST /api/fix-json."""

    def test_repairs(self, client: TestClient):
        """The repaired text and change log are returned."""
        response = client.post("/api/fix-json", json={"json": '{"name": "John", "age": 30,}'})
        assert response.status_code == 200
        body = response.json()
        assert orjson.loads(body["fixed"]) == {"name": "John", "age": 30}
        assert body["changes"] == ["Removed comma before }"]

    def test_valid_input(self, client: TestClient):
        """Valid input comes back with no changes."""
        body = client.post("/api/fix-json", json={"json": "[1, 2]"}).json()
        assert body == {"fixed": "[1, 2]", "changes": []}

    def test_irreparable(self, client: TestClient):
        """Irreparable input is a 422 with the original."""
        response = client.post("/api/fix-json", json={"json": '{"a" 1}'})
        assert response.status_code == 422
        body = response.json()
        assert body["error"].startswith("Could not repair JSON")
        assert body["original"] == '{"a" 1}'


class TestCountTokens:
    """Test POST /api/count-tokens."""

    def test_counts(self, client: TestClient):
        """All four statistics are returned with wire names."""
        response = client.post("/api/count-tokens", json={"text": "Hello world, hi"})
        assert response.status_code == 200
        assert response.json() == {"tokens": 4, "words": 3, "characters": 13, "charactersWithSpaces": 15}

    def test_empty_text(self, client: TestClient):
        """Empty text counts zero."""
        assert client.post("/api/count-tokens", json={"text": ""}).json()["tokens"] == 0

    def test_text_required(self, client: TestClient):
        """The text field is required."""
        response = client.post("/api/count-tokens", json={})
        assert response.status_code == 422
        assert response.json()["message"] == "Validation failed: Text is required"


class TestLimits:
    """Test size, rate and time limits."""

    def test_body_too_large(self, client: TestClient):
        """Bodies over max_body_bytes are refused before parsing."""
        with patch.object(settings, "max_body_bytes", 100):
            response = client.post("/api/count-tokens", json={"text": "x" * 200})
        assert response.status_code == 413
        assert response.json() == {"detail": "Request body too large (maximum 100 bytes)"}

    def test_input_too_large(self, client: TestClient):
        """Fields over max_input_chars are refused."""
        with patch.object(settings, "max_input_chars", 10):
            response = client.post("/api/json-to-toon", json={"json": "[1, 2, 3, 4, 5]"})
        assert response.status_code == 413
        assert response.json()["detail"].startswith("Input too large: 15 characters")

    def test_rate_limit(self, limited_client: TestClient):
        """The third request inside the window is refused; health is exempt."""
        for _ in range(2):
            assert limited_client.post("/api/count-tokens", json={"text": "a"}).status_code == 200
        response = limited_client.post("/api/fix-json", json={"json": "[]"})
        assert response.status_code == 429
        assert response.json() == {"detail": "Rate limit exceeded. Maximum 2 requests per 60 seconds."}
        assert limited_client.get("/health").status_code == 200

    def test_rate_limit_per_client(self, limited_client: TestClient):
        """Different forwarded addresses have separate budgets."""
        for _ in range(2):
            limited_client.post("/api/count-tokens", json={"text": "a"}, headers={"X-Forwarded-For": "198.51.100.1"})
        response = limited_client.post("/api/count-tokens", json={"text": "a"}, headers={"X-Forwarded-For": "198.51.100.2"})
        assert response.status_code == 200

    def test_processing_timeout(self, client: TestClient):
        """Requests over the time budget get 504."""

        def slow_convert(self, *args):
            time.sleep(0.3)

        with patch.object(settings, "processing_timeout", 0.01), patch.object(ConversionService, "convert", slow_convert):
            response = client.post("/api/json-to-toon", json={"json": "[1]"})
        assert response.status_code == 504
        assert response.json() == {"error": "Processing time exceeded"}

    def test_unexpected_error(self, client: TestClient):
        """Unexpected failures are a generic 500."""
        quiet_client = TestClient(app, raise_server_exceptions=False)
        with patch.object(ConversionService, "count", side_effect=RuntimeError("boom")):
            response = quiet_client.post("/api/count-tokens", json={"text": "a"})
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestMeta:
    """Test health, version and lifespan."""

    def test_health(self, client: TestClient):
        """Health reports healthy."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_version(self, client: TestClient):
        """Version reports the app and the estimator backend."""
        body = client.get("/version").json()
        assert body["app"]["name"] == settings.app_name
        assert body["tokenizer"]["backend"] == "approximate"
        assert body["limits"]["max_input_chars"] == settings.max_input_chars

    def test_lifespan(self):
        """Startup and shutdown run cleanly."""
        with TestClient(app) as lifespan_client:
            assert lifespan_client.get("/health").status_code == 200

    def test_openapi_documents_errors(self, client: TestClient):
        """Conversion routes document their error bodies."""
        spec = client.get("/openapi.json").json()
        responses = spec["paths"]["/api/json-to-toon"]["post"]["responses"]
        assert {"200", "413", "422", "429", "504"} <= set(responses)
        assert "ErrorResponse" in spec["components"]["schemas"]
