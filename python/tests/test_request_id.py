"""Tests for X-Request-ID handling and request-scoped logging context."""

import pytest
from fastapi.testclient import TestClient
from structlog.testing import capture_logs

from chatjournal.logging import (
    add_request_context,
    clear_request_context,
    get_request_id,
    set_request_context,
)
from chatjournal.middleware.request_id import (
    REQUEST_ID_HEADER,
    generate_request_id,
    is_valid_request_id,
    normalize_request_id,
)


class TestRequestIdValidation:
    @pytest.mark.parametrize(
        "value",
        ["abc-123", "trace_1.2", "5F1C8C2E-0C6B-4D53-9E0F-8A4B5C6D7E8F", "a" * 128],
    )
    def test_valid(self, value):
        assert is_valid_request_id(value)

    @pytest.mark.parametrize("value", ["", "has space", "semi;colon", "a" * 129, "ünïcode"])
    def test_invalid(self, value):
        assert not is_valid_request_id(value)

    def test_uuid_lowercased(self):
        assert (
            normalize_request_id("5F1C8C2E-0C6B-4D53-9E0F-8A4B5C6D7E8F")
            == "5f1c8c2e-0c6b-4d53-9e0f-8a4b5c6d7e8f"
        )

    def test_non_uuid_kept(self):
        assert normalize_request_id("Trace-ABC") == "Trace-ABC"

    def test_generated_ids_are_valid(self):
        assert is_valid_request_id(generate_request_id())


class TestRequestIdMiddleware:
    def test_generated_when_missing(self, client: TestClient):
        response = client.get("/health")
        assert is_valid_request_id(response.headers[REQUEST_ID_HEADER])

    def test_incoming_id_echoed(self, client: TestClient):
        response = client.get("/health", headers={REQUEST_ID_HEADER: "client-trace-42"})
        assert response.headers[REQUEST_ID_HEADER] == "client-trace-42"

    def test_invalid_incoming_id_replaced(self, client: TestClient):
        response = client.get("/health", headers={REQUEST_ID_HEADER: "not valid!"})
        assert response.headers[REQUEST_ID_HEADER] != "not valid!"

    def test_auth_failure_carries_request_id(self, client: TestClient):
        response = client.get("/chats", headers={REQUEST_ID_HEADER: "auth-fail-1"})

        assert response.status_code == 401
        assert response.headers[REQUEST_ID_HEADER] == "auth-fail-1"
        assert response.json()["request_id"] == "auth-fail-1"

    def test_access_log_emitted(self, client: TestClient):
        with capture_logs() as logs:
            client.get("/health", headers={REQUEST_ID_HEADER: "log-me"})

        completed = [e for e in logs if e["event"] == "request_completed"]
        assert len(completed) == 1
        assert completed[0]["status_code"] == 200
        assert "duration_ms" in completed[0]


class TestLoggingContext:
    def test_context_added_to_events(self):
        set_request_context("req-1", user_id="user-1", path="/chats", method="GET")
        try:
            event = add_request_context(None, "info", {"event": "x"})
            assert event["request_id"] == "req-1"
            assert event["user_id"] == "user-1"
            assert event["path"] == "/chats"
            assert event["method"] == "GET"
        finally:
            clear_request_context()

    def test_cleared_context(self):
        set_request_context("req-2")
        clear_request_context()

        assert get_request_id() is None
        assert add_request_context(None, "info", {"event": "x"}) == {"event": "x"}

    def test_later_binding_keeps_earlier_fields(self):
        set_request_context("req-3", path="/chats", method="POST")
        set_request_context("req-3", user_id="user-3")
        try:
            event = add_request_context(None, "info", {"event": "x"})
            assert event == {
                "event": "x",
                "request_id": "req-3",
                "user_id": "user-3",
                "path": "/chats",
                "method": "POST",
            }
        finally:
            clear_request_context()
