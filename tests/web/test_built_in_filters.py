# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for built-in WebFilter implementations and the events they log."""

from __future__ import annotations

import pytest
import structlog
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient
from structlog.testing import capture_logs

from aichat.core.config import Config
from aichat.web.adapters.starlette.app import create_app
from aichat.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from aichat.web.adapters.starlette.filters import CorsFilter, RequestLoggingFilter
from aichat.web.filters import HIGHEST_PRECEDENCE, get_order

ALLOWED = "http://localhost:9011"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _ok_handler(request: Request) -> PlainTextResponse:
    return PlainTextResponse("OK")


async def _error_handler(request: Request) -> PlainTextResponse:
    raise ValueError("boom")


def _make_app(*filters, routes=None) -> Starlette:
    if routes is None:
        routes = [Route("/rooms", _ok_handler)]
    return Starlette(
        routes=routes,
        middleware=[Middleware(WebFilterChainMiddleware, filters=list(filters))],
    )


def _events(logs: list[dict], name: str) -> list[dict]:
    return [entry for entry in logs if entry["event"] == name]


# ---------------------------------------------------------------------------
# RequestLoggingFilter
# ---------------------------------------------------------------------------


class TestRequestLoggingFilter:
    def test_logs_completed_request(self):
        client = TestClient(_make_app(RequestLoggingFilter()))

        with capture_logs() as logs:
            resp = client.get("/rooms", headers={"Origin": ALLOWED})

        assert resp.status_code == 200
        [entry] = _events(logs, "http_request")
        assert entry["method"] == "GET"
        assert entry["path"] == "/rooms"
        assert entry["origin"] == ALLOWED
        assert entry["status_code"] == 200
        assert entry["duration_ms"] >= 0

    def test_logs_failure_and_propagates(self):
        client = TestClient(
            _make_app(RequestLoggingFilter(), routes=[Route("/rooms", _error_handler)])
        )

        with capture_logs() as logs, pytest.raises(ValueError, match="boom"):
            client.get("/rooms")

        [entry] = _events(logs, "http_request_failed")
        assert entry["log_level"] == "error"
        assert entry["error_type"] == "ValueError"
        assert entry["error"] == "boom"
        assert _events(logs, "http_request") == []

    def test_logs_short_circuited_preflight(self):
        client = TestClient(_make_app(CorsFilter(), RequestLoggingFilter()))

        with capture_logs() as logs:
            resp = client.options(
                "/rooms",
                headers={"Origin": ALLOWED, "Access-Control-Request-Method": "POST"},
            )

        assert resp.status_code == 200
        [entry] = _events(logs, "http_request")
        assert entry["method"] == "OPTIONS"
        assert entry["status_code"] == 200

    def test_order_is_highest_precedence_plus_200(self):
        assert get_order(RequestLoggingFilter) == HIGHEST_PRECEDENCE + 200


# ---------------------------------------------------------------------------
# CorsFilter
# ---------------------------------------------------------------------------


class TestCorsFilterLogging:
    def test_disallowed_origin_logged(self):
        client = TestClient(_make_app(CorsFilter()))

        with capture_logs() as logs:
            client.get("/rooms", headers={"Origin": "http://evil.example"})

        [entry] = _events(logs, "cors_origin_rejected")
        assert entry["log_level"] == "debug"
        assert entry["origin"] == "http://evil.example"
        assert entry["preflight"] is False

    def test_allowed_and_same_origin_not_logged(self):
        client = TestClient(_make_app(CorsFilter()))

        with capture_logs() as logs:
            client.get("/rooms", headers={"Origin": ALLOWED})
            client.get("/rooms")

        assert _events(logs, "cors_origin_rejected") == []

    def test_order_is_highest_precedence_plus_250(self):
        assert get_order(CorsFilter) == HIGHEST_PRECEDENCE + 250


# ---------------------------------------------------------------------------
# Startup events from create_app()
# ---------------------------------------------------------------------------


class TestCreateAppLogging:
    def test_enabled_policy_logged(self):
        with capture_logs() as logs:
            create_app(Config({}), configure_logging=False)

        [entry] = _events(logs, "cors_policy_registered")
        assert entry["allowed_origins"] == ["http://localhost:9011", "http://127.0.0.1:9011"]
        assert entry["allowed_methods"] == ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
        assert entry["max_age"] == 3600
        assert _events(logs, "cors_disabled") == []

    def test_disabled_policy_logged(self):
        config = Config({"aichat": {"web": {"cors": {"enabled": False}}}})

        with capture_logs() as logs:
            create_app(config, configure_logging=False)

        assert len(_events(logs, "cors_disabled")) == 1
        assert _events(logs, "cors_policy_registered") == []

    def test_logging_port_receives_config(self):
        class RecordingPort:
            def __init__(self):
                self.configured = []

            def configure(self, config):
                self.configured.append(config)

            def get_logger(self, name):
                return structlog.get_logger(name)

            def set_level(self, name, level):
                pass

        port = RecordingPort()
        config = Config({})
        create_app(config, logging_port=port)

        assert port.configured == [config]
