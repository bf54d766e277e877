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
"""Tests for StructlogAdapter: default LoggingPort implementation."""

import logging

import structlog

from aichat.core.config import Config
from aichat.logging.port import LoggingPort
from aichat.logging.structlog_adapter import StructlogAdapter


class TestStructlogAdapterConformance:
    def test_implements_logging_port(self):
        assert isinstance(StructlogAdapter(), LoggingPort)


class TestStructlogAdapterConfigure:
    def test_configure_with_defaults(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))

        assert adapter._root_level == "INFO"
        assert adapter._format == "console"

    def test_configure_from_packaged_defaults(self):
        adapter = StructlogAdapter()
        adapter.configure(Config.from_sources("/nonexistent"))

        assert adapter._root_level == "INFO"
        assert adapter._module_levels == {}

    def test_configure_reads_root_level(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({"aichat": {"logging": {"level": {"root": "debug"}}}}))
        assert adapter._root_level == "DEBUG"

    def test_configure_reads_format(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({"aichat": {"logging": {"format": "JSON"}}}))
        assert adapter._format == "json"

    def test_root_level_env_override(self, monkeypatch):
        monkeypatch.setenv("AICHAT_LOGGING_LEVEL_ROOT", "warning")
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        assert adapter._root_level == "WARNING"

    def test_configure_applies_per_module_levels(self):
        adapter = StructlogAdapter()
        config = Config({"aichat": {"logging": {"level": {"root": "INFO", "aichat.web.cors": "DEBUG"}}}})
        adapter.configure(config)

        assert adapter._module_levels == {"aichat.web.cors": "DEBUG"}
        assert logging.getLogger("aichat.web.cors").level == logging.DEBUG


class TestStructlogAdapterLoggers:
    def test_get_logger_returns_bound_logger(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        logger = adapter.get_logger("aichat.test")

        assert callable(getattr(logger, "info", None))
        assert callable(getattr(logger, "debug", None))

    def test_set_level(self):
        adapter = StructlogAdapter()
        adapter.set_level("aichat.web", "error")
        assert logging.getLogger("aichat.web").level == logging.ERROR

    def test_unknown_level_falls_back_to_info(self):
        adapter = StructlogAdapter()
        adapter.set_level("aichat.unknown", "chatty")
        assert logging.getLogger("aichat.unknown").level == logging.INFO

    def test_reconfigure_keeps_live_processor_list(self):
        adapter = StructlogAdapter()
        adapter.configure(Config({}))
        live = structlog.get_config()["processors"]
        adapter.configure(Config({"aichat": {"logging": {"format": "json"}}}))

        assert structlog.get_config()["processors"] is live
        assert isinstance(live[-1], structlog.processors.JSONRenderer)
