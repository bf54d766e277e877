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
"""Tests for the aichat exception hierarchy."""

import pytest

from aichat.kernel.exceptions import (
    AiChatException,
    ConfigurationException,
    CorsConfigurationException,
)


class TestAiChatException:
    def test_basic_creation(self):
        exc = AiChatException("something went wrong")
        assert str(exc) == "something went wrong"
        assert exc.code is None
        assert exc.context == {}

    def test_with_code_and_context(self):
        exc = AiChatException("bad config", code="CONFIG_001", context={"key": "aichat.web"})
        assert exc.code == "CONFIG_001"
        assert exc.context["key"] == "aichat.web"

    def test_context_not_shared_between_instances(self):
        exc = AiChatException("first")
        exc.context["key"] = "value"
        assert AiChatException("second").context == {}


class TestCorsConfigurationException:
    def test_carries_code_and_field(self):
        exc = CorsConfigurationException("wildcard origin", field="allowed_origins", value=["*"])

        assert exc.code == "CORS_CONFIG_INVALID"
        assert exc.context == {"field": "allowed_origins", "value": ["*"]}

    def test_hierarchy(self):
        assert issubclass(CorsConfigurationException, ConfigurationException)
        assert issubclass(ConfigurationException, AiChatException)

    def test_caught_as_base(self):
        with pytest.raises(AiChatException):
            raise CorsConfigurationException("bad", field="max_age", value=-1)
