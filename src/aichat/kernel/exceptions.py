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
"""Exception hierarchy for the aichat web backend.

Request handling never raises for CORS mismatches; these exceptions surface
problems found while the application is being assembled at startup.
"""

from __future__ import annotations


class AiChatException(Exception):
    """Base exception for all aichat errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CORS_CONFIG_INVALID").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


class ConfigurationException(AiChatException):
    """Configuration could not be loaded, bound, or validated at startup."""


class CorsConfigurationException(ConfigurationException):
    """A CORS policy violates the protocol's constraints."""

    def __init__(self, message: str, field: str, value: object = None) -> None:
        super().__init__(
            message,
            code="CORS_CONFIG_INVALID",
            context={"field": field, "value": value},
        )
