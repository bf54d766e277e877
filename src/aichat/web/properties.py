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
"""Web configuration properties (aichat.web.*)."""

from __future__ import annotations

from dataclasses import dataclass, field

from aichat.core.config import config_properties
from aichat.web.cors import DEFAULT_MAX_AGE, DEFAULT_METHODS, DEV_ORIGINS, WILDCARD, CORSConfig


@config_properties(prefix="aichat.web.cors")
@dataclass
class CorsProperties:
    """Configuration for cross-origin access (aichat.web.cors.*).

    Set ``enabled: false`` when a reverse proxy serves the frontend and the
    backend under one origin; no CORS filter is installed then.
    """

    enabled: bool = True
    allowed_origins: list[str] = field(default_factory=lambda: list(DEV_ORIGINS))
    allowed_methods: list[str] = field(default_factory=lambda: list(DEFAULT_METHODS))
    allowed_headers: str | list[str] = WILDCARD
    allow_credentials: bool = True
    exposed_headers: list[str] = field(default_factory=list)
    max_age: int = DEFAULT_MAX_AGE
    path_patterns: list[str] = field(default_factory=lambda: ["/**"])

    def to_cors_config(self) -> CORSConfig:
        """Build the immutable policy, validating it."""
        headers = self.allowed_headers
        return CORSConfig(
            allowed_origins=tuple(self.allowed_origins),
            allowed_methods=tuple(self.allowed_methods),
            allowed_headers=headers if isinstance(headers, str) else tuple(headers),
            allow_credentials=self.allow_credentials,
            exposed_headers=tuple(self.exposed_headers or ()),
            max_age=int(self.max_age),
            path_patterns=tuple(self.path_patterns),
        )
