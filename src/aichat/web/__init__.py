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
"""aichat web: CORS policy and the request filter chain.

Framework-agnostic types are exported directly; the Starlette adapter is
re-exported for convenience.
"""

from aichat.web.adapters.starlette import (
    CorsFilter,
    RequestLoggingFilter,
    WebFilterChainMiddleware,
    create_app,
)
from aichat.web.cors import CORSConfig, CorsDecision, is_preflight_request
from aichat.web.filters import OncePerRequestFilter, order
from aichat.web.ports.filter import WebFilter
from aichat.web.properties import CorsProperties

__all__ = [
    # Framework-agnostic
    "CORSConfig",
    "CorsDecision",
    "CorsProperties",
    "OncePerRequestFilter",
    "WebFilter",
    "is_preflight_request",
    "order",
    # Default adapter (Starlette)
    "CorsFilter",
    "RequestLoggingFilter",
    "WebFilterChainMiddleware",
    "create_app",
]
