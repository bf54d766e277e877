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
"""CORS filter: applies a :class:`CORSConfig` decision to each request."""

from __future__ import annotations

import structlog
from starlette.requests import Request
from starlette.responses import Response

from aichat.web.cors import REQUEST_HEADERS, REQUEST_METHOD, CORSConfig, is_preflight_request
from aichat.web.filters import HIGHEST_PRECEDENCE, OncePerRequestFilter, order
from aichat.web.ports.filter import CallNext

logger = structlog.get_logger("aichat.web.cors")


@order(HIGHEST_PRECEDENCE + 250)
class CorsFilter(OncePerRequestFilter):
    """Answers preflights directly and decorates actual responses with CORS headers.

    Requests outside the policy's ``path_patterns`` pass through untouched.
    """

    def __init__(self, config: CORSConfig | None = None) -> None:
        self._config = config or CORSConfig()
        self.url_patterns = list(self._config.path_patterns)

    @property
    def config(self) -> CORSConfig:
        return self._config

    async def do_filter(self, request: Request, call_next: CallNext) -> Response:
        origin = request.headers.get("origin")
        preflight = is_preflight_request(request.method, request.headers)
        decision = self._config.evaluate(
            origin,
            request.method,
            preflight,
            request.headers.get(REQUEST_HEADERS.lower()),
        )

        if not decision.allow:
            logger.debug(
                "cors_origin_rejected",
                origin=origin,
                method=request.method,
                path=request.url.path,
                preflight=preflight,
            )

        if decision.terminal:
            response = Response(status_code=decision.status_code or 200)
        else:
            response = await call_next(request)

        for name, value in decision.response_headers:
            response.headers[name] = value
        if origin:
            response.headers.add_vary_header("Origin")
        if preflight:
            response.headers.add_vary_header(REQUEST_METHOD)
            response.headers.add_vary_header(REQUEST_HEADERS)
        return response
