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
"""aichat web application factory built on Starlette."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import structlog
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.routing import BaseRoute

from aichat.core.config import Config
from aichat.logging import LoggingPort, StructlogAdapter
from aichat.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from aichat.web.adapters.starlette.filters import CorsFilter, RequestLoggingFilter
from aichat.web.cors import CORSConfig
from aichat.web.ports.filter import WebFilter
from aichat.web.properties import CorsProperties

logger = structlog.get_logger("aichat.web")


def create_app(
    config: Config | None = None,
    routes: Sequence[BaseRoute] | None = None,
    filters: Sequence[WebFilter] = (),
    cors: CORSConfig | None = None,
    debug: bool = False,
    lifespan: object | None = None,
    configure_logging: bool = True,
    logging_port: LoggingPort | None = None,
) -> Starlette:
    """Create the Starlette application with the aichat filter chain.

    The chain always holds request logging. The CORS filter is added when
    ``aichat.web.cors.enabled`` is true; its policy comes from *cors* if given,
    otherwise from the ``aichat.web.cors.*`` properties.
    Logging is configured from ``aichat.logging.*`` through *logging_port*
    (structlog by default) unless *configure_logging* is false.

    Raises:
        CorsConfigurationException: If the configured policy is invalid.
    """
    if config is None:
        config = Config.from_sources(Path.cwd())
    if configure_logging:
        (logging_port or StructlogAdapter()).configure(config)

    properties = config.bind(CorsProperties)

    chain: list[WebFilter] = [RequestLoggingFilter()]
    policy: CORSConfig | None = None
    if properties.enabled:
        policy = cors if cors is not None else properties.to_cors_config()
        chain.append(CorsFilter(policy))
        logger.info(
            "cors_policy_registered",
            path_patterns=list(policy.path_patterns),
            allowed_origins=list(policy.allowed_origins),
            allowed_methods=list(policy.allowed_methods),
            allow_credentials=policy.allow_credentials,
            max_age=policy.max_age,
        )
    else:
        logger.info("cors_disabled")
    chain.extend(filters)

    app = Starlette(
        debug=debug,
        middleware=[Middleware(WebFilterChainMiddleware, filters=chain)],
        routes=list(routes or ()),
        lifespan=lifespan,  # type: ignore[arg-type]
    )
    app.state.aichat_config = config
    app.state.cors_config = policy
    return app
