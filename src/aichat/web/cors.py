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
"""CORS policy and the per-request decision it produces.

Mirrors Spring's ``CorsConfiguration`` + ``DefaultCorsProcessor`` pair, except
that a request is never rejected server-side. A disallowed origin simply
receives no ``Access-Control-Allow-*`` headers and the browser blocks the
response.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from aichat.kernel.exceptions import CorsConfigurationException

WILDCARD = "*"

DEV_ORIGINS: tuple[str, ...] = ("http://localhost:9011", "http://127.0.0.1:9011")
DEFAULT_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "OPTIONS")
DEFAULT_MAX_AGE = 3600

ALLOW_ORIGIN = "Access-Control-Allow-Origin"
ALLOW_CREDENTIALS = "Access-Control-Allow-Credentials"
ALLOW_METHODS = "Access-Control-Allow-Methods"
ALLOW_HEADERS = "Access-Control-Allow-Headers"
EXPOSE_HEADERS = "Access-Control-Expose-Headers"
MAX_AGE = "Access-Control-Max-Age"
REQUEST_METHOD = "Access-Control-Request-Method"
REQUEST_HEADERS = "Access-Control-Request-Headers"

Header = tuple[str, str]


@dataclass(frozen=True)
class CorsDecision:
    """Outcome of evaluating one request against a :class:`CORSConfig`.

    Attributes:
        allow: ``False`` only when the request carried an origin outside the
            allow-list.
        response_headers: Ordered header pairs to attach to the response.
        terminal: ``True`` for preflight requests, which are answered directly
            (HTTP 200, empty body) and never reach application handlers.
    """

    allow: bool
    response_headers: tuple[Header, ...] = ()
    terminal: bool = False

    @property
    def status_code(self) -> int | None:
        return 200 if self.terminal else None

    def header(self, name: str) -> str | None:
        """Value of *name* (case-insensitive) among the decision's headers."""
        wanted = name.lower()
        for key, value in self.response_headers:
            if key.lower() == wanted:
                return value
        return None


_SAME_ORIGIN = CorsDecision(allow=True)
_DENIED = CorsDecision(allow=False)
_DENIED_PREFLIGHT = CorsDecision(allow=False, terminal=True)


@dataclass(frozen=True)
class CORSConfig:
    """Immutable Cross-Origin Resource Sharing policy.

    Defaults reproduce the development policy of the aichat backend: the two
    local frontend origins, the five standard methods, any request header,
    credentialed requests, and a one hour preflight cache.

    Raises:
        CorsConfigurationException: If the policy is internally inconsistent,
            most importantly credentials combined with a wildcard origin.
    """

    allowed_origins: tuple[str, ...] = DEV_ORIGINS
    allowed_methods: tuple[str, ...] = DEFAULT_METHODS
    allowed_headers: str | tuple[str, ...] = WILDCARD
    allow_credentials: bool = True
    exposed_headers: tuple[str, ...] = ()
    max_age: int = DEFAULT_MAX_AGE  # seconds
    path_patterns: tuple[str, ...] = ("/**",)
    _origin_set: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        origins = _as_tuple(self.allowed_origins)
        methods = tuple(m.strip().upper() for m in _as_tuple(self.allowed_methods))
        headers = WILDCARD if _is_wildcard(self.allowed_headers) else _as_tuple(self.allowed_headers)

        if self.allow_credentials and WILDCARD in origins:
            raise CorsConfigurationException(
                "allowed_origins cannot contain '*' when allow_credentials is true; "
                "browsers reject a wildcard origin on credentialed responses. "
                "List the exact origins instead.",
                field="allowed_origins",
                value=list(origins),
            )
        if not methods:
            raise CorsConfigurationException(
                "allowed_methods must name at least one HTTP method",
                field="allowed_methods",
                value=[],
            )
        if self.max_age < 0:
            raise CorsConfigurationException(
                f"max_age must be zero or positive, got {self.max_age}",
                field="max_age",
                value=self.max_age,
            )

        object.__setattr__(self, "allowed_origins", origins)
        object.__setattr__(self, "allowed_methods", methods)
        object.__setattr__(self, "allowed_headers", headers)
        object.__setattr__(self, "exposed_headers", _as_tuple(self.exposed_headers))
        object.__setattr__(self, "path_patterns", _as_tuple(self.path_patterns))
        object.__setattr__(self, "_origin_set", frozenset(origins))

    def check_origin(self, origin: str) -> str | None:
        """Return the value for ``Access-Control-Allow-Origin``, or ``None`` if denied."""
        if origin in self._origin_set:
            return origin
        if WILDCARD in self._origin_set:
            # credentials are off here, enforced in __post_init__
            return WILDCARD
        return None

    def evaluate(
        self,
        origin: str | None,
        method: str,
        is_preflight: bool,
        request_headers: str | None = None,
    ) -> CorsDecision:
        """Decide how to answer a request.

        Args:
            origin: The ``Origin`` header, or ``None`` for same-origin and
                non-browser callers.
            method: The request's HTTP method. Recorded for symmetry with
                Spring's processor; the policy does not reject on method.
            is_preflight: Whether the request is an OPTIONS preflight.
            request_headers: Raw ``Access-Control-Request-Headers`` value.
        """
        if not origin:
            return _SAME_ORIGIN

        allow_origin = self.check_origin(origin)
        if allow_origin is None:
            return _DENIED_PREFLIGHT if is_preflight else _DENIED

        headers: list[Header] = [(ALLOW_ORIGIN, allow_origin)]
        if self.allow_credentials:
            headers.append((ALLOW_CREDENTIALS, "true"))

        if not is_preflight:
            if self.exposed_headers:
                headers.append((EXPOSE_HEADERS, ", ".join(self.exposed_headers)))
            return CorsDecision(allow=True, response_headers=tuple(headers))

        headers.append((ALLOW_METHODS, ", ".join(self.allowed_methods)))
        allow_headers = self._allow_headers_value(request_headers)
        if allow_headers:
            headers.append((ALLOW_HEADERS, allow_headers))
        headers.append((MAX_AGE, str(self.max_age)))
        return CorsDecision(allow=True, response_headers=tuple(headers), terminal=True)

    def _allow_headers_value(self, requested: str | None) -> str | None:
        if self.allowed_headers == WILDCARD:
            # a literal "*" is ignored by browsers on credentialed requests
            return requested.strip() if requested and requested.strip() else None
        return ", ".join(self.allowed_headers)


def is_preflight_request(method: str, headers: Mapping[str, str]) -> bool:
    """``True`` for an OPTIONS request carrying ``Origin`` and ``Access-Control-Request-Method``.

    *headers* must support case-insensitive lookup (Starlette's ``Headers`` does).
    """
    return (
        method.upper() == "OPTIONS"
        and bool(headers.get("origin"))
        and bool(headers.get(REQUEST_METHOD.lower()))
    )


def _as_tuple(values: str | Iterable[str] | None) -> tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        values = values.split(",")
    return tuple(v.strip() for v in values if v and v.strip())


def _is_wildcard(values: str | Iterable[str]) -> bool:
    if isinstance(values, str):
        return values.strip() == WILDCARD
    return WILDCARD in {v.strip() for v in values}
