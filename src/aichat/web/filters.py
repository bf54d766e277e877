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
"""OncePerRequestFilter and filter ordering.

Path patterns follow Spring's ``CorsRegistry.addMapping()`` syntax:
``/**`` matches every path, ``*`` matches within one segment, ``?`` matches
one character.
"""

from __future__ import annotations

import abc
import re
from collections.abc import Callable
from functools import lru_cache
from typing import Any, TypeVar

from aichat.web.ports.filter import CallNext

T = TypeVar("T", bound=type)

HIGHEST_PRECEDENCE: int = -(2**31)
LOWEST_PRECEDENCE: int = 2**31 - 1


def order(value: int) -> Callable[[T], T]:
    """Set a filter class's position in the chain. Lower runs first; default 0."""

    def decorator(cls: T) -> T:
        cls.__aichat_order__ = value  # type: ignore[attr-defined]
        return cls

    return decorator


def get_order(cls: type) -> int:
    return getattr(cls, "__aichat_order__", 0)


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    out: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("/**", i):
            out.append("(?:/.*)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(out))


def path_matches(pattern: str, path: str) -> bool:
    """Match *path* against a Spring-style path pattern."""
    return _compile(pattern).fullmatch(path) is not None


class OncePerRequestFilter(abc.ABC):
    """Base class for :class:`WebFilter` implementations.

    Attributes:
        url_patterns: Path patterns this filter applies to. Empty means all paths.
        exclude_patterns: Path patterns skipped even when ``url_patterns`` match.
    """

    url_patterns: list[str] = []
    exclude_patterns: list[str] = []

    def should_not_filter(self, request: Any) -> bool:
        path: str = request.url.path

        if self.url_patterns and not any(path_matches(p, path) for p in self.url_patterns):
            return True

        return bool(
            self.exclude_patterns and any(path_matches(p, path) for p in self.exclude_patterns)
        )

    @abc.abstractmethod
    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        """Execute the filter logic. Call ``await call_next(request)`` to proceed."""
        ...
