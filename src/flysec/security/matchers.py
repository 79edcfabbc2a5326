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
"""Request matchers: predicates over an incoming request.

A matcher decides whether a rule (authorization, CSRF, logout, HTTPS
redirect, header writing, ...) applies to a request.  Matchers only read
``request.url``, ``request.method``, ``request.headers`` and
``request.scope`` so lightweight request doubles work in tests.

Usage::

    PathPatternRequestMatcher("/api/**")
    PathPatternRequestMatcher("/user/{user_name}", method="GET")
    RegexRequestMatcher(r"/reports/\\d+")
    FunctionRequestMatcher(lambda request: "X-Internal" in request.headers)
"""

from __future__ import annotations

import abc
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

_VARIABLE_RE = re.compile(r"\{(\w+)(?::([^{}]+))?\}")


@dataclass(frozen=True)
class MatchResult:
    """Outcome of matching a request, with any captured path variables."""

    matched: bool
    variables: Mapping[str, str] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.matched


_NO_MATCH = MatchResult(False)


class RequestMatcher(abc.ABC):
    """Base class for request matchers.

    Matchers are callables, so ``matcher(request)`` and
    ``matcher.matches(request)`` are equivalent.
    """

    @abc.abstractmethod
    def matches(self, request: Any) -> bool: ...

    def matcher(self, request: Any) -> MatchResult:
        """Match *request* and return captured variables (none by default)."""
        return MatchResult(True) if self.matches(request) else _NO_MATCH

    def __call__(self, request: Any) -> bool:
        return self.matches(request)


def _request_path(request: Any) -> str:
    """Return the path below the ASGI ``root_path`` (the mount point)."""
    path: str = request.url.path
    root_path = _root_path(request)
    if root_path and path.startswith(root_path):
        path = path[len(root_path):] or "/"
    return path


def _root_path(request: Any) -> str:
    scope = getattr(request, "scope", None) or {}
    return str(scope.get("root_path", "") or "")


def _glob(text: str) -> str:
    return "".join("[^/]*" if ch == "*" else "[^/]" if ch == "?" else re.escape(ch) for ch in text)


def _compile_segment(segment: str) -> str:
    parts: list[str] = []
    pos = 0
    for match in _VARIABLE_RE.finditer(segment):
        parts.append(_glob(segment[pos:match.start()]))
        parts.append(f"(?P<{match.group(1)}>{match.group(2) or '[^/]+'})")
        pos = match.end()
    parts.append(_glob(segment[pos:]))
    return "".join(parts)


def compile_path_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a path pattern into a regex matched against the whole path.

    ``?`` matches one character, ``*`` zero or more characters within a
    segment, ``**`` zero or more whole segments, ``{name}`` captures a
    segment and ``{name:regex}`` captures with a custom regex.  A pattern
    whose last segment is literal also matches the path with a trailing
    slash or a ``.ext`` suffix (``/path`` matches ``/path/`` and
    ``/path.html``).
    """
    segments = [s for s in pattern.split("/") if s]
    regex = ""
    for segment in segments:
        regex += "(?:/.*)?" if segment == "**" else "/" + _compile_segment(segment)
    if not regex:
        regex = "/"
    elif pattern.endswith("/") and segments[-1] != "**":
        regex += "/"
    elif segments[-1] != "**" and not any(ch in segments[-1] for ch in "*?."):
        regex += r"(?:/|\.[^/]+)?"
    return re.compile(regex)


class PathPatternRequestMatcher(RequestMatcher):
    """Matches the request path against a path pattern.

    Args:
        pattern: The path pattern (see :func:`compile_path_pattern`).
        method: Optional HTTP method the request must use.
        root_path: Optional ASGI ``root_path`` (mount prefix) the request
            must have been routed through; the pattern then applies to the
            path below it.
    """

    def __init__(self, pattern: str, method: str | None = None, root_path: str | None = None) -> None:
        self.pattern = pattern
        self.method = method.upper() if method else None
        self.root_path = root_path
        self._regex = compile_path_pattern(pattern)

    def matcher(self, request: Any) -> MatchResult:
        if self.method is not None and request.method.upper() != self.method:
            return _NO_MATCH
        if self.root_path is not None and _root_path(request) != self.root_path:
            return _NO_MATCH
        found = self._regex.fullmatch(_request_path(request))
        if found is None:
            return _NO_MATCH
        return MatchResult(True, found.groupdict())

    def matches(self, request: Any) -> bool:
        return self.matcher(request).matched

    def __repr__(self) -> str:
        return f"PathPatternRequestMatcher(pattern={self.pattern!r}, method={self.method!r})"


class RegexRequestMatcher(RequestMatcher):
    """Matches ``path[?query]`` against a regular expression (full match)."""

    def __init__(
        self, pattern: str | re.Pattern[str], method: str | None = None, case_insensitive: bool = False
    ) -> None:
        if isinstance(pattern, re.Pattern):
            self._regex = pattern
        else:
            self._regex = re.compile(pattern, re.IGNORECASE if case_insensitive else 0)
        self.method = method.upper() if method else None

    def matches(self, request: Any) -> bool:
        if self.method is not None and request.method.upper() != self.method:
            return False
        url = _request_path(request)
        query = getattr(request.url, "query", "")
        if query:
            url = f"{url}?{query}"
        return self._regex.fullmatch(url) is not None

    def __repr__(self) -> str:
        return f"RegexRequestMatcher(pattern={self._regex.pattern!r}, method={self.method!r})"


class AnyRequestMatcher(RequestMatcher):
    """Matches every request."""

    def matches(self, request: Any) -> bool:
        return True

    def __repr__(self) -> str:
        return "any_request"


class FunctionRequestMatcher(RequestMatcher):
    """Adapts a plain ``Callable[[Request], bool]``."""

    def __init__(self, function: Callable[[Any], bool]) -> None:
        self._function = function

    def matches(self, request: Any) -> bool:
        return bool(self._function(request))


class OrRequestMatcher(RequestMatcher):
    def __init__(self, *matchers: RequestMatcher) -> None:
        self.matchers = list(matchers)

    def matches(self, request: Any) -> bool:
        return any(m.matches(request) for m in self.matchers)


class AndRequestMatcher(RequestMatcher):
    def __init__(self, *matchers: RequestMatcher) -> None:
        self.matchers = list(matchers)

    def matches(self, request: Any) -> bool:
        return all(m.matches(request) for m in self.matchers)


class NegatedRequestMatcher(RequestMatcher):
    def __init__(self, matcher: RequestMatcher) -> None:
        self.negated = matcher

    def matches(self, request: Any) -> bool:
        return not self.negated.matches(request)


class HeaderRequestMatcher(RequestMatcher):
    """Matches when a header is present (and optionally equals *value*)."""

    def __init__(self, name: str, value: str | None = None) -> None:
        self.name = name
        self.value = value

    def matches(self, request: Any) -> bool:
        actual = request.headers.get(self.name)
        if actual is None:
            return False
        return self.value is None or actual == self.value


class MediaTypeRequestMatcher(RequestMatcher):
    """Matches when the ``Accept`` header names one of *media_types*.

    ``*/*`` is ignored by default, so a client that accepts anything does
    not count as asking for e.g. ``text/html``.
    """

    def __init__(self, *media_types: str, ignore_wildcard: bool = True) -> None:
        self.media_types = {m.lower() for m in media_types}
        self.ignore_wildcard = ignore_wildcard

    def matches(self, request: Any) -> bool:
        accept = request.headers.get("accept", "")
        for entry in accept.split(","):
            media_type = entry.split(";", 1)[0].strip().lower()
            if not media_type:
                continue
            if media_type == "*/*":
                if not self.ignore_wildcard:
                    return True
                continue
            if media_type in self.media_types:
                return True
        return False


class SecureRequestMatcher(RequestMatcher):
    """Matches requests that arrived over HTTPS."""

    def matches(self, request: Any) -> bool:
        return request.url.scheme in ("https", "wss")


any_request = AnyRequestMatcher()

xhr_request = HeaderRequestMatcher("X-Requested-With", "XMLHttpRequest")


def to_matcher(value: Any, method: str | None = None) -> RequestMatcher:
    """Coerce a pattern string, compiled regex, callable or matcher into a matcher."""
    if isinstance(value, RequestMatcher):
        return value
    if isinstance(value, str):
        return PathPatternRequestMatcher(value, method=method)
    if isinstance(value, re.Pattern):
        return RegexRequestMatcher(value, method=method)
    if callable(value):
        return FunctionRequestMatcher(value)
    raise TypeError(f"Cannot use {value!r} as a request matcher")
