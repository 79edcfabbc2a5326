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
"""CSRF tokens and where they are kept between requests.

Two strategies are provided:

* :class:`CookieCsrfTokenRepository`: the `double-submit cookie`_ pattern.
  The token travels in a JavaScript-readable ``XSRF-TOKEN`` cookie and is
  echoed back in the ``X-XSRF-TOKEN`` header.
* :class:`HttpSessionCsrfTokenRepository`: the token is kept in the HTTP
  session and sent back in the ``X-CSRF-TOKEN`` header or the ``_csrf``
  form field.

.. _double-submit cookie:
   https://cheatsheetseries.owasp.org/cheatsheets/Cross-Site_Request_Forgery_Prevention_Cheat_Sheet.html#double-submit-cookie
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from flysec.security.matchers import FunctionRequestMatcher, RequestMatcher

SAFE_METHODS: frozenset[str] = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})
"""HTTP methods that do not require CSRF validation."""

DEFAULT_PARAMETER_NAME = "_csrf"


def generate_csrf_token() -> str:
    """Generate a URL-safe random token (43 characters)."""
    return secrets.token_urlsafe(32)


def validate_csrf_token(expected: str, actual: str) -> bool:
    """Timing-safe comparison of the stored and the submitted token."""
    return secrets.compare_digest(expected, actual)


@dataclass(frozen=True)
class CsrfToken:
    """A token plus the header and form field it is expected in."""

    token: str
    header_name: str
    parameter_name: str = DEFAULT_PARAMETER_NAME


default_csrf_matcher: RequestMatcher = FunctionRequestMatcher(lambda request: request.method not in SAFE_METHODS)
"""Requires protection for every state-changing method."""


@runtime_checkable
class CsrfTokenRepository(Protocol):
    def generate_token(self, request: Any) -> CsrfToken: ...

    def load_token(self, request: Any) -> CsrfToken | None: ...

    def save_token(self, token: CsrfToken | None, request: Any, response: Any) -> None:
        """Persist *token*; ``None`` clears the stored token."""
        ...


class CookieCsrfTokenRepository:
    """Double-submit cookie token storage.

    The cookie is readable from JavaScript by default so single-page apps
    can copy it into the request header.
    """

    def __init__(
        self,
        cookie_name: str = "XSRF-TOKEN",
        header_name: str = "X-XSRF-TOKEN",
        parameter_name: str = DEFAULT_PARAMETER_NAME,
        cookie_http_only: bool = False,
        cookie_path: str | None = None,
    ) -> None:
        self.cookie_name = cookie_name
        self.header_name = header_name
        self.parameter_name = parameter_name
        self.cookie_http_only = cookie_http_only
        self.cookie_path = cookie_path

    @classmethod
    def with_http_only_false(cls) -> CookieCsrfTokenRepository:
        return cls(cookie_http_only=False)

    def generate_token(self, request: Any) -> CsrfToken:
        return CsrfToken(generate_csrf_token(), self.header_name, self.parameter_name)

    def load_token(self, request: Any) -> CsrfToken | None:
        value = request.cookies.get(self.cookie_name)
        if not value:
            return None
        return CsrfToken(value, self.header_name, self.parameter_name)

    def save_token(self, token: CsrfToken | None, request: Any, response: Any) -> None:
        path = self.cookie_path or (request.scope.get("root_path") or "/")
        if token is None:
            response.delete_cookie(key=self.cookie_name, path=path)
            return
        response.set_cookie(
            key=self.cookie_name,
            value=token.token,
            httponly=self.cookie_http_only,
            samesite="lax",
            secure=request.url.scheme == "https",
            path=path,
        )


class HttpSessionCsrfTokenRepository:
    """Keeps the token in the HTTP session."""

    def __init__(
        self,
        header_name: str = "X-CSRF-TOKEN",
        parameter_name: str = DEFAULT_PARAMETER_NAME,
        session_attribute_name: str = "CSRF_TOKEN",
    ) -> None:
        self.header_name = header_name
        self.parameter_name = parameter_name
        self.session_attribute_name = session_attribute_name

    def generate_token(self, request: Any) -> CsrfToken:
        return CsrfToken(generate_csrf_token(), self.header_name, self.parameter_name)

    def load_token(self, request: Any) -> CsrfToken | None:
        session = getattr(request.state, "session", None)
        if session is None:
            return None
        value = session.get_attribute(self.session_attribute_name)
        return CsrfToken(value, self.header_name, self.parameter_name) if value else None

    def save_token(self, token: CsrfToken | None, request: Any, response: Any) -> None:
        session = getattr(request.state, "session", None)
        if session is None:
            return
        if token is None:
            session.remove_attribute(self.session_attribute_name)
        else:
            session.set_attribute(self.session_attribute_name, token.token)
