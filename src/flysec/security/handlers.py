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
"""Entry points, access-denied, success, failure and logout handlers.

These are the pluggable response strategies the security filters delegate
to: what to send when authentication is required, when access is denied,
after a login succeeds or fails and after a logout.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from starlette.responses import RedirectResponse, Response

from flysec.kernel.exceptions import AccessDeniedException, AuthenticationException, SecurityException
from flysec.security.context import SecurityContext
from flysec.security.context_repository import SECURITY_CONTEXT_KEY
from flysec.security.csrf import CsrfTokenRepository
from flysec.security.matchers import RequestMatcher
from flysec.security.savedrequest import RequestCache
from flysec.web.adapters.starlette.problem import problem_response

logger = logging.getLogger(__name__)


def resolve_url(request: Any, url: str) -> str:
    """Prefix an application-relative URL with the ASGI mount point."""
    if url.startswith("/"):
        return (request.scope.get("root_path") or "") + url
    return url


def _redirect(request: Any, url: str) -> RedirectResponse:
    return RedirectResponse(url=resolve_url(request, url), status_code=302)


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------


@runtime_checkable
class AuthenticationEntryPoint(Protocol):
    """Starts authentication for a caller who has not authenticated."""

    async def commence(self, request: Any, exception: AuthenticationException) -> Response: ...


@runtime_checkable
class AccessDeniedHandler(Protocol):
    async def handle(self, request: Any, exception: AccessDeniedException) -> Response: ...


@runtime_checkable
class AuthenticationSuccessHandler(Protocol):
    async def on_authentication_success(self, request: Any, context: SecurityContext) -> Response: ...


@runtime_checkable
class AuthenticationFailureHandler(Protocol):
    async def on_authentication_failure(self, request: Any, exception: AuthenticationException) -> Response: ...


@runtime_checkable
class LogoutHandler(Protocol):
    """Cleans up after a logout; runs against the already-built response."""

    def logout(self, request: Any, response: Response, context: SecurityContext) -> None: ...


@runtime_checkable
class LogoutSuccessHandler(Protocol):
    async def on_logout_success(self, request: Any, context: SecurityContext) -> Response: ...


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


class ProblemDetailAuthenticationEntryPoint:
    """401 with an RFC 7807 body."""

    async def commence(self, request: Any, exception: AuthenticationException) -> Response:
        return problem_response(status=401, detail=exception.message, path=request.url.path)


class HttpStatusEntryPoint:
    def __init__(self, status: int) -> None:
        self.status = status

    async def commence(self, request: Any, exception: AuthenticationException) -> Response:
        return Response(status_code=self.status)


class LoginUrlAuthenticationEntryPoint:
    """Redirects the browser to the login page."""

    def __init__(self, login_form_url: str) -> None:
        self.login_form_url = login_form_url

    async def commence(self, request: Any, exception: AuthenticationException) -> Response:
        return _redirect(request, self.login_form_url)


class BasicAuthenticationEntryPoint:
    """401 with a ``WWW-Authenticate: Basic`` challenge."""

    def __init__(self, realm_name: str = "Realm") -> None:
        self.realm_name = realm_name

    async def commence(self, request: Any, exception: AuthenticationException) -> Response:
        return problem_response(
            status=401,
            detail=exception.message,
            path=request.url.path,
            headers={"WWW-Authenticate": f'Basic realm="{self.realm_name}"'},
        )


def _bearer_challenge(exception: SecurityException | None, realm_name: str | None, error: str | None) -> str:
    params: list[str] = []
    if realm_name:
        params.append(f'realm="{realm_name}"')
    if error:
        params.append(f'error="{error}"')
        if exception is not None:
            params.append(f'error_description="{exception.message}"')
    return "Bearer" + (" " + ", ".join(params) if params else "")


class BearerTokenAuthenticationEntryPoint:
    """401 with a ``WWW-Authenticate: Bearer`` challenge (RFC 6750)."""

    def __init__(self, realm_name: str | None = None) -> None:
        self.realm_name = realm_name

    async def commence(self, request: Any, exception: AuthenticationException) -> Response:
        error = "invalid_token" if exception.code == "INVALID_TOKEN" else None
        return problem_response(
            status=401,
            detail=exception.message,
            path=request.url.path,
            headers={"WWW-Authenticate": _bearer_challenge(exception, self.realm_name, error)},
        )


class DelegatingAuthenticationEntryPoint:
    """Picks the first entry point whose matcher accepts the request."""

    def __init__(
        self,
        entry_points: Sequence[tuple[RequestMatcher, AuthenticationEntryPoint]],
        default_entry_point: AuthenticationEntryPoint,
    ) -> None:
        self.entry_points = list(entry_points)
        self.default_entry_point = default_entry_point

    async def commence(self, request: Any, exception: AuthenticationException) -> Response:
        for matcher, entry_point in self.entry_points:
            if matcher.matches(request):
                return await entry_point.commence(request, exception)
        return await self.default_entry_point.commence(request, exception)


# ---------------------------------------------------------------------------
# Access denied
# ---------------------------------------------------------------------------


class DelegatingAccessDeniedHandler:
    """Picks the first handler whose matcher accepts the request."""

    def __init__(
        self,
        handlers: Sequence[tuple[RequestMatcher, AccessDeniedHandler]],
        default_handler: AccessDeniedHandler,
    ) -> None:
        self.handlers = list(handlers)
        self.default_handler = default_handler

    async def handle(self, request: Any, exception: AccessDeniedException) -> Response:
        for matcher, handler in self.handlers:
            if matcher.matches(request):
                return await handler.handle(request, exception)
        return await self.default_handler.handle(request, exception)


class ProblemDetailAccessDeniedHandler:
    """403 with an RFC 7807 body."""

    async def handle(self, request: Any, exception: AccessDeniedException) -> Response:
        return problem_response(status=403, detail=exception.message, path=request.url.path)


class AccessDeniedPageHandler:
    """Redirects to an error page when access is denied."""

    def __init__(self, error_page: str) -> None:
        if not error_page.startswith("/"):
            raise ValueError(f"error_page must begin with '/', got {error_page!r}")
        self.error_page = error_page

    async def handle(self, request: Any, exception: AccessDeniedException) -> Response:
        return _redirect(request, self.error_page)


class BearerTokenAccessDeniedHandler:
    """403 with an ``insufficient_scope`` Bearer challenge."""

    def __init__(self, realm_name: str | None = None) -> None:
        self.realm_name = realm_name

    async def handle(self, request: Any, exception: AccessDeniedException) -> Response:
        challenge = _bearer_challenge(None, self.realm_name, "insufficient_scope")
        challenge += ', error_description="The request requires higher privileges than provided by the access token."'
        return problem_response(
            status=403,
            detail=exception.message,
            path=request.url.path,
            headers={"WWW-Authenticate": challenge},
        )


# ---------------------------------------------------------------------------
# Login outcome
# ---------------------------------------------------------------------------


class SimpleUrlAuthenticationSuccessHandler:
    def __init__(self, default_target_url: str = "/") -> None:
        self.default_target_url = default_target_url

    async def on_authentication_success(self, request: Any, context: SecurityContext) -> Response:
        return _redirect(request, self.default_target_url)


class SavedRequestAwareAuthenticationSuccessHandler:
    """Sends the user back to the page that required the login.

    Falls back to *default_target_url* when nothing was saved or when
    *always_use_default_target_url* is set.
    """

    def __init__(
        self,
        default_target_url: str = "/",
        always_use_default_target_url: bool = False,
        request_cache: RequestCache | None = None,
    ) -> None:
        self.default_target_url = default_target_url
        self.always_use_default_target_url = always_use_default_target_url
        self.request_cache = request_cache

    async def on_authentication_success(self, request: Any, context: SecurityContext) -> Response:
        if self.request_cache is not None:
            saved = self.request_cache.get_request(request)
            if saved is not None:
                self.request_cache.remove_request(request)
                if not self.always_use_default_target_url:
                    logger.debug("Redirecting to saved request %s", saved.url)
                    return RedirectResponse(url=saved.url, status_code=302)
        return _redirect(request, self.default_target_url)


class SimpleUrlAuthenticationFailureHandler:
    """Redirects to *failure_url*, or answers 401 when none is set."""

    def __init__(self, failure_url: str | None = None) -> None:
        self.failure_url = failure_url

    async def on_authentication_failure(self, request: Any, exception: AuthenticationException) -> Response:
        if self.failure_url is None:
            return problem_response(status=401, detail=exception.message, path=request.url.path)
        return _redirect(request, self.failure_url)


# ---------------------------------------------------------------------------
# Logout
# ---------------------------------------------------------------------------


class SimpleUrlLogoutSuccessHandler:
    def __init__(self, default_target_url: str = "/") -> None:
        self.default_target_url = default_target_url

    async def on_logout_success(self, request: Any, context: SecurityContext) -> Response:
        return _redirect(request, self.default_target_url)


class HttpStatusReturningLogoutSuccessHandler:
    def __init__(self, status: int = 200) -> None:
        self.status = status

    async def on_logout_success(self, request: Any, context: SecurityContext) -> Response:
        return Response(status_code=self.status)


class SecurityContextLogoutHandler:
    """Drops the stored context and, optionally, the whole session."""

    def __init__(self, invalidate_http_session: bool = True, clear_authentication: bool = True) -> None:
        self.invalidate_http_session = invalidate_http_session
        self.clear_authentication = clear_authentication

    def logout(self, request: Any, response: Response, context: SecurityContext) -> None:
        session = getattr(request.state, "session", None)
        if session is not None:
            if self.invalidate_http_session:
                session.invalidate()
            elif self.clear_authentication:
                session.remove_attribute(SECURITY_CONTEXT_KEY)
        if self.clear_authentication:
            request.state.security_context = SecurityContext.empty()


class CookieClearingLogoutHandler:
    def __init__(self, *cookie_names: str) -> None:
        self.cookie_names = list(cookie_names)

    def logout(self, request: Any, response: Response, context: SecurityContext) -> None:
        path = request.scope.get("root_path") or "/"
        for name in self.cookie_names:
            response.delete_cookie(key=name, path=path)


class CsrfLogoutHandler:
    """Clears the CSRF token so a fresh one is issued after logout."""

    def __init__(self, csrf_token_repository: CsrfTokenRepository) -> None:
        self.csrf_token_repository = csrf_token_repository

    def logout(self, request: Any, response: Response, context: SecurityContext) -> None:
        self.csrf_token_repository.save_token(None, request, response)
        request.state.csrf_token = None
