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
"""Form login: credential processing and the generated login page."""

from __future__ import annotations

import html
import logging
from collections.abc import Mapping
from typing import Any

from starlette.responses import HTMLResponse, Response

from flysec.container.ordering import HIGHEST_PRECEDENCE, order
from flysec.kernel.exceptions import AuthenticationException, BadCredentialsException
from flysec.security.authentication import AuthenticationManager
from flysec.security.context_repository import SecurityContextRepository
from flysec.security.handlers import (
    AuthenticationFailureHandler,
    AuthenticationSuccessHandler,
    resolve_url,
)
from flysec.security.matchers import PathPatternRequestMatcher, RequestMatcher
from flysec.web.adapters.starlette.filter_chain import read_form
from flysec.web.filters import OncePerRequestFilter
from flysec.web.ports.filter import CallNext

logger = logging.getLogger(__name__)


@order(HIGHEST_PRECEDENCE + 230)
class FormLoginFilter(OncePerRequestFilter):
    """Authenticates ``POST <login_processing_url>`` with a username and password form."""

    def __init__(
        self,
        authentication_manager: AuthenticationManager,
        success_handler: AuthenticationSuccessHandler,
        failure_handler: AuthenticationFailureHandler,
        repository: SecurityContextRepository,
        login_processing_url: str = "/login",
        username_parameter: str = "username",
        password_parameter: str = "password",
    ) -> None:
        self.authentication_manager = authentication_manager
        self.success_handler = success_handler
        self.failure_handler = failure_handler
        self.repository = repository
        self.username_parameter = username_parameter
        self.password_parameter = password_parameter
        self.requires_authentication: RequestMatcher = PathPatternRequestMatcher(login_processing_url, "POST")

    def should_not_filter(self, request: Any) -> bool:
        return not self.requires_authentication.matches(request)

    async def do_filter(self, request: Any, call_next: CallNext) -> Response:
        form = await read_form(request)
        username = form.get(self.username_parameter)
        password = form.get(self.password_parameter)
        try:
            if not isinstance(username, str) or not isinstance(password, str):
                raise BadCredentialsException("Username and password are required", code="BAD_CREDENTIALS")
            context = await self.authentication_manager.authenticate(username.strip(), password, "form")
        except AuthenticationException as exc:
            logger.debug("Form login failed: %s", exc)
            return await self.failure_handler.on_authentication_failure(request, exc)

        logger.debug("Form login succeeded for %s", context.user_id)
        request.state.security_context = context
        self.repository.save_context(context, request)
        return await self.success_handler.on_authentication_success(request, context)


@order(HIGHEST_PRECEDENCE + 225)
class DefaultLoginPageFilter(OncePerRequestFilter):
    """Renders a minimal login page on ``GET <login_page_url>``.

    Shows the username/password form when form login is on and one link per
    OAuth2 client registration when OAuth2 login is on.
    """

    def __init__(
        self,
        login_page_url: str = "/login",
        form_login_enabled: bool = True,
        login_processing_url: str = "/login",
        username_parameter: str = "username",
        password_parameter: str = "password",
        oauth2_links: Mapping[str, str] | None = None,
    ) -> None:
        self.login_page_url = login_page_url
        self.form_login_enabled = form_login_enabled
        self.login_processing_url = login_processing_url
        self.username_parameter = username_parameter
        self.password_parameter = password_parameter
        self.oauth2_links = dict(oauth2_links or {})
        self._matcher = PathPatternRequestMatcher(login_page_url, "GET")

    def should_not_filter(self, request: Any) -> bool:
        return not self._matcher.matches(request)

    async def do_filter(self, request: Any, call_next: CallNext) -> Response:
        return HTMLResponse(self.render(request))

    def render(self, request: Any) -> str:
        params = request.query_params
        parts = ["<!DOCTYPE html>", "<html><head><title>Please sign in</title></head><body>"]
        if "error" in params:
            parts.append('<div class="alert alert-danger">Invalid credentials</div>')
        if "logout" in params:
            parts.append('<div class="alert alert-success">You have been signed out</div>')

        if self.form_login_enabled:
            action = html.escape(resolve_url(request, self.login_processing_url))
            parts += [
                f'<form class="form-signin" method="post" action="{action}">',
                "<h2>Please sign in</h2>",
                f'<p><label for="username">Username</label> <input type="text" id="username"'
                f' name="{html.escape(self.username_parameter)}" required autofocus></p>',
                f'<p><label for="password">Password</label> <input type="password" id="password"'
                f' name="{html.escape(self.password_parameter)}" required></p>',
            ]
            token = getattr(request.state, "csrf_token", None)
            if token is not None:
                parts.append(
                    f'<input name="{html.escape(token.parameter_name)}" type="hidden" value="{html.escape(token.token)}">'
                )
            parts += ['<button type="submit">Sign in</button>', "</form>"]

        if self.oauth2_links:
            parts += ["<h2>Login with OAuth 2.0</h2>", "<table>"]
            for url, name in self.oauth2_links.items():
                href = html.escape(resolve_url(request, url))
                parts.append(f'<tr><td><a href="{href}">{html.escape(name)}</a></td></tr>')
            parts.append("</table>")

        parts.append("</body></html>")
        return "\n".join(parts)
