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
from __future__ import annotations

from typing import TYPE_CHECKING

from flysec.security.configurers.authorize import AuthorizeRequestsConfigurer
from flysec.security.configurers.base import SecurityConfigurer
from flysec.security.configurers.csrf import CsrfConfigurer
from flysec.security.configurers.form_login import FormLoginConfigurer
from flysec.security.csrf import CsrfTokenRepository
from flysec.security.handlers import (
    CookieClearingLogoutHandler,
    CsrfLogoutHandler,
    LogoutHandler,
    LogoutSuccessHandler,
    SecurityContextLogoutHandler,
    SimpleUrlLogoutSuccessHandler,
)
from flysec.security.matchers import PathPatternRequestMatcher, RequestMatcher
from flysec.web.adapters.starlette.filters.logout_filter import LogoutFilter

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity


class LogoutConfigurer(SecurityConfigurer):
    """Logout at ``logout_url`` (``/logout``).

    With CSRF protection on, only ``POST`` logs out so a cross-site link
    cannot end the session.  After logout the browser is redirected to
    ``<login page>?logout``.
    """

    def __init__(self) -> None:
        super().__init__()
        self._logout_url = "/logout"
        self._requires_logout: RequestMatcher | None = None
        self._success_url: str | None = None
        self._success_handler: LogoutSuccessHandler | None = None
        self._handlers: list[LogoutHandler] = []
        self._clear_authentication = True
        self._invalidate_http_session = True
        self._delete_cookies: list[str] = []
        self._permit_all = False

    def logout_url(self, url: str) -> LogoutConfigurer:
        self._logout_url = url
        return self

    def logout_request_matcher(self, matcher: RequestMatcher) -> LogoutConfigurer:
        self._requires_logout = matcher
        return self

    def logout_success_url(self, url: str) -> LogoutConfigurer:
        self._success_url = url
        return self

    def logout_success_handler(self, handler: LogoutSuccessHandler) -> LogoutConfigurer:
        self._success_handler = handler
        return self

    def add_logout_handler(self, handler: LogoutHandler) -> LogoutConfigurer:
        self._handlers.append(handler)
        return self

    def clear_authentication(self, clear: bool) -> LogoutConfigurer:
        self._clear_authentication = clear
        return self

    def invalidate_http_session(self, invalidate: bool) -> LogoutConfigurer:
        self._invalidate_http_session = invalidate
        return self

    def delete_cookies(self, *cookie_names: str) -> LogoutConfigurer:
        self._delete_cookies.extend(cookie_names)
        return self

    def permit_all(self, permit_all: bool = True) -> LogoutConfigurer:
        self._permit_all = permit_all
        return self

    def get_logout_matcher(self, http: HttpSecurity) -> RequestMatcher:
        if self._requires_logout is not None:
            return self._requires_logout
        method = "POST" if http.is_enabled(CsrfConfigurer) else None
        return PathPatternRequestMatcher(self._logout_url, method)

    def get_logout_success_url(self, http: HttpSecurity) -> str:
        if self._success_url is not None:
            return self._success_url
        form_login = http.get_configurer(FormLoginConfigurer)
        if form_login is not None:
            return f"{form_login.get_login_page(http)}?logout"
        return "/login?logout"

    def get_logout_handlers(self, http: HttpSecurity) -> list[LogoutHandler]:
        handlers: list[LogoutHandler] = []
        if http.is_enabled(CsrfConfigurer):
            handlers.append(CsrfLogoutHandler(http.get_shared_object(CsrfTokenRepository)))
        if self._delete_cookies:
            handlers.append(CookieClearingLogoutHandler(*self._delete_cookies))
        handlers.extend(self._handlers)
        handlers.append(SecurityContextLogoutHandler(self._invalidate_http_session, self._clear_authentication))
        return handlers

    def init(self, http: HttpSecurity) -> None:
        authorize = http.get_configurer(AuthorizeRequestsConfigurer)
        if self._permit_all and authorize is not None:
            success_path = self.get_logout_success_url(http).split("?", 1)[0]
            authorize.permit_all(self.get_logout_matcher(http), PathPatternRequestMatcher(success_path, "GET"))

    def configure(self, http: HttpSecurity) -> None:
        success_handler = self._success_handler or SimpleUrlLogoutSuccessHandler(self.get_logout_success_url(http))
        http.add_filter(LogoutFilter(self.get_logout_matcher(http), success_handler, self.get_logout_handlers(http)))
