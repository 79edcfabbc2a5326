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
"""Username/password form login."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from flysec.security.configurers.authorize import AuthorizeRequestsConfigurer
from flysec.security.configurers.base import SecurityConfigurer
from flysec.security.configurers.exception_handling import ExceptionHandlingConfigurer
from flysec.security.context_repository import SecurityContextRepository
from flysec.security.handlers import (
    AuthenticationFailureHandler,
    AuthenticationSuccessHandler,
    LoginUrlAuthenticationEntryPoint,
    SavedRequestAwareAuthenticationSuccessHandler,
    SimpleUrlAuthenticationFailureHandler,
)
from flysec.security.matchers import (
    AndRequestMatcher,
    MediaTypeRequestMatcher,
    NegatedRequestMatcher,
    PathPatternRequestMatcher,
    RequestMatcher,
    xhr_request,
)
from flysec.security.savedrequest import RequestCache
from flysec.web.adapters.starlette.filters.form_login_filter import FormLoginFilter

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity

# requests from a browser that asked for a page
browser_request: RequestMatcher = AndRequestMatcher(
    NegatedRequestMatcher(xhr_request),
    MediaTypeRequestMatcher("text/html", "application/xhtml+xml"),
)


_L = TypeVar("_L", bound="AbstractLoginConfigurer")


def _path(url: str) -> str:
    return url.split("?", 1)[0]


class AbstractLoginConfigurer(SecurityConfigurer):
    """Settings shared by form login and OAuth2 login."""

    def __init__(self) -> None:
        super().__init__()
        self._login_page: str | None = None
        self._login_processing_url: str | None = None
        self._success_handler: AuthenticationSuccessHandler | None = None
        self._failure_handler: AuthenticationFailureHandler | None = None
        self._default_success_url = "/"
        self._always_use_default_success_url = False
        self._failure_url: str | None = None
        self._permit_all = False

    @property
    def custom_login_page(self) -> bool:
        return self._login_page is not None

    def get_login_page(self, http: HttpSecurity) -> str:
        return self._login_page or http.properties.login_page

    def get_failure_url(self, http: HttpSecurity) -> str:
        return self._failure_url or f"{self.get_login_page(http)}?error"

    def login_page(self: _L, login_page: str) -> _L:
        self._login_page = login_page
        return self

    def login_processing_url(self: _L, url: str) -> _L:
        self._login_processing_url = url
        return self

    def success_handler(self: _L, handler: AuthenticationSuccessHandler) -> _L:
        self._success_handler = handler
        return self

    def failure_handler(self: _L, handler: AuthenticationFailureHandler) -> _L:
        self._failure_handler = handler
        return self

    def default_success_url(self: _L, url: str, always_use: bool = False) -> _L:
        self._default_success_url = url
        self._always_use_default_success_url = always_use
        return self

    def failure_url(self: _L, url: str) -> _L:
        self._failure_url = url
        return self

    def permit_all(self: _L, permit_all: bool = True) -> _L:
        """Let everyone reach the login page, the processing URL and the failure URL."""
        self._permit_all = permit_all
        return self

    def _permitted_matchers(self, http: HttpSecurity) -> list[RequestMatcher]:
        return [
            PathPatternRequestMatcher(self.get_login_page(http), "GET"),
            PathPatternRequestMatcher(_path(self.get_failure_url(http)), "GET"),
        ]

    def init(self, http: HttpSecurity) -> None:
        exception_handling = http.get_configurer(ExceptionHandlingConfigurer)
        if exception_handling is not None:
            exception_handling.default_authentication_entry_point_for(
                self._entry_point(http), browser_request
            )
        authorize = http.get_configurer(AuthorizeRequestsConfigurer)
        if self._permit_all and authorize is not None:
            authorize.permit_all(*self._permitted_matchers(http))

    def _entry_point(self, http: HttpSecurity) -> LoginUrlAuthenticationEntryPoint:
        return LoginUrlAuthenticationEntryPoint(self.get_login_page(http))

    def _get_success_handler(self, http: HttpSecurity) -> AuthenticationSuccessHandler:
        if self._success_handler is not None:
            return self._success_handler
        return SavedRequestAwareAuthenticationSuccessHandler(
            self._default_success_url,
            self._always_use_default_success_url,
            http.get_shared_object(RequestCache),
        )

    def _get_failure_handler(self, http: HttpSecurity) -> AuthenticationFailureHandler:
        return self._failure_handler or SimpleUrlAuthenticationFailureHandler(self.get_failure_url(http))


class FormLoginConfigurer(AbstractLoginConfigurer):
    """Form login.

    The login page defaults to ``flysec.security.login-page`` (``/login``);
    when it is not customized a default page is rendered.  The form is
    posted to ``login_processing_url``, which defaults to the login page.
    """

    def __init__(self) -> None:
        super().__init__()
        self._username_parameter = "username"
        self._password_parameter = "password"

    def username_parameter(self, name: str) -> FormLoginConfigurer:
        self._username_parameter = name
        return self

    def password_parameter(self, name: str) -> FormLoginConfigurer:
        self._password_parameter = name
        return self

    @property
    def parameters(self) -> tuple[str, str]:
        return self._username_parameter, self._password_parameter

    def get_login_processing_url(self, http: HttpSecurity) -> str:
        return self._login_processing_url or self.get_login_page(http)

    def _permitted_matchers(self, http: HttpSecurity) -> list[RequestMatcher]:
        return super()._permitted_matchers(http) + [
            PathPatternRequestMatcher(self.get_login_processing_url(http), "POST")
        ]

    def configure(self, http: HttpSecurity) -> None:
        http.add_filter(
            FormLoginFilter(
                http.get_authentication_manager(),
                self._get_success_handler(http),
                self._get_failure_handler(http),
                http.get_shared_object(SecurityContextRepository),
                login_processing_url=self.get_login_processing_url(http),
                username_parameter=self._username_parameter,
                password_parameter=self._password_parameter,
            )
        )
