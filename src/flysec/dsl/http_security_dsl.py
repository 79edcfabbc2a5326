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
"""Root of the DSL: nested blocks recorded, then forwarded to :class:`HttpSecurity`.

Usage::

    def security(dsl: HttpSecurityDsl) -> None:
        with dsl.authorize_requests() as auth:
            auth.authorize("/public/**", permit_all)
            auth.authorize(any_request, authenticated)
        dsl.form_login(login_page="/log-in")
        with dsl.csrf() as csrf:
            csrf.ignoring_request_matchers("/webhooks/**")

    chain = http(HttpSecurity(), security)
    app = Starlette(routes=routes, middleware=chain.middleware())

Blocks are applied in the order they were declared when :meth:`build`
runs, so a block declared twice is applied twice and later settings win.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from flysec.dsl.anonymous import AnonymousDsl
from flysec.dsl.authorize_requests import AuthorizeRequestsDsl
from flysec.dsl.base import SecurityDsl, configure_block
from flysec.dsl.cors import CorsDsl
from flysec.dsl.csrf import CsrfDsl
from flysec.dsl.exception_handling import ExceptionHandlingDsl
from flysec.dsl.form_login import FormLoginDsl
from flysec.dsl.headers import HeadersDsl
from flysec.dsl.http_basic import HttpBasicDsl
from flysec.dsl.https_redirect import HttpsRedirectDsl
from flysec.dsl.logout import LogoutDsl
from flysec.dsl.oauth2 import OAuth2LoginDsl, OAuth2ResourceServerDsl
from flysec.dsl.request_cache import RequestCacheDsl
from flysec.dsl.session_management import SessionManagementDsl
from flysec.security.authentication import AuthenticationManager
from flysec.security.http_security import HttpSecurity, SecurityFilterChain

logger = logging.getLogger(__name__)

B = TypeVar("B", bound=SecurityDsl[Any])

Step = Callable[[HttpSecurity], Any]


class HttpSecurityDsl:
    """Collects the blocks for one filter chain.

    Args:
        http: The builder the blocks are forwarded to.
        init: Optional function that declares the blocks; it runs at the
            start of :meth:`build`.

    Attributes:
        authentication_manager: Used by the login mechanisms that need one.
    """

    def __init__(self, http: HttpSecurity, init: Callable[[HttpSecurityDsl], None] | None = None) -> None:
        self.http = http
        self.init = init
        self.authentication_manager: AuthenticationManager | None = None
        self._steps: list[Step] = []

    def _block(
        self,
        block: B,
        configure: Callable[[B], None] | None,
        properties: dict[str, Any],
        forward: Callable[[HttpSecurity, Any], Any],
    ) -> B:
        configure_block(block, configure, properties)
        self._steps.append(lambda http: forward(http, block.get()))
        return block

    def security_matcher(self, *matchers: Any) -> None:
        """Limit the chain to requests matching any of *matchers*."""
        self._steps.append(lambda http: http.security_matcher(*matchers))

    def authorize_requests(
        self, configure: Callable[[AuthorizeRequestsDsl], None] | None = None, **properties: Any
    ) -> AuthorizeRequestsDsl:
        return self._block(AuthorizeRequestsDsl(), configure, properties, HttpSecurity.authorize_requests)

    authorize_exchange = authorize_requests

    def form_login(self, configure: Callable[[FormLoginDsl], None] | None = None, **properties: Any) -> FormLoginDsl:
        return self._block(FormLoginDsl(), configure, properties, HttpSecurity.form_login)

    def http_basic(self, configure: Callable[[HttpBasicDsl], None] | None = None, **properties: Any) -> HttpBasicDsl:
        return self._block(HttpBasicDsl(), configure, properties, HttpSecurity.http_basic)

    def anonymous(self, configure: Callable[[AnonymousDsl], None] | None = None, **properties: Any) -> AnonymousDsl:
        return self._block(AnonymousDsl(), configure, properties, HttpSecurity.anonymous)

    def cors(self, configure: Callable[[CorsDsl], None] | None = None, **properties: Any) -> CorsDsl:
        return self._block(CorsDsl(), configure, properties, HttpSecurity.cors)

    def csrf(self, configure: Callable[[CsrfDsl], None] | None = None, **properties: Any) -> CsrfDsl:
        return self._block(CsrfDsl(), configure, properties, HttpSecurity.csrf)

    def headers(self, configure: Callable[[HeadersDsl], None] | None = None, **properties: Any) -> HeadersDsl:
        return self._block(HeadersDsl(), configure, properties, HttpSecurity.headers)

    def exception_handling(
        self, configure: Callable[[ExceptionHandlingDsl], None] | None = None, **properties: Any
    ) -> ExceptionHandlingDsl:
        return self._block(ExceptionHandlingDsl(), configure, properties, HttpSecurity.exception_handling)

    def logout(self, configure: Callable[[LogoutDsl], None] | None = None, **properties: Any) -> LogoutDsl:
        return self._block(LogoutDsl(), configure, properties, HttpSecurity.logout)

    def request_cache(
        self, configure: Callable[[RequestCacheDsl], None] | None = None, **properties: Any
    ) -> RequestCacheDsl:
        return self._block(RequestCacheDsl(), configure, properties, HttpSecurity.request_cache)

    def redirect_to_https(
        self, configure: Callable[[HttpsRedirectDsl], None] | None = None, **properties: Any
    ) -> HttpsRedirectDsl:
        return self._block(HttpsRedirectDsl(), configure, properties, HttpSecurity.https_redirect)

    https_redirect = redirect_to_https

    def oauth2_login(
        self, configure: Callable[[OAuth2LoginDsl], None] | None = None, **properties: Any
    ) -> OAuth2LoginDsl:
        return self._block(OAuth2LoginDsl(), configure, properties, HttpSecurity.oauth2_login)

    def oauth2_resource_server(
        self, configure: Callable[[OAuth2ResourceServerDsl], None] | None = None, **properties: Any
    ) -> OAuth2ResourceServerDsl:
        return self._block(OAuth2ResourceServerDsl(), configure, properties, HttpSecurity.oauth2_resource_server)

    def session_management(
        self, configure: Callable[[SessionManagementDsl], None] | None = None, **properties: Any
    ) -> SessionManagementDsl:
        return self._block(SessionManagementDsl(), configure, properties, HttpSecurity.session_management)

    def build(self) -> SecurityFilterChain:
        """Run ``init``, forward every block in declaration order and build the chain."""
        if self.init is not None:
            self.init(self)
        if self.authentication_manager is not None:
            self.http.authentication_manager(self.authentication_manager)
        for step in self._steps:
            step(self.http)
        logger.debug("Applied %d security DSL blocks", len(self._steps))
        return self.http.build()


def http(http_security: HttpSecurity, init: Callable[[HttpSecurityDsl], None]) -> SecurityFilterChain:
    """Configure *http_security* through the DSL and build its filter chain."""
    return HttpSecurityDsl(http_security, init).build()
