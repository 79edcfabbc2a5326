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
"""HttpSecurity: the chained builder for a request's security filter chain.

Each concern is configured by one configurer.  A concern method takes an
optional customizer that receives the configurer::

    http = HttpSecurity()
    http.authorize_requests(lambda auth: auth
            .request_matchers("/admin/**").has_role("ADMIN")
            .any_request().authenticated()) \\
        .form_login(lambda form: form.login_page("/sign-in").permit_all()) \\
        .csrf(lambda csrf: csrf.disable())

    chain = http.build()
    app = Starlette(routes=routes, middleware=chain.middleware())

``authorize_requests()`` without a customizer returns the rule registry so
rules can be chained directly.  CSRF, headers, sessions, the request cache,
anonymous authentication, logout and exception handling are on until
disabled; everything else is opt-in.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar, cast, overload

from starlette.middleware import Middleware
from starlette.types import ASGIApp

from flysec.container.ordering import get_order
from flysec.core.config import Config
from flysec.kernel.exceptions import InvalidConfigurationException
from flysec.security.authentication import (
    AuthenticationManager,
    BcryptPasswordEncoder,
    PasswordEncoder,
    UserDetailsAuthenticationManager,
    UserDetailsService,
)
from flysec.security.configurers.anonymous import AnonymousConfigurer
from flysec.security.configurers.authorize import AuthorizeRequestsConfigurer
from flysec.security.configurers.base import SecurityConfigurer
from flysec.security.configurers.cors import CorsConfigurer
from flysec.security.configurers.csrf import CsrfConfigurer
from flysec.security.configurers.default_login_page import DefaultLoginPageConfigurer
from flysec.security.configurers.exception_handling import ExceptionHandlingConfigurer
from flysec.security.configurers.form_login import FormLoginConfigurer
from flysec.security.configurers.headers import HeadersConfigurer
from flysec.security.configurers.http_basic import HttpBasicConfigurer
from flysec.security.configurers.https_redirect import HttpsRedirectConfigurer
from flysec.security.configurers.logout import LogoutConfigurer
from flysec.security.configurers.oauth2_login import OAuth2LoginConfigurer
from flysec.security.configurers.request_cache import RequestCacheConfigurer
from flysec.security.configurers.resource_server import OAuth2ResourceServerConfigurer
from flysec.security.configurers.session_management import SessionManagementConfigurer
from flysec.security.context_repository import (
    HttpSessionSecurityContextRepository,
    NullSecurityContextRepository,
    SecurityContextRepository,
)
from flysec.security.matchers import OrRequestMatcher, RequestMatcher, to_matcher
from flysec.security.properties import SecurityProperties
from flysec.web.adapters.starlette.cors import CorsDispatchMiddleware
from flysec.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from flysec.web.adapters.starlette.filters.security_context_filter import SecurityContextFilter
from flysec.web.cors import CorsConfigurationSource
from flysec.web.ports.filter import WebFilter

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=SecurityConfigurer)

Customizer = Callable[[C], None]


@dataclass
class SecurityFilterChain:
    """The built chain: which requests it covers, its filters and CORS source.

    Attributes:
        filters: Filters in execution order.
        security_matcher: Requests this chain applies to; ``None`` means all.
        cors_configuration_source: Set when CORS is enabled.
    """

    filters: list[WebFilter] = field(default_factory=list)
    security_matcher: RequestMatcher | None = None
    cors_configuration_source: CorsConfigurationSource | None = None

    def matches(self, request: Any) -> bool:
        return self.security_matcher is None or self.security_matcher.matches(request)

    def middleware(self) -> list[Middleware]:
        """Starlette middleware to install, outermost first."""
        middleware: list[Middleware] = []
        if self.cors_configuration_source is not None:
            middleware.append(Middleware(CorsDispatchMiddleware, source=self.cors_configuration_source))
        middleware.append(
            Middleware(WebFilterChainMiddleware, filters=self.filters, security_matcher=self.security_matcher)
        )
        return middleware

    def wrap(self, app: ASGIApp) -> ASGIApp:
        """Wrap a bare ASGI app in this chain."""
        wrapped: ASGIApp = WebFilterChainMiddleware(app, filters=self.filters, security_matcher=self.security_matcher)
        if self.cors_configuration_source is not None:
            wrapped = CorsDispatchMiddleware(wrapped, self.cors_configuration_source)
        return wrapped


class HttpSecurity:
    """Configures the security filter chain for HTTP requests.

    Args:
        properties: Defaults for cookie names, realm, login page, HSTS and
            port mappings.  See :meth:`from_config`.
    """

    def __init__(self, properties: SecurityProperties | None = None) -> None:
        self.properties = properties or SecurityProperties()
        self.cors_configuration_source: CorsConfigurationSource | None = None
        self._configurers: dict[type[SecurityConfigurer], SecurityConfigurer] = {}
        self._shared_objects: dict[Any, Any] = {}
        self._filters: list[tuple[int, WebFilter]] = []
        self._security_matcher: RequestMatcher | None = None
        self._authentication_manager: AuthenticationManager | None = None
        self._security_context_repository: SecurityContextRepository | None = None
        self._built = False
        for default in (
            HeadersConfigurer,
            SessionManagementConfigurer,
            CsrfConfigurer,
            ExceptionHandlingConfigurer,
            RequestCacheConfigurer,
            AnonymousConfigurer,
            LogoutConfigurer,
            DefaultLoginPageConfigurer,
        ):
            self._configurers[default] = default()

    @classmethod
    def from_config(cls, config: Config) -> HttpSecurity:
        """Create a builder whose defaults come from ``flysec.security.*``."""
        return cls(config.bind(SecurityProperties))

    # -- configurer registry ------------------------------------------------

    def _apply(self, configurer_type: type[C], customizer: Customizer[C] | None) -> HttpSecurity:
        configurer = cast(C, self._configurers.setdefault(configurer_type, configurer_type()))
        if customizer is not None:
            customizer(configurer)
        return self

    def get_configurer(self, configurer_type: type[C]) -> C | None:
        """The configurer for *configurer_type*, or ``None`` when absent or disabled."""
        configurer = self._configurers.get(configurer_type)
        if configurer is None or configurer.disabled:
            return None
        return cast(C, configurer)

    def is_enabled(self, configurer_type: type[SecurityConfigurer]) -> bool:
        return self.get_configurer(configurer_type) is not None

    @property
    def sessions_enabled(self) -> bool:
        return self.is_enabled(SessionManagementConfigurer)

    # -- shared objects -----------------------------------------------------

    def set_shared_object(self, key: Any, value: Any) -> None:
        self._shared_objects[key] = value

    def get_shared_object(self, key: Any, default: Any = None) -> Any:
        return self._shared_objects.get(key, default)

    def add_filter(self, web_filter: WebFilter, order: int | None = None) -> HttpSecurity:
        """Add *web_filter* at *order*, or at the order declared on its class."""
        self._filters.append((get_order(web_filter) if order is None else order, web_filter))
        return self

    # -- concerns -----------------------------------------------------------

    def security_matcher(self, *matchers: Any) -> HttpSecurity:
        """Limit this chain to matching requests; others pass through untouched."""
        resolved = [to_matcher(m) for m in matchers]
        if len(resolved) == 1:
            self._security_matcher = resolved[0]
        elif resolved:
            self._security_matcher = OrRequestMatcher(*resolved)
        return self

    @overload
    def authorize_requests(self) -> AuthorizeRequestsConfigurer: ...

    @overload
    def authorize_requests(self, customizer: Customizer[AuthorizeRequestsConfigurer]) -> HttpSecurity: ...

    def authorize_requests(
        self, customizer: Customizer[AuthorizeRequestsConfigurer] | None = None
    ) -> AuthorizeRequestsConfigurer | HttpSecurity:
        self._apply(AuthorizeRequestsConfigurer, customizer)
        if customizer is None:
            return cast(AuthorizeRequestsConfigurer, self._configurers[AuthorizeRequestsConfigurer])
        return self

    def form_login(self, customizer: Customizer[FormLoginConfigurer] | None = None) -> HttpSecurity:
        return self._apply(FormLoginConfigurer, customizer)

    def http_basic(self, customizer: Customizer[HttpBasicConfigurer] | None = None) -> HttpSecurity:
        return self._apply(HttpBasicConfigurer, customizer)

    def anonymous(self, customizer: Customizer[AnonymousConfigurer] | None = None) -> HttpSecurity:
        return self._apply(AnonymousConfigurer, customizer)

    def cors(self, customizer: Customizer[CorsConfigurer] | None = None) -> HttpSecurity:
        return self._apply(CorsConfigurer, customizer)

    def csrf(self, customizer: Customizer[CsrfConfigurer] | None = None) -> HttpSecurity:
        return self._apply(CsrfConfigurer, customizer)

    def headers(self, customizer: Customizer[HeadersConfigurer] | None = None) -> HttpSecurity:
        return self._apply(HeadersConfigurer, customizer)

    def exception_handling(self, customizer: Customizer[ExceptionHandlingConfigurer] | None = None) -> HttpSecurity:
        return self._apply(ExceptionHandlingConfigurer, customizer)

    def logout(self, customizer: Customizer[LogoutConfigurer] | None = None) -> HttpSecurity:
        return self._apply(LogoutConfigurer, customizer)

    def request_cache(self, customizer: Customizer[RequestCacheConfigurer] | None = None) -> HttpSecurity:
        return self._apply(RequestCacheConfigurer, customizer)

    def https_redirect(self, customizer: Customizer[HttpsRedirectConfigurer] | None = None) -> HttpSecurity:
        return self._apply(HttpsRedirectConfigurer, customizer)

    redirect_to_https = https_redirect

    def oauth2_login(self, customizer: Customizer[OAuth2LoginConfigurer] | None = None) -> HttpSecurity:
        return self._apply(OAuth2LoginConfigurer, customizer)

    def oauth2_resource_server(
        self, customizer: Customizer[OAuth2ResourceServerConfigurer] | None = None
    ) -> HttpSecurity:
        return self._apply(OAuth2ResourceServerConfigurer, customizer)

    def session_management(self, customizer: Customizer[SessionManagementConfigurer] | None = None) -> HttpSecurity:
        return self._apply(SessionManagementConfigurer, customizer)

    def authentication_manager(self, manager: AuthenticationManager) -> HttpSecurity:
        self._authentication_manager = manager
        return self

    def user_details_service(self, service: UserDetailsService) -> HttpSecurity:
        self.set_shared_object(UserDetailsService, service)
        return self

    def password_encoder(self, encoder: PasswordEncoder) -> HttpSecurity:
        self.set_shared_object(PasswordEncoder, encoder)
        return self

    def security_context_repository(self, repository: SecurityContextRepository) -> HttpSecurity:
        self._security_context_repository = repository
        return self

    def get_authentication_manager(self) -> AuthenticationManager:
        """The configured manager, else one built from the user details service."""
        manager = self._authentication_manager or self.get_shared_object(AuthenticationManager)
        if manager is not None:
            return cast(AuthenticationManager, manager)
        service = self.get_shared_object(UserDetailsService)
        if service is None:
            raise InvalidConfigurationException(
                "An AuthenticationManager or a UserDetailsService is required for username/password login",
                code="MISSING_AUTHENTICATION_MANAGER",
            )
        encoder = self.get_shared_object(PasswordEncoder) or BcryptPasswordEncoder()
        manager = UserDetailsAuthenticationManager(service, encoder)
        self.set_shared_object(AuthenticationManager, manager)
        return manager

    # -- build --------------------------------------------------------------

    def build(self) -> SecurityFilterChain:
        """Run every enabled configurer and return the ordered filter chain.

        Raises:
            InvalidConfigurationException: When called twice or when a
                configurer is missing a collaborator.
        """
        if self._built:
            raise InvalidConfigurationException("This HttpSecurity has already been built", code="ALREADY_BUILT")
        self._built = True

        repository = self._security_context_repository
        if repository is None:
            if self.sessions_enabled:
                repository = HttpSessionSecurityContextRepository()
            else:
                repository = NullSecurityContextRepository()
        self.set_shared_object(SecurityContextRepository, repository)

        configurers = [c for c in self._configurers.values() if not c.disabled]
        for configurer in configurers:
            configurer.init(self)
        for configurer in configurers:
            configurer.configure(self)
        self.add_filter(SecurityContextFilter(repository))

        filters: Sequence[WebFilter] = [f for _, f in sorted(self._filters, key=lambda entry: entry[0])]
        logger.debug("Built security filter chain: %s", [type(f).__name__ for f in filters])
        return SecurityFilterChain(list(filters), self._security_matcher, self.cors_configuration_source)
