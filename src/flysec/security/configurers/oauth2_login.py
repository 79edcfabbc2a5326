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
"""OAuth2 login (authorization code flow) against configured providers."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, cast

from flysec.kernel.exceptions import InvalidConfigurationException
from flysec.security.configurers.form_login import AbstractLoginConfigurer
from flysec.security.context_repository import SecurityContextRepository
from flysec.security.handlers import LoginUrlAuthenticationEntryPoint
from flysec.security.matchers import PathPatternRequestMatcher, RequestMatcher
from flysec.security.oauth2.client import ClientRegistration, ClientRegistrationRepository
from flysec.security.oauth2.login import (
    AccessTokenResponseClient,
    AuthorizationRequestRepository,
    HttpSessionOAuth2AuthorizationRequestRepository,
    HttpxAuthorizationCodeTokenResponseClient,
    HttpxOAuth2UserService,
    OAuth2UserService,
)
from flysec.web.adapters.starlette.filters.oauth2_login_filter import (
    DEFAULT_AUTHORIZATION_BASE_URI,
    DEFAULT_REDIRECTION_BASE_URI,
    OAuth2LoginFilter,
)

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity


class AuthorizationEndpointConfig:
    def __init__(self) -> None:
        self.base_uri = DEFAULT_AUTHORIZATION_BASE_URI
        self.authorization_request_repository: AuthorizationRequestRepository | None = None


class RedirectionEndpointConfig:
    def __init__(self) -> None:
        self.base_uri = DEFAULT_REDIRECTION_BASE_URI


class TokenEndpointConfig:
    def __init__(self) -> None:
        self.access_token_response_client: AccessTokenResponseClient | None = None


class UserInfoEndpointConfig:
    def __init__(self) -> None:
        self.user_service: OAuth2UserService | None = None


class OAuth2LoginConfigurer(AbstractLoginConfigurer):
    """OAuth2 login.

    Without a custom login page and with exactly one client registration,
    unauthenticated browsers are sent straight to that provider; otherwise
    they land on the login page, which lists one link per registration.
    ``login_processing_url`` sets the redirection endpoint.
    """

    def __init__(self) -> None:
        super().__init__()
        self._client_registration_repository: ClientRegistrationRepository | None = None
        self.authorization_endpoint_config = AuthorizationEndpointConfig()
        self.redirection_endpoint_config = RedirectionEndpointConfig()
        self.token_endpoint_config = TokenEndpointConfig()
        self.user_info_endpoint_config = UserInfoEndpointConfig()

    def client_registration_repository(self, repository: ClientRegistrationRepository) -> OAuth2LoginConfigurer:
        self._client_registration_repository = repository
        return self

    def authorization_endpoint(
        self, customizer: Callable[[AuthorizationEndpointConfig], None]
    ) -> OAuth2LoginConfigurer:
        customizer(self.authorization_endpoint_config)
        return self

    def redirection_endpoint(self, customizer: Callable[[RedirectionEndpointConfig], None]) -> OAuth2LoginConfigurer:
        customizer(self.redirection_endpoint_config)
        return self

    def token_endpoint(self, customizer: Callable[[TokenEndpointConfig], None]) -> OAuth2LoginConfigurer:
        customizer(self.token_endpoint_config)
        return self

    def user_info_endpoint(self, customizer: Callable[[UserInfoEndpointConfig], None]) -> OAuth2LoginConfigurer:
        customizer(self.user_info_endpoint_config)
        return self

    @property
    def authorization_base_uri(self) -> str:
        return self.authorization_endpoint_config.base_uri.rstrip("/")

    @property
    def redirection_base_uri(self) -> str:
        return self._login_processing_url or self.redirection_endpoint_config.base_uri

    def get_client_registration_repository(self, http: HttpSecurity) -> ClientRegistrationRepository:
        repository = self._client_registration_repository or http.get_shared_object(ClientRegistrationRepository)
        if repository is None:
            raise InvalidConfigurationException(
                "OAuth2 login requires a ClientRegistrationRepository",
                code="MISSING_CLIENT_REGISTRATIONS",
            )
        return cast(ClientRegistrationRepository, repository)

    def _registrations(self, http: HttpSecurity) -> list[ClientRegistration]:
        repository = self.get_client_registration_repository(http)
        if isinstance(repository, Iterable):
            return list(repository)
        return []

    def login_links(self, http: HttpSecurity) -> dict[str, str]:
        """``{authorization url: provider name}`` for the default login page."""
        return {
            f"{self.authorization_base_uri}/{r.registration_id}": r.client_name or r.registration_id
            for r in self._registrations(http)
        }

    def _entry_point(self, http: HttpSecurity) -> LoginUrlAuthenticationEntryPoint:
        registrations = self._registrations(http)
        if not self.custom_login_page and len(registrations) == 1:
            return LoginUrlAuthenticationEntryPoint(f"{self.authorization_base_uri}/{registrations[0].registration_id}")
        return super()._entry_point(http)

    def _permitted_matchers(self, http: HttpSecurity) -> list[RequestMatcher]:
        return super()._permitted_matchers(http) + [
            PathPatternRequestMatcher(f"{self.authorization_base_uri}/*", "GET"),
            PathPatternRequestMatcher(self.redirection_base_uri),
        ]

    def init(self, http: HttpSecurity) -> None:
        if not http.sessions_enabled and self.authorization_endpoint_config.authorization_request_repository is None:
            raise InvalidConfigurationException(
                "OAuth2 login keeps the authorization request in the session; enable session management "
                "or set an authorization_request_repository",
                code="SESSIONS_REQUIRED",
            )
        http.set_shared_object(ClientRegistrationRepository, self.get_client_registration_repository(http))
        super().init(http)

    def configure(self, http: HttpSecurity) -> None:
        authorization = self.authorization_endpoint_config
        http.add_filter(
            OAuth2LoginFilter(
                self.get_client_registration_repository(http),
                authorization.authorization_request_repository or HttpSessionOAuth2AuthorizationRequestRepository(),
                self.token_endpoint_config.access_token_response_client or HttpxAuthorizationCodeTokenResponseClient(),
                self.user_info_endpoint_config.user_service or HttpxOAuth2UserService(),
                self._get_success_handler(http),
                self._get_failure_handler(http),
                http.get_shared_object(SecurityContextRepository),
                authorization_base_uri=self.authorization_base_uri,
                redirection_base_uri=self.redirection_base_uri,
            )
        )
