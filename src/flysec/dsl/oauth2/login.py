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
"""``oauth2_login`` block and its endpoint blocks."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from flysec.dsl.base import SecurityDsl, configure_block
from flysec.security.configurers.oauth2_login import (
    AuthorizationEndpointConfig,
    OAuth2LoginConfigurer,
    RedirectionEndpointConfig,
    TokenEndpointConfig,
    UserInfoEndpointConfig,
)
from flysec.security.handlers import AuthenticationFailureHandler, AuthenticationSuccessHandler
from flysec.security.oauth2.client import ClientRegistrationRepository
from flysec.security.oauth2.login import (
    AccessTokenResponseClient,
    AuthorizationRequestRepository,
    OAuth2UserService,
)


class AuthorizationEndpointDsl(SecurityDsl[AuthorizationEndpointConfig]):
    def __init__(self) -> None:
        super().__init__()
        self.base_uri: str | None = None
        self.authorization_request_repository: AuthorizationRequestRepository | None = None

    def apply(self, target: AuthorizationEndpointConfig) -> None:
        self._assign(
            target,
            base_uri=self.base_uri,
            authorization_request_repository=self.authorization_request_repository,
        )


class RedirectionEndpointDsl(SecurityDsl[RedirectionEndpointConfig]):
    def __init__(self) -> None:
        super().__init__()
        self.base_uri: str | None = None

    def apply(self, target: RedirectionEndpointConfig) -> None:
        self._assign(target, base_uri=self.base_uri)


class TokenEndpointDsl(SecurityDsl[TokenEndpointConfig]):
    def __init__(self) -> None:
        super().__init__()
        self.access_token_response_client: AccessTokenResponseClient | None = None

    def apply(self, target: TokenEndpointConfig) -> None:
        self._assign(target, access_token_response_client=self.access_token_response_client)


class UserInfoEndpointDsl(SecurityDsl[UserInfoEndpointConfig]):
    def __init__(self) -> None:
        super().__init__()
        self.user_service: OAuth2UserService | None = None

    def apply(self, target: UserInfoEndpointConfig) -> None:
        self._assign(target, user_service=self.user_service)


class OAuth2LoginDsl(SecurityDsl[OAuth2LoginConfigurer]):
    """OAuth2 login settings.

    Attributes:
        client_registration_repository: The providers users can log in with;
            falls back to a shared repository.
        login_page: Custom login page; when unset and exactly one provider
            is registered, users go straight to it.
        login_processing_url: Overrides the redirection endpoint.
        authentication_success_handler: Runs after a successful login.
        authentication_failure_handler: Runs after a failed login.
        failure_url: Redirect target after a failed login.
        permit_all: Grant everyone access to the login URLs.
    """

    def __init__(self) -> None:
        super().__init__()
        self.client_registration_repository: ClientRegistrationRepository | None = None
        self.login_page: str | None = None
        self.login_processing_url: str | None = None
        self.authentication_success_handler: AuthenticationSuccessHandler | None = None
        self.authentication_failure_handler: AuthenticationFailureHandler | None = None
        self.failure_url: str | None = None
        self.permit_all: bool | None = None
        self._default_success_url: tuple[str, bool] | None = None
        self._endpoints: list[Callable[[OAuth2LoginConfigurer], Any]] = []

    def default_success_url(self, default_success_url: str, always_use: bool = False) -> None:
        self._default_success_url = (default_success_url, always_use)

    def authorization_endpoint(
        self, configure: Callable[[AuthorizationEndpointDsl], None] | None = None, **properties: Any
    ) -> AuthorizationEndpointDsl:
        block = configure_block(AuthorizationEndpointDsl(), configure, properties)
        self._endpoints.append(lambda login: login.authorization_endpoint(block.apply))
        return block

    def redirection_endpoint(
        self, configure: Callable[[RedirectionEndpointDsl], None] | None = None, **properties: Any
    ) -> RedirectionEndpointDsl:
        block = configure_block(RedirectionEndpointDsl(), configure, properties)
        self._endpoints.append(lambda login: login.redirection_endpoint(block.apply))
        return block

    def token_endpoint(
        self, configure: Callable[[TokenEndpointDsl], None] | None = None, **properties: Any
    ) -> TokenEndpointDsl:
        block = configure_block(TokenEndpointDsl(), configure, properties)
        self._endpoints.append(lambda login: login.token_endpoint(block.apply))
        return block

    def user_info_endpoint(
        self, configure: Callable[[UserInfoEndpointDsl], None] | None = None, **properties: Any
    ) -> UserInfoEndpointDsl:
        block = configure_block(UserInfoEndpointDsl(), configure, properties)
        self._endpoints.append(lambda login: login.user_info_endpoint(block.apply))
        return block

    def apply(self, target: OAuth2LoginConfigurer) -> None:
        self._forward(
            target,
            client_registration_repository=self.client_registration_repository,
            login_page=self.login_page,
            login_processing_url=self.login_processing_url,
            success_handler=self.authentication_success_handler,
            failure_handler=self.authentication_failure_handler,
            failure_url=self.failure_url,
            permit_all=self.permit_all,
        )
        if self._default_success_url is not None:
            target.default_success_url(*self._default_success_url)
        for endpoint in self._endpoints:
            endpoint(target)
