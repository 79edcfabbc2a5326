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
"""``oauth2_resource_server`` block with its ``jwt`` and ``opaque_token`` blocks."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from flysec.dsl.base import SecurityDsl, configure_block
from flysec.security.configurers.resource_server import (
    JwtConfig,
    OAuth2ResourceServerConfigurer,
    OpaqueTokenConfig,
)
from flysec.security.handlers import AccessDeniedHandler, AuthenticationEntryPoint
from flysec.security.oauth2.introspection import OpaqueTokenIntrospector
from flysec.security.oauth2.jwt import JwtAuthenticationConverter, JwtDecoder
from flysec.web.adapters.starlette.filters.bearer_token_filter import BearerTokenResolver


class JwtDsl(SecurityDsl[JwtConfig]):
    """JWT bearer tokens.

    Attributes:
        jwt_decoder: Verifies and decodes tokens; wins over ``jwk_set_uri``.
        jwk_set_uri: Where signing keys are fetched from.
        jwt_authentication_converter: Turns decoded claims into a security context.
    """

    def __init__(self) -> None:
        super().__init__()
        self.jwt_decoder: JwtDecoder | None = None
        self.jwk_set_uri: str | None = None
        self.jwt_authentication_converter: JwtAuthenticationConverter | None = None

    def apply(self, target: JwtConfig) -> None:
        self._assign(
            target,
            jwk_set_uri=self.jwk_set_uri,
            jwt_authentication_converter=self.jwt_authentication_converter,
        )
        self._forward(target, jwt_decoder=self.jwt_decoder)


class OpaqueTokenDsl(SecurityDsl[OpaqueTokenConfig]):
    """Opaque bearer tokens checked at an RFC 7662 introspection endpoint."""

    def __init__(self) -> None:
        super().__init__()
        self.introspection_uri: str | None = None
        self.introspector: OpaqueTokenIntrospector | None = None
        self._client_credentials: tuple[str, str] | None = None

    def introspection_client_credentials(self, client_id: str, client_secret: str) -> None:
        self._client_credentials = (client_id, client_secret)

    def apply(self, target: OpaqueTokenConfig) -> None:
        self._assign(target, introspection_uri=self.introspection_uri, introspector=self.introspector)
        if self._client_credentials is not None:
            target.introspection_client_credentials(*self._client_credentials)


class OAuth2ResourceServerDsl(SecurityDsl[OAuth2ResourceServerConfigurer]):
    """Bearer token authentication; declare exactly one of ``jwt`` and ``opaque_token``."""

    def __init__(self) -> None:
        super().__init__()
        self.authentication_entry_point: AuthenticationEntryPoint | None = None
        self.access_denied_handler: AccessDeniedHandler | None = None
        self.bearer_token_resolver: BearerTokenResolver | None = None
        self._jwt: JwtDsl | None = None
        self._opaque_token: OpaqueTokenDsl | None = None

    def jwt(self, configure: Callable[[JwtDsl], None] | None = None, **properties: Any) -> JwtDsl:
        self._jwt = configure_block(self._jwt or JwtDsl(), configure, properties)
        return self._jwt

    def opaque_token(
        self, configure: Callable[[OpaqueTokenDsl], None] | None = None, **properties: Any
    ) -> OpaqueTokenDsl:
        self._opaque_token = configure_block(self._opaque_token or OpaqueTokenDsl(), configure, properties)
        return self._opaque_token

    def apply(self, target: OAuth2ResourceServerConfigurer) -> None:
        self._forward(
            target,
            authentication_entry_point=self.authentication_entry_point,
            access_denied_handler=self.access_denied_handler,
            bearer_token_resolver=self.bearer_token_resolver,
        )
        if self._jwt is not None:
            target.jwt(self._jwt.apply)
        if self._opaque_token is not None:
            target.opaque_token(self._opaque_token.apply)
