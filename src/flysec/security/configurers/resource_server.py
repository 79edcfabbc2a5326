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
"""OAuth2 resource server: bearer tokens checked as JWTs or by introspection."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from flysec.kernel.exceptions import InvalidConfigurationException
from flysec.security.configurers.base import SecurityConfigurer
from flysec.security.configurers.csrf import CsrfConfigurer
from flysec.security.configurers.exception_handling import ExceptionHandlingConfigurer
from flysec.security.handlers import (
    AccessDeniedHandler,
    AuthenticationEntryPoint,
    BearerTokenAccessDeniedHandler,
    BearerTokenAuthenticationEntryPoint,
)
from flysec.security.matchers import (
    FunctionRequestMatcher,
    MediaTypeRequestMatcher,
    NegatedRequestMatcher,
    OrRequestMatcher,
    RequestMatcher,
    xhr_request,
)
from flysec.security.oauth2.introspection import HttpxOpaqueTokenIntrospector, OpaqueTokenIntrospector
from flysec.security.oauth2.jwt import (
    JwkSetUriJwtDecoder,
    JwtAuthenticationConverter,
    JwtAuthenticationProvider,
    JwtDecoder,
)
from flysec.web.adapters.starlette.filters.bearer_token_filter import (
    BearerTokenFilter,
    BearerTokenResolver,
    TokenAuthenticator,
)

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity


def _has_bearer_header(request: Any) -> bool:
    return str(request.headers.get("authorization", "")).lower().startswith("bearer ")


bearer_token_request: RequestMatcher = FunctionRequestMatcher(_has_bearer_header)

_api_request: RequestMatcher = OrRequestMatcher(
    xhr_request,
    NegatedRequestMatcher(MediaTypeRequestMatcher("text/html")),
)


class JwtConfig:
    def __init__(self) -> None:
        self.decoder: JwtDecoder | None = None
        self.jwk_set_uri: str | None = None
        self.jwt_authentication_converter: JwtAuthenticationConverter | None = None

    def jwt_decoder(self, decoder: JwtDecoder) -> JwtConfig:
        self.decoder = decoder
        return self

    def get_decoder(self) -> JwtDecoder:
        if self.decoder is not None:
            return self.decoder
        if self.jwk_set_uri:
            return JwkSetUriJwtDecoder(self.jwk_set_uri)
        raise InvalidConfigurationException("jwt() needs a jwt_decoder or a jwk_set_uri", code="MISSING_JWT_DECODER")


class OpaqueTokenConfig:
    def __init__(self) -> None:
        self.introspection_uri: str | None = None
        self.introspector: OpaqueTokenIntrospector | None = None
        self.client_id: str | None = None
        self.client_secret: str | None = None

    def introspection_client_credentials(self, client_id: str, client_secret: str) -> OpaqueTokenConfig:
        self.client_id = client_id
        self.client_secret = client_secret
        return self

    def get_introspector(self) -> OpaqueTokenIntrospector:
        if self.introspector is not None:
            return self.introspector
        if self.introspection_uri and self.client_id is not None and self.client_secret is not None:
            return HttpxOpaqueTokenIntrospector(self.introspection_uri, self.client_id, self.client_secret)
        raise InvalidConfigurationException(
            "opaque_token() needs an introspector or an introspection_uri with client credentials",
            code="MISSING_INTROSPECTOR",
        )


class OAuth2ResourceServerConfigurer(SecurityConfigurer):
    """Authenticates ``Authorization: Bearer`` requests.

    Exactly one of ``jwt`` and ``opaque_token`` must be configured.  Bearer
    requests are exempt from CSRF checks, and API clients get RFC 6750
    ``WWW-Authenticate: Bearer`` challenges.
    """

    def __init__(self) -> None:
        super().__init__()
        self._entry_point: AuthenticationEntryPoint | None = None
        self._access_denied_handler: AccessDeniedHandler | None = None
        self._resolver: BearerTokenResolver | None = None
        self.jwt_config: JwtConfig | None = None
        self.opaque_token_config: OpaqueTokenConfig | None = None

    def authentication_entry_point(self, entry_point: AuthenticationEntryPoint) -> OAuth2ResourceServerConfigurer:
        self._entry_point = entry_point
        return self

    def access_denied_handler(self, handler: AccessDeniedHandler) -> OAuth2ResourceServerConfigurer:
        self._access_denied_handler = handler
        return self

    def bearer_token_resolver(self, resolver: BearerTokenResolver) -> OAuth2ResourceServerConfigurer:
        self._resolver = resolver
        return self

    def jwt(self, customizer: Callable[[JwtConfig], None] | None = None) -> OAuth2ResourceServerConfigurer:
        if self.jwt_config is None:
            self.jwt_config = JwtConfig()
        if customizer is not None:
            customizer(self.jwt_config)
        return self

    def opaque_token(
        self, customizer: Callable[[OpaqueTokenConfig], None] | None = None
    ) -> OAuth2ResourceServerConfigurer:
        if self.opaque_token_config is None:
            self.opaque_token_config = OpaqueTokenConfig()
        if customizer is not None:
            customizer(self.opaque_token_config)
        return self

    def get_authenticator(self) -> TokenAuthenticator:
        if self.jwt_config is not None and self.opaque_token_config is not None:
            raise InvalidConfigurationException(
                "Configure either jwt() or opaque_token() on the resource server, not both",
                code="AMBIGUOUS_TOKEN_TYPE",
            )
        if self.jwt_config is not None:
            provider = JwtAuthenticationProvider(
                self.jwt_config.get_decoder(), self.jwt_config.jwt_authentication_converter
            )
            return provider.authenticate
        if self.opaque_token_config is not None:
            return self.opaque_token_config.get_introspector().introspect
        raise InvalidConfigurationException(
            "The resource server needs jwt() or opaque_token() configured",
            code="MISSING_TOKEN_TYPE",
        )

    def get_entry_point(self) -> AuthenticationEntryPoint:
        return self._entry_point or BearerTokenAuthenticationEntryPoint()

    def init(self, http: HttpSecurity) -> None:
        self.get_authenticator()
        exception_handling = http.get_configurer(ExceptionHandlingConfigurer)
        if exception_handling is not None:
            matcher = OrRequestMatcher(bearer_token_request, _api_request)
            exception_handling.default_authentication_entry_point_for(self.get_entry_point(), matcher)
            exception_handling.default_access_denied_handler_for(
                self._access_denied_handler or BearerTokenAccessDeniedHandler(), bearer_token_request
            )
        csrf = http.get_configurer(CsrfConfigurer)
        if csrf is not None:
            csrf.ignoring_request_matchers(bearer_token_request)

    def configure(self, http: HttpSecurity) -> None:
        http.add_filter(BearerTokenFilter(self.get_authenticator(), self.get_entry_point(), self._resolver))
