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
"""Tests for the oauth2_login and oauth2_resource_server blocks."""

from __future__ import annotations

import time

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from flysec.dsl import HttpSecurityDsl, OAuth2LoginDsl, OAuth2ResourceServerDsl, any_request, authenticated, http
from flysec.security.configurers.oauth2_login import OAuth2LoginConfigurer
from flysec.security.configurers.resource_server import OAuth2ResourceServerConfigurer
from flysec.security.context import current_security_context
from flysec.security.http_security import HttpSecurity, SecurityFilterChain
from flysec.security.oauth2.client import ClientRegistration, InMemoryClientRegistrationRepository
from flysec.security.oauth2.jwt import SecretKeyJwtDecoder
from flysec.security.oauth2.login import HttpxAuthorizationCodeTokenResponseClient, HttpxOAuth2UserService

ACME = ClientRegistration(
    "acme",
    "client-id",
    "client-secret",
    authorization_uri="https://acme.example/authorize",
    token_uri="https://acme.example/token",
    user_info_uri="https://acme.example/userinfo",
)
REGISTRATIONS = InMemoryClientRegistrationRepository(ACME)
DECODER = SecretKeyJwtDecoder("0123456789abcdef0123456789abcdef")
HTML = {"Accept": "text/html"}


async def _whoami(request: Request) -> PlainTextResponse:
    return PlainTextResponse(str(current_security_context(request).user_id))


def _client(chain: SecurityFilterChain) -> TestClient:
    app = Starlette(routes=[Route("/{path:path}", _whoami)], middleware=chain.middleware())
    return TestClient(app)


class TestOAuth2LoginDsl:
    def test_single_provider_entry_point(self) -> None:
        def security(dsl: HttpSecurityDsl) -> None:
            dsl.oauth2_login(client_registration_repository=REGISTRATIONS)
            dsl.authorize_requests(lambda auth: auth.authorize(any_request, authenticated))

        response = _client(http(HttpSecurity(), security)).get("/private", headers=HTML, follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/oauth2/authorization/acme"

    def test_custom_authorization_base_uri(self) -> None:
        def security(dsl: HttpSecurityDsl) -> None:
            with dsl.oauth2_login() as login:
                login.client_registration_repository = REGISTRATIONS
                login.authorization_endpoint(base_uri="/auth")
            dsl.authorize_requests(lambda auth: auth.authorize(any_request, authenticated))

        client = _client(http(HttpSecurity(), security))
        response = client.get("/private", headers=HTML, follow_redirects=False)
        assert response.headers["location"] == "/auth/acme"
        provider = client.get("/auth/acme", follow_redirects=False)
        assert provider.status_code == 302
        assert provider.headers["location"].startswith("https://acme.example/authorize?")

    def test_endpoint_blocks_forwarded(self) -> None:
        token_client = HttpxAuthorizationCodeTokenResponseClient()
        user_service = HttpxOAuth2UserService()
        dsl = OAuth2LoginDsl()
        dsl.client_registration_repository = REGISTRATIONS
        dsl.redirection_endpoint(base_uri="/callback/*")
        dsl.token_endpoint(access_token_response_client=token_client)
        dsl.user_info_endpoint(user_service=user_service)
        configurer = OAuth2LoginConfigurer()
        dsl.get()(configurer)
        assert configurer.redirection_base_uri == "/callback/*"
        assert configurer.token_endpoint_config.access_token_response_client is token_client
        assert configurer.user_info_endpoint_config.user_service is user_service
        # endpoints that were not declared keep their defaults
        assert configurer.authorization_base_uri == "/oauth2/authorization"

    def test_login_processing_url_wins(self) -> None:
        dsl = OAuth2LoginDsl()
        dsl.login_processing_url = "/sso/callback"
        dsl.redirection_endpoint(base_uri="/callback/*")
        configurer = OAuth2LoginConfigurer()
        dsl.get()(configurer)
        assert configurer.redirection_base_uri == "/sso/callback"


class TestOAuth2ResourceServerDsl:
    def test_jwt_decoder(self) -> None:
        def security(dsl: HttpSecurityDsl) -> None:
            dsl.oauth2_resource_server(lambda rs: rs.jwt(jwt_decoder=DECODER))
            dsl.authorize_requests(lambda auth: auth.authorize(any_request, authenticated))

        client = _client(http(HttpSecurity(), security))
        token = DECODER.encode({"sub": "alice", "exp": int(time.time()) + 300})
        response = client.get("/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.text == "alice"
        missing = client.get("/me")
        assert missing.status_code == 401
        assert missing.headers["www-authenticate"] == "Bearer"

    def test_jwt_block_reused(self) -> None:
        dsl = OAuth2ResourceServerDsl()
        first = dsl.jwt(jwk_set_uri="https://issuer.example/jwks")
        second = dsl.jwt(jwt_decoder=DECODER)
        assert first is second
        configurer = OAuth2ResourceServerConfigurer()
        dsl.get()(configurer)
        assert configurer.jwt_config is not None
        assert configurer.jwt_config.jwk_set_uri == "https://issuer.example/jwks"
        assert configurer.jwt_config.decoder is DECODER
        assert configurer.opaque_token_config is None

    def test_opaque_token(self) -> None:
        dsl = OAuth2ResourceServerDsl()
        with dsl.opaque_token() as opaque:
            opaque.introspection_uri = "https://issuer.example/introspect"
            opaque.introspection_client_credentials("rs", "secret")
        configurer = OAuth2ResourceServerConfigurer()
        dsl.get()(configurer)
        config = configurer.opaque_token_config
        assert config is not None
        assert config.introspection_uri == "https://issuer.example/introspect"
        assert (config.client_id, config.client_secret) == ("rs", "secret")
        assert configurer.jwt_config is None
