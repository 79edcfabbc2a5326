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
"""Tests for the OAuth2 resource server: JWT and opaque bearer tokens."""

from __future__ import annotations

import time
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from flysec.kernel.exceptions import ExternalServiceException, InvalidConfigurationException, InvalidTokenException
from flysec.security.configurers.resource_server import JwtConfig, OpaqueTokenConfig
from flysec.security.context import SecurityContext, current_security_context
from flysec.security.http_security import HttpSecurity
from flysec.security.oauth2.introspection import HttpxOpaqueTokenIntrospector
from flysec.security.oauth2.jwt import JwtAuthenticationProvider, SecretKeyJwtDecoder, claims_to_security_context

SECRET = "0123456789abcdef0123456789abcdef"
DECODER = SecretKeyJwtDecoder(SECRET)


def _token(**claims: Any) -> str:
    payload: dict[str, Any] = {"sub": "alice", "scope": "orders:read profile", "exp": int(time.time()) + 300}
    payload.update(claims)
    return DECODER.encode({k: v for k, v in payload.items() if v is not None})


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def _whoami(request: Request) -> PlainTextResponse:
    return PlainTextResponse(str(current_security_context(request).user_id))


def _client(http: HttpSecurity) -> TestClient:
    chain = http.build()
    app = Starlette(routes=[Route("/{path:path}", _whoami, methods=["GET", "POST"])], middleware=chain.middleware())
    return TestClient(app)


def _http() -> HttpSecurity:
    http = HttpSecurity()
    http.authorize_requests(
        lambda auth: auth.request_matchers("/admin/**")
        .has_role("ADMIN")
        .request_matchers("/orders/**")
        .has_authority("orders:read")
        .any_request()
        .authenticated()
    )
    return http


def _jwt_http() -> HttpSecurity:
    http = _http()
    http.oauth2_resource_server(lambda rs: rs.jwt(lambda jwt: jwt.jwt_decoder(DECODER)))
    return http


def _introspection(request: httpx.Request) -> httpx.Response:
    assert request.headers["authorization"].startswith("Basic ")
    token = parse_qs(request.content.decode())["token"][0]
    if token == "good":
        return httpx.Response(200, json={"active": True, "sub": "bob", "scope": "orders:read"})
    if token == "broken":
        return httpx.Response(500)
    if token == "garbled":
        return httpx.Response(200, text="<html>gateway</html>")
    return httpx.Response(200, json={"active": False})


def _introspector() -> HttpxOpaqueTokenIntrospector:
    return HttpxOpaqueTokenIntrospector(
        "https://as.example/introspect", "resource-server", "secret", transport=httpx.MockTransport(_introspection)
    )


class TestJwtResourceServer:
    def test_valid_token(self) -> None:
        response = _client(_jwt_http()).get("/orders/1", headers=_bearer(_token()))
        assert response.status_code == 200
        assert response.text == "alice"

    def test_missing_token(self) -> None:
        response = _client(_jwt_http()).get("/orders/1")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_invalid_token(self) -> None:
        response = _client(_jwt_http()).get("/orders/1", headers=_bearer("not.a.jwt"))
        assert response.status_code == 401
        assert response.headers["www-authenticate"].startswith('Bearer error="invalid_token"')

    def test_expired_token(self) -> None:
        token = _token(exp=int(time.time()) - 60)
        response = _client(_jwt_http()).get("/orders/1", headers=_bearer(token))
        assert response.status_code == 401
        assert 'error="invalid_token"' in response.headers["www-authenticate"]

    def test_malformed_header(self) -> None:
        response = _client(_jwt_http()).get("/orders/1", headers={"Authorization": "Bearer a b"})
        assert response.status_code == 401

    def test_token_without_subject(self) -> None:
        response = _client(_jwt_http()).get("/orders/1", headers=_bearer(_token(sub=None)))
        assert response.status_code == 401

    def test_insufficient_scope(self) -> None:
        response = _client(_jwt_http()).get("/admin/x", headers=_bearer(_token()))
        assert response.status_code == 403
        assert 'error="insufficient_scope"' in response.headers["www-authenticate"]

    def test_missing_authority(self) -> None:
        response = _client(_jwt_http()).get("/orders/1", headers=_bearer(_token(scope="profile")))
        assert response.status_code == 403

    def test_roles_claim(self) -> None:
        response = _client(_jwt_http()).get("/admin/x", headers=_bearer(_token(roles=["ADMIN"])))
        assert response.status_code == 200

    def test_bearer_requests_skip_csrf(self) -> None:
        client = _client(_jwt_http())
        assert client.post("/orders/1", headers=_bearer(_token())).status_code == 200
        # without a bearer token CSRF still applies
        assert client.post("/orders/1").status_code == 403

    def test_custom_converter(self) -> None:
        def _converter(claims: dict[str, Any]) -> SecurityContext:
            return SecurityContext(user_id=claims["email"], roles=["ADMIN"], authentication_method="bearer")

        def _jwt(jwt: JwtConfig) -> None:
            jwt.jwt_decoder(DECODER)
            jwt.jwt_authentication_converter = _converter

        http = _http()
        http.oauth2_resource_server(lambda rs: rs.jwt(_jwt))
        response = _client(http).get("/admin/x", headers=_bearer(_token(email="alice@example.com")))
        assert response.text == "alice@example.com"


class TestOpaqueTokenResourceServer:
    def _client(self) -> TestClient:
        def _opaque(opaque: OpaqueTokenConfig) -> None:
            opaque.introspector = _introspector()

        http = _http()
        http.oauth2_resource_server(lambda rs: rs.opaque_token(_opaque))
        return _client(http)

    def test_active_token(self) -> None:
        response = self._client().get("/orders/1", headers=_bearer("good"))
        assert response.status_code == 200
        assert response.text == "bob"

    def test_inactive_token(self) -> None:
        response = self._client().get("/orders/1", headers=_bearer("revoked"))
        assert response.status_code == 401
        assert 'error="invalid_token"' in response.headers["www-authenticate"]

    def test_endpoint_error(self) -> None:
        assert self._client().get("/orders/1", headers=_bearer("broken")).status_code == 401

    def test_non_json_introspection_response(self) -> None:
        response = self._client().get("/orders/1", headers=_bearer("garbled"))
        assert response.status_code == 401
        assert 'error="invalid_token"' in response.headers["www-authenticate"]


class TestResourceServerConfiguration:
    def test_jwt_and_opaque_token_are_exclusive(self) -> None:
        def _opaque(opaque: OpaqueTokenConfig) -> None:
            opaque.introspector = _introspector()

        http = HttpSecurity()
        http.oauth2_resource_server(lambda rs: rs.jwt(lambda jwt: jwt.jwt_decoder(DECODER)).opaque_token(_opaque))
        with pytest.raises(InvalidConfigurationException) as exc_info:
            http.build()
        assert exc_info.value.code == "AMBIGUOUS_TOKEN_TYPE"

    def test_token_type_required(self) -> None:
        http = HttpSecurity()
        http.oauth2_resource_server()
        with pytest.raises(InvalidConfigurationException) as exc_info:
            http.build()
        assert exc_info.value.code == "MISSING_TOKEN_TYPE"

    def test_jwt_decoder_required(self) -> None:
        http = HttpSecurity()
        http.oauth2_resource_server(lambda rs: rs.jwt())
        with pytest.raises(InvalidConfigurationException) as exc_info:
            http.build()
        assert exc_info.value.code == "MISSING_JWT_DECODER"

    def test_introspection_uri_needs_credentials(self) -> None:
        def _opaque(opaque: OpaqueTokenConfig) -> None:
            opaque.introspection_uri = "https://as.example/introspect"

        http = HttpSecurity()
        http.oauth2_resource_server(lambda rs: rs.opaque_token(_opaque))
        with pytest.raises(InvalidConfigurationException) as exc_info:
            http.build()
        assert exc_info.value.code == "MISSING_INTROSPECTOR"


class TestTokenPieces:
    def test_claims_mapping(self) -> None:
        ctx = claims_to_security_context({"sub": "u1", "realm_access": {"roles": ["ADMIN"]}, "scope": ["a", "b"]})
        assert ctx.user_id == "u1"
        assert ctx.roles == ["ADMIN"]
        assert ctx.permissions == ["a", "b"]
        assert ctx.authentication_method == "bearer"

    def test_decoder_rejects_wrong_secret(self) -> None:
        other = SecretKeyJwtDecoder("f" * 32)
        with pytest.raises(InvalidTokenException) as exc_info:
            other.decode(_token())
        assert exc_info.value.code == "INVALID_TOKEN"

    @pytest.mark.asyncio
    async def test_provider(self) -> None:
        ctx = await JwtAuthenticationProvider(DECODER).authenticate(_token())
        assert ctx.user_id == "alice"
        assert ctx.permissions == ["orders:read", "profile"]

    @pytest.mark.asyncio
    async def test_introspection_transport_failure(self) -> None:
        def _fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        introspector = HttpxOpaqueTokenIntrospector(
            "https://as.example/introspect", "rs", "secret", transport=httpx.MockTransport(_fail)
        )
        with pytest.raises(ExternalServiceException) as exc_info:
            await introspector.introspect("token")
        assert exc_info.value.code == "INTROSPECTION_FAILED"

    @pytest.mark.asyncio
    async def test_introspection_non_json_body(self) -> None:
        with pytest.raises(ExternalServiceException) as exc_info:
            await _introspector().introspect("garbled")
        assert exc_info.value.code == "INTROSPECTION_FAILED"
