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
"""Tests for OAuth2 login against a mocked provider."""

from __future__ import annotations

from types import SimpleNamespace
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from flysec.kernel.exceptions import AuthenticationException, InvalidConfigurationException
from flysec.security.configurers.oauth2_login import (
    AuthorizationEndpointConfig,
    OAuth2LoginConfigurer,
    TokenEndpointConfig,
    UserInfoEndpointConfig,
)
from flysec.security.context import current_security_context
from flysec.security.http_security import HttpSecurity
from flysec.security.oauth2.client import (
    ClientRegistration,
    InMemoryClientRegistrationRepository,
    OAuth2AuthorizationRequest,
    common_provider,
)
from flysec.security.oauth2.login import (
    HttpSessionOAuth2AuthorizationRequestRepository,
    HttpxAuthorizationCodeTokenResponseClient,
    HttpxOAuth2UserService,
)

ACME = ClientRegistration(
    "acme",
    "client-id",
    "client-secret",
    scopes=("openid", "profile"),
    authorization_uri="https://acme.example/authorize",
    token_uri="https://acme.example/token",
    user_info_uri="https://acme.example/userinfo",
    client_name="Acme",
)
OTHER = ClientRegistration(
    "other",
    "other-id",
    authorization_uri="https://other.example/authorize",
    token_uri="https://other.example/token",
    user_info_uri="https://other.example/userinfo",
)
HTML = {"Accept": "text/html"}


def _provider(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/token":
        form = parse_qs(request.content.decode())
        if form["code"][0] != "good-code":
            return httpx.Response(400, json={"error": "invalid_grant"})
        return httpx.Response(200, json={"access_token": "at-1", "token_type": "Bearer", "scope": "openid profile"})
    if request.url.path == "/userinfo":
        assert request.headers["authorization"] == "Bearer at-1"
        return httpx.Response(200, json={"sub": "acme-42", "name": "Ada"})
    return httpx.Response(404)


TRANSPORT = httpx.MockTransport(_provider)


async def _whoami(request: Request) -> PlainTextResponse:
    ctx = current_security_context(request)
    return PlainTextResponse(" ".join([str(ctx.user_id), *ctx.authorities]))


def _client(*registrations: ClientRegistration, transport: httpx.MockTransport = TRANSPORT) -> TestClient:
    def _token_endpoint(token: TokenEndpointConfig) -> None:
        token.access_token_response_client = HttpxAuthorizationCodeTokenResponseClient(transport=transport)

    def _user_info_endpoint(user_info: UserInfoEndpointConfig) -> None:
        user_info.user_service = HttpxOAuth2UserService(transport=transport)

    def _login(login: OAuth2LoginConfigurer) -> None:
        login.client_registration_repository(InMemoryClientRegistrationRepository(*(registrations or (ACME,))))
        login.token_endpoint(_token_endpoint).user_info_endpoint(_user_info_endpoint)

    http = HttpSecurity()
    http.authorize_requests(lambda auth: auth.any_request().authenticated())
    http.oauth2_login(_login)
    chain = http.build()
    app = Starlette(routes=[Route("/{path:path}", _whoami)], middleware=chain.middleware())
    return TestClient(app)


def _authorize(client: TestClient) -> dict[str, list[str]]:
    response = client.get("/oauth2/authorization/acme", follow_redirects=False)
    assert response.status_code == 302
    location = urlsplit(response.headers["location"])
    assert f"{location.scheme}://{location.netloc}{location.path}" == "https://acme.example/authorize"
    return parse_qs(location.query)


class TestOAuth2Login:
    def test_single_registration_redirects_to_provider(self) -> None:
        response = _client().get("/private", headers=HTML, follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/oauth2/authorization/acme"

    def test_authorization_request(self) -> None:
        params = _authorize(_client())
        assert params["response_type"] == ["code"]
        assert params["client_id"] == ["client-id"]
        assert params["redirect_uri"] == ["http://testserver/login/oauth2/code/acme"]
        assert params["scope"] == ["openid profile"]
        assert params["state"][0]

    def test_full_login(self) -> None:
        client = _client()
        client.get("/private", headers=HTML, follow_redirects=False)
        state = _authorize(client)["state"][0]

        response = client.get(f"/login/oauth2/code/acme?code=good-code&state={state}", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/private"
        assert client.get("/private").text == "acme-42 ROLE_USER SCOPE_openid SCOPE_profile"

    def test_state_mismatch(self) -> None:
        client = _client()
        _authorize(client)
        response = client.get("/login/oauth2/code/acme?code=good-code&state=forged", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/login?error"

    def test_provider_error(self) -> None:
        client = _client()
        state = _authorize(client)["state"][0]
        response = client.get(f"/login/oauth2/code/acme?error=access_denied&state={state}", follow_redirects=False)
        assert response.headers["location"] == "/login?error"

    def test_callback_without_authorization_request(self) -> None:
        response = _client().get("/login/oauth2/code/acme?code=good-code&state=abc", follow_redirects=False)
        assert response.headers["location"] == "/login?error"

    def test_rejected_code(self) -> None:
        client = _client()
        state = _authorize(client)["state"][0]
        response = client.get(f"/login/oauth2/code/acme?code=bad-code&state={state}", follow_redirects=False)
        assert response.headers["location"] == "/login?error"

    def test_state_is_single_use(self) -> None:
        client = _client()
        state = _authorize(client)["state"][0]
        client.get(f"/login/oauth2/code/acme?code=good-code&state={state}", follow_redirects=False)
        client.cookies.clear()
        response = client.get(f"/login/oauth2/code/acme?code=good-code&state={state}", follow_redirects=False)
        assert response.headers["location"] == "/login?error"

    def test_unknown_registration(self) -> None:
        response = _client().get("/oauth2/authorization/nope", follow_redirects=False)
        assert response.status_code == 400

    def test_several_registrations_use_login_page(self) -> None:
        client = _client(ACME, OTHER)
        response = client.get("/private", headers=HTML, follow_redirects=False)
        assert response.headers["location"] == "/login"
        page = client.get("/login").text
        assert 'href="/oauth2/authorization/acme"' in page
        assert 'href="/oauth2/authorization/other"' in page
        assert ">Acme<" in page
        assert 'method="post"' not in page


class TestOAuth2Pieces:
    @pytest.mark.asyncio
    async def test_user_service_falls_back_to_registered_scopes(self) -> None:
        service = HttpxOAuth2UserService(transport=TRANSPORT)
        ctx = await service.load_user(ACME, {"access_token": "at-1"})
        assert ctx.user_id == "acme-42"
        assert ctx.permissions == ["SCOPE_openid", "SCOPE_profile"]
        assert ctx.attributes["name"] == "Ada"
        assert ctx.authentication_method == "oauth2"

    @pytest.mark.asyncio
    async def test_user_service_requires_user_info_uri(self) -> None:
        registration = ClientRegistration("bare", "id", token_uri="https://acme.example/token")
        with pytest.raises(AuthenticationException) as exc_info:
            await HttpxOAuth2UserService(transport=TRANSPORT).load_user(registration, {"access_token": "at-1"})
        assert exc_info.value.code == "missing_user_info_uri"

    @pytest.mark.asyncio
    async def test_token_client_rejects_bad_code(self) -> None:
        client = HttpxAuthorizationCodeTokenResponseClient(transport=TRANSPORT)
        with pytest.raises(AuthenticationException) as exc_info:
            await client.get_token_response(ACME, "bad-code", "http://testserver/login/oauth2/code/acme")
        assert exc_info.value.code == "invalid_token_response"

    def test_common_provider(self) -> None:
        google = common_provider("google", client_id="gid", client_secret="gsecret")
        assert google.registration_id == "google"
        assert google.scopes == ("openid", "profile", "email")
        assert google.client_name == "Google"
        github = common_provider("github", client_id="x", registration_id="gh")
        assert github.registration_id == "gh"
        assert github.user_name_attribute == "id"

    def test_unknown_provider(self) -> None:
        with pytest.raises(InvalidConfigurationException) as exc_info:
            common_provider("myspace", client_id="x")
        assert exc_info.value.code == "UNKNOWN_PROVIDER"

    def test_repository_rejects_duplicates_and_empty(self) -> None:
        with pytest.raises(InvalidConfigurationException):
            InMemoryClientRegistrationRepository(ACME, ACME)
        with pytest.raises(InvalidConfigurationException):
            InMemoryClientRegistrationRepository()

    def test_redirect_uri_expansion(self) -> None:
        assert ACME.expand_redirect_uri("https://app.example/") == "https://app.example/login/oauth2/code/acme"

    @pytest.mark.asyncio
    async def test_token_client_rejects_non_json_body(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>maintenance</html>"))
        client = HttpxAuthorizationCodeTokenResponseClient(transport=transport)
        with pytest.raises(AuthenticationException) as exc_info:
            await client.get_token_response(ACME, "good-code", "http://testserver/login/oauth2/code/acme")
        assert exc_info.value.code == "invalid_token_response"

    @pytest.mark.asyncio
    async def test_user_service_rejects_non_object_body(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=["acme-42"]))
        with pytest.raises(AuthenticationException) as exc_info:
            await HttpxOAuth2UserService(transport=transport).load_user(ACME, {"access_token": "at-1"})
        assert exc_info.value.code == "invalid_user_info_response"

    def test_session_repository_without_session(self) -> None:
        repository = HttpSessionOAuth2AuthorizationRequestRepository()
        request = SimpleNamespace(state=SimpleNamespace())
        authorization_request = OAuth2AuthorizationRequest(
            "acme", "state-1", "http://testserver/login/oauth2/code/acme"
        )
        repository.save_authorization_request(authorization_request, request)
        assert repository.remove_authorization_request(request) is None


class TestOAuth2LoginFailures:
    def test_non_json_token_response_goes_to_failure_url(self) -> None:
        def _html_token_endpoint(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/token":
                return httpx.Response(200, text="<html>maintenance</html>")
            return _provider(request)

        client = _client(transport=httpx.MockTransport(_html_token_endpoint))
        state = _authorize(client)["state"][0]
        response = client.get(f"/login/oauth2/code/acme?code=good-code&state={state}", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/login?error"

    def test_stateless_chain_requires_authorization_request_repository(self) -> None:
        http = HttpSecurity()
        http.session_management(lambda s: s.disable())
        registrations = InMemoryClientRegistrationRepository(ACME)
        http.oauth2_login(lambda login: login.client_registration_repository(registrations))
        with pytest.raises(InvalidConfigurationException) as exc_info:
            http.build()
        assert exc_info.value.code == "SESSIONS_REQUIRED"

    def test_stateless_chain_with_custom_repository(self) -> None:
        def _endpoint(authorization: AuthorizationEndpointConfig) -> None:
            authorization.authorization_request_repository = HttpSessionOAuth2AuthorizationRequestRepository()

        def _login(login: OAuth2LoginConfigurer) -> None:
            login.client_registration_repository(InMemoryClientRegistrationRepository(ACME))
            login.authorization_endpoint(_endpoint)

        http = HttpSecurity()
        http.session_management(lambda s: s.disable())
        http.oauth2_login(_login)
        assert http.build().filters
