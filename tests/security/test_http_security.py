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
"""Tests for the HttpSecurity builder: defaults, filter order and build errors."""

from __future__ import annotations

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from flysec.core.config import Config
from flysec.kernel.exceptions import InvalidConfigurationException
from flysec.security.authentication import BcryptPasswordEncoder, in_memory_users
from flysec.security.configurers.csrf import CsrfConfigurer
from flysec.security.configurers.session_management import SessionManagementConfigurer
from flysec.security.context import current_security_context
from flysec.security.csrf import CookieCsrfTokenRepository, CsrfTokenRepository, HttpSessionCsrfTokenRepository
from flysec.security.http_security import HttpSecurity, SecurityFilterChain
from flysec.security.oauth2.client import ClientRegistration, InMemoryClientRegistrationRepository
from flysec.security.oauth2.jwt import SecretKeyJwtDecoder
from flysec.web.cors import CORSConfig, UrlBasedCorsConfigurationSource

ENCODER = BcryptPasswordEncoder(rounds=4)


def _names(chain: SecurityFilterChain) -> list[str]:
    return [type(f).__name__ for f in chain.filters]


async def _whoami(request: Request) -> PlainTextResponse:
    return PlainTextResponse(str(current_security_context(request).user_id))


def _client(chain: SecurityFilterChain) -> TestClient:
    app = Starlette(routes=[Route("/{path:path}", _whoami, methods=["GET", "POST"])], middleware=chain.middleware())
    return TestClient(app)


class TestDefaults:
    def test_default_filters(self) -> None:
        chain = HttpSecurity().build()
        assert _names(chain) == [
            "HeaderWriterFilter",
            "SessionFilter",
            "SecurityContextFilter",
            "CsrfFilter",
            "LogoutFilter",
            "RequestCacheFilter",
            "AnonymousAuthenticationFilter",
            "ExceptionTranslationFilter",
        ]

    def test_without_authorization_everything_is_allowed(self) -> None:
        client = _client(HttpSecurity().build())
        response = client.get("/anything")
        assert response.status_code == 200
        assert response.text == "anonymousUser"

    def test_full_filter_order(self) -> None:
        http = HttpSecurity()
        http.user_details_service(in_memory_users(ENCODER, [("alice", "pw", ["USER"])]))
        source = UrlBasedCorsConfigurationSource()
        source.register_cors_configuration("/**", CORSConfig())
        registration = ClientRegistration(
            "acme",
            "client",
            authorization_uri="https://acme.example/authorize",
            token_uri="https://acme.example/token",
            user_info_uri="https://acme.example/userinfo",
        )
        http.authorize_requests(lambda auth: auth.any_request().authenticated())
        http.https_redirect()
        http.form_login()
        http.http_basic()
        registrations = InMemoryClientRegistrationRepository(registration)
        http.oauth2_login(lambda login: login.client_registration_repository(registrations))
        http.oauth2_resource_server(lambda rs: rs.jwt(lambda j: j.jwt_decoder(SecretKeyJwtDecoder("k" * 32))))
        http.cors(lambda cors: cors.configuration_source(source))

        chain = http.build()

        assert _names(chain) == [
            "HttpsRedirectFilter",
            "HeaderWriterFilter",
            "SessionFilter",
            "SecurityContextFilter",
            "CsrfFilter",
            "LogoutFilter",
            "OAuth2LoginFilter",
            "DefaultLoginPageFilter",
            "FormLoginFilter",
            "HttpBasicFilter",
            "BearerTokenFilter",
            "RequestCacheFilter",
            "AnonymousAuthenticationFilter",
            "ExceptionTranslationFilter",
            "AuthorizationFilter",
        ]
        assert chain.cors_configuration_source is source
        assert len(chain.middleware()) == 2

    def test_disabled_concerns_add_no_filter(self) -> None:
        http = HttpSecurity()
        http.csrf(lambda c: c.disable())
        http.headers(lambda h: h.disable())
        http.session_management(lambda s: s.disable())
        http.logout(lambda lo: lo.disable())
        http.request_cache(lambda rc: rc.disable())
        http.anonymous(lambda a: a.disable())
        http.exception_handling(lambda e: e.disable())
        assert _names(http.build()) == ["SecurityContextFilter"]

    def test_configurer_stays_disabled(self) -> None:
        http = HttpSecurity()
        http.csrf(lambda c: c.disable())
        http.csrf()
        assert not http.is_enabled(CsrfConfigurer)
        assert http.get_configurer(CsrfConfigurer) is None

    def test_sessions_disabled_is_stateless(self) -> None:
        http = HttpSecurity()
        http.session_management(lambda s: s.disable())
        assert not http.sessions_enabled
        client = _client(http.build())
        response = client.get("/")
        assert "FLYSEC_SESSION" not in response.cookies


class TestBuildErrors:
    def test_build_twice(self) -> None:
        http = HttpSecurity()
        http.build()
        with pytest.raises(InvalidConfigurationException) as exc_info:
            http.build()
        assert exc_info.value.code == "ALREADY_BUILT"

    def test_form_login_without_users(self) -> None:
        http = HttpSecurity()
        http.form_login()
        with pytest.raises(InvalidConfigurationException) as exc_info:
            http.build()
        assert exc_info.value.code == "MISSING_AUTHENTICATION_MANAGER"

    def test_cors_without_source(self) -> None:
        http = HttpSecurity()
        http.cors()
        with pytest.raises(InvalidConfigurationException) as exc_info:
            http.build()
        assert exc_info.value.code == "MISSING_CORS_SOURCE"

    def test_oauth2_login_without_registrations(self) -> None:
        http = HttpSecurity()
        http.oauth2_login()
        with pytest.raises(InvalidConfigurationException) as exc_info:
            http.build()
        assert exc_info.value.code == "MISSING_CLIENT_REGISTRATIONS"


class TestAuthorizeRequests:
    def test_registry_returned_without_customizer(self) -> None:
        http = HttpSecurity()
        registry = http.authorize_requests()
        registry.request_matchers("/public/**").permit_all().any_request().deny_all()
        assert len(http.authorize_requests().rules) == 2

    def test_rules_enforced(self) -> None:
        http = HttpSecurity()
        http.authorize_requests(
            lambda auth: auth.request_matchers("/public/**").permit_all().request_matchers("/closed").deny_all()
        )
        client = _client(http.build())
        assert client.get("/public/page").status_code == 200
        # anonymous callers are sent to authentication, which answers 401
        assert client.get("/closed").status_code == 401
        assert client.get("/unmatched").status_code == 401

    def test_request_matchers_requires_argument(self) -> None:
        with pytest.raises(ValueError):
            HttpSecurity().authorize_requests().request_matchers()

    def test_method_specific_rule(self) -> None:
        http = HttpSecurity()
        http.csrf(lambda c: c.disable())
        http.authorize_requests(
            lambda auth: auth.request_matchers("/items/**", method="GET").permit_all().any_request().deny_all()
        )
        client = _client(http.build())
        assert client.get("/items/1").status_code == 200
        assert client.post("/items/1").status_code == 401


class TestSecurityMatcher:
    def test_unmatched_requests_bypass_chain(self) -> None:
        http = HttpSecurity()
        http.security_matcher("/api/**")
        http.authorize_requests(lambda auth: auth.any_request().deny_all())
        client = _client(http.build())
        assert client.get("/api/x").status_code == 401
        response = client.get("/other")
        assert response.status_code == 200
        assert response.text == "None"
        assert "X-Content-Type-Options" not in response.headers


class TestFromConfig:
    def test_properties_bound(self) -> None:
        config = Config(
            {
                "flysec": {
                    "security": {
                        "login-page": "/sign-in",
                        "realm-name": "Acme",
                        "session": {"cookie-name": "SID", "ttl": 60},
                        "csrf": {"repository": "cookie", "cookie-name": "CSRF"},
                        "port-mappings": {"8000": 8443},
                    }
                }
            }
        )
        http = HttpSecurity.from_config(config)
        props = http.properties
        assert props.login_page == "/sign-in"
        assert props.realm_name == "Acme"
        assert props.session.cookie_name == "SID"
        assert props.session.ttl == 60
        assert props.csrf.repository == "cookie"
        assert props.csrf.cookie_name == "CSRF"
        assert props.csrf.header_name == "X-XSRF-TOKEN"
        assert props.port_mappings == {8000: 8443}

    def test_cookie_repository_selected_by_property(self) -> None:
        config = Config({"flysec": {"security": {"csrf": {"repository": "cookie"}}}})
        http = HttpSecurity.from_config(config)
        http.build()
        assert isinstance(http.get_shared_object(CsrfTokenRepository), CookieCsrfTokenRepository)

    def test_session_repository_by_default(self) -> None:
        http = HttpSecurity()
        http.build()
        assert isinstance(http.get_shared_object(CsrfTokenRepository), HttpSessionCsrfTokenRepository)
        assert http.is_enabled(SessionManagementConfigurer)

    def test_session_cookie_name_from_properties(self) -> None:
        config = Config({"flysec": {"security": {"session": {"cookie-name": "SID"}}}})
        client = _client(HttpSecurity.from_config(config).build())
        # the CSRF token is stored in the session, which creates it
        response = client.get("/")
        assert "SID" in response.cookies
