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
"""End-to-end tests for HTTP basic, anonymous authentication and entry point selection."""

from __future__ import annotations

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from flysec.security.authentication import BcryptPasswordEncoder, in_memory_users
from flysec.security.context import current_security_context
from flysec.security.handlers import HttpStatusEntryPoint
from flysec.security.http_security import HttpSecurity
from flysec.security.properties import SecurityProperties

ENCODER = BcryptPasswordEncoder(rounds=4)
USERS = in_memory_users(ENCODER, [("alice", "password", ["USER"]), ("root", "toor", ["ADMIN"])])


async def _whoami(request: Request) -> PlainTextResponse:
    return PlainTextResponse(str(current_security_context(request).user_id))


def _http(properties: SecurityProperties | None = None) -> HttpSecurity:
    http = HttpSecurity(properties)
    http.user_details_service(USERS)
    http.authorize_requests(
        lambda auth: auth.request_matchers("/public/**")
        .permit_all()
        .request_matchers("/signup")
        .anonymous()
        .request_matchers("/guest/**")
        .has_role("GUEST")
        .request_matchers("/admin/**")
        .has_role("ADMIN")
        .request_matchers("/api/**")
        .authenticated()
    )
    return http


def _client(http: HttpSecurity) -> TestClient:
    chain = http.build()
    app = Starlette(routes=[Route("/{path:path}", _whoami, methods=["GET", "POST"])], middleware=chain.middleware())
    return TestClient(app)


class TestHttpBasic:
    def test_challenge_when_unauthenticated(self) -> None:
        http = _http()
        http.http_basic()
        response = _client(http).get("/api/orders")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == 'Basic realm="Realm"'
        assert response.headers["content-type"] == "application/problem+json"
        assert response.json()["status"] == 401

    def test_valid_credentials(self) -> None:
        http = _http()
        http.http_basic()
        response = _client(http).get("/api/orders", auth=("alice", "password"))
        assert response.status_code == 200
        assert response.text == "alice"

    def test_wrong_password(self) -> None:
        http = _http()
        http.http_basic()
        response = _client(http).get("/api/orders", auth=("alice", "wrong"))
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == 'Basic realm="Realm"'

    def test_malformed_header(self) -> None:
        http = _http()
        http.http_basic()
        response = _client(http).get("/api/orders", headers={"Authorization": "Basic !!!"})
        assert response.status_code == 401

    def test_other_scheme_is_ignored(self) -> None:
        http = _http()
        http.http_basic()
        response = _client(http).get("/public/info", headers={"Authorization": "Digest abc"})
        assert response.status_code == 200
        assert response.text == "anonymousUser"

    def test_missing_role(self) -> None:
        http = _http()
        http.http_basic()
        client = _client(http)
        assert client.get("/admin/users", auth=("alice", "password")).status_code == 403
        assert client.get("/admin/users", auth=("root", "toor")).status_code == 200

    def test_unmatched_request_denied(self) -> None:
        http = _http()
        http.http_basic()
        client = _client(http)
        assert client.get("/elsewhere", auth=("alice", "password")).status_code == 403
        assert client.get("/elsewhere").status_code == 401

    def test_stateless(self) -> None:
        http = _http()
        http.http_basic()
        client = _client(http)
        assert client.get("/api/orders", auth=("alice", "password")).status_code == 200
        assert client.get("/api/orders").status_code == 401

    def test_realm_name(self) -> None:
        http = _http()
        http.http_basic(lambda basic: basic.realm_name("Acme"))
        response = _client(http).get("/api/orders")
        assert response.headers["www-authenticate"] == 'Basic realm="Acme"'

    def test_realm_name_from_properties(self) -> None:
        http = _http(SecurityProperties(realm_name="Props"))
        http.http_basic()
        response = _client(http).get("/api/orders")
        assert response.headers["www-authenticate"] == 'Basic realm="Props"'


class TestEntryPointSelection:
    def _client(self) -> TestClient:
        http = _http()
        http.form_login()
        http.http_basic()
        return _client(http)

    def test_browser_goes_to_login_page(self) -> None:
        response = self._client().get("/api/orders", headers={"Accept": "text/html"}, follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/login"

    def test_api_client_gets_basic_challenge(self) -> None:
        response = self._client().get("/api/orders", headers={"Accept": "application/json"})
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == 'Basic realm="Realm"'

    def test_xhr_gets_basic_challenge(self) -> None:
        response = self._client().get(
            "/api/orders",
            headers={"Accept": "text/html", "X-Requested-With": "XMLHttpRequest"},
            follow_redirects=False,
        )
        assert response.status_code == 401

    def test_explicit_entry_point_wins(self) -> None:
        http = _http()
        http.http_basic()
        http.exception_handling(lambda eh: eh.authentication_entry_point(HttpStatusEntryPoint(418)))
        assert _client(http).get("/api/orders").status_code == 418

    def test_no_authentication_mechanism(self) -> None:
        response = _client(_http()).get("/api/orders")
        assert response.status_code == 401
        assert response.json()["detail"] == "Full authentication is required to access this resource"


class TestAnonymous:
    def test_anonymous_principal(self) -> None:
        response = _client(_http()).get("/public/info")
        assert response.text == "anonymousUser"

    def test_anonymous_only_rule(self) -> None:
        http = _http()
        http.http_basic()
        client = _client(http)
        assert client.get("/signup").status_code == 200
        assert client.get("/signup", auth=("alice", "password")).status_code == 403

    def test_custom_principal_and_authorities(self) -> None:
        http = _http()
        http.anonymous(lambda anon: anon.principal("guest").authorities("ROLE_GUEST"))
        client = _client(http)
        assert client.get("/public/info").text == "guest"
        assert client.get("/guest/area").status_code == 200

    def test_disabled(self) -> None:
        http = _http()
        http.anonymous(lambda anon: anon.disable())
        client = _client(http)
        assert client.get("/public/info").text == "None"
        assert client.get("/api/orders").status_code == 401
