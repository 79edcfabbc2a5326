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
"""Tests for CSRF protection and the token repositories."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from flysec.security.configurers.session_management import SessionManagementConfigurer
from flysec.security.csrf import (
    CookieCsrfTokenRepository,
    CsrfToken,
    CsrfTokenRepository,
    HttpSessionCsrfTokenRepository,
    generate_csrf_token,
    validate_csrf_token,
)
from flysec.security.http_security import HttpSecurity
from flysec.security.matchers import PathPatternRequestMatcher
from flysec.security.properties import CsrfProperties, SecurityProperties
from flysec.session.session import HttpSession


async def _echo(request: Request) -> JSONResponse:
    token = getattr(request.state, "csrf_token", None)
    body: dict[str, object] = {"csrf": token.token if token is not None else None}
    if request.headers.get("content-type", "").startswith("application/x-www-form-urlencoded"):
        body["form"] = dict(await request.form())
    return JSONResponse(body)


def _client(http: HttpSecurity) -> TestClient:
    chain = http.build()
    routes = [Route("/{path:path}", _echo, methods=["GET", "POST", "PUT", "DELETE"])]
    app = Starlette(routes=routes, middleware=chain.middleware())
    return TestClient(app)


class TestTokens:
    def test_generate(self) -> None:
        token = generate_csrf_token()
        assert len(token) == 43
        assert token != generate_csrf_token()

    def test_validate(self) -> None:
        assert validate_csrf_token("abc", "abc")
        assert not validate_csrf_token("abc", "abd")


class TestHttpSessionCsrfTokenRepository:
    def test_save_load_and_clear(self) -> None:
        repository = HttpSessionCsrfTokenRepository()
        session = HttpSession("s1", is_new=True)
        request = SimpleNamespace(state=SimpleNamespace(session=session))
        assert repository.load_token(request) is None

        token = repository.generate_token(request)
        repository.save_token(token, request, None)
        loaded = repository.load_token(request)
        assert loaded == CsrfToken(token.token, "X-CSRF-TOKEN", "_csrf")
        assert session.modified

        repository.save_token(None, request, None)
        assert repository.load_token(request) is None

    def test_without_session(self) -> None:
        repository = HttpSessionCsrfTokenRepository()
        request = SimpleNamespace(state=SimpleNamespace())
        assert repository.load_token(request) is None
        repository.save_token(repository.generate_token(request), request, None)


class TestCsrfFilter:
    def test_safe_methods_pass_and_expose_token(self) -> None:
        client = _client(HttpSecurity())
        response = client.get("/form")
        assert response.status_code == 200
        assert response.json()["csrf"]
        assert "FLYSEC_SESSION" in response.cookies

    def test_missing_token_rejected(self) -> None:
        response = _client(HttpSecurity()).post("/submit")
        assert response.status_code == 403
        assert response.json()["detail"] == "Missing CSRF token"

    def test_header_token_accepted(self) -> None:
        client = _client(HttpSecurity())
        token = client.get("/form").json()["csrf"]
        assert client.post("/submit", headers={"X-CSRF-TOKEN": token}).status_code == 200

    def test_wrong_token_rejected(self) -> None:
        client = _client(HttpSecurity())
        client.get("/form")
        response = client.put("/submit", headers={"X-CSRF-TOKEN": "forged"})
        assert response.status_code == 403
        assert response.json()["detail"] == "Invalid CSRF token"

    def test_form_field_accepted_and_body_replayed(self) -> None:
        client = _client(HttpSecurity())
        token = client.get("/form").json()["csrf"]
        response = client.post("/submit", data={"_csrf": token, "name": "widget"})
        assert response.status_code == 200
        assert response.json()["form"] == {"_csrf": token, "name": "widget"}

    def test_ignoring_request_matchers(self) -> None:
        http = HttpSecurity()
        http.csrf(lambda csrf: csrf.ignoring_request_matchers("/webhooks/**"))
        client = _client(http)
        assert client.post("/webhooks/github").status_code == 200
        assert client.post("/other").status_code == 403

    def test_require_csrf_protection_matcher(self) -> None:
        http = HttpSecurity()
        http.csrf(lambda csrf: csrf.require_csrf_protection_matcher(PathPatternRequestMatcher("/guarded/**", "POST")))
        client = _client(http)
        assert client.post("/open").status_code == 200
        assert client.post("/guarded/x").status_code == 403

    def test_disabled(self) -> None:
        http = HttpSecurity()
        http.csrf(lambda csrf: csrf.disable())
        client = _client(http)
        response = client.delete("/things/1")
        assert response.status_code == 200
        assert response.json()["csrf"] is None


class TestCookieCsrfTokenRepository:
    def _client(self) -> TestClient:
        properties = SecurityProperties(csrf=CsrfProperties(repository="cookie"))
        return _client(HttpSecurity(properties))

    def test_cookie_issued(self) -> None:
        client = self._client()
        response = client.get("/form")
        assert response.cookies["XSRF-TOKEN"] == response.json()["csrf"]
        # no session is needed for the token
        assert "FLYSEC_SESSION" not in response.cookies

    def test_double_submit(self) -> None:
        client = self._client()
        client.get("/form")
        token = client.cookies["XSRF-TOKEN"]
        assert client.post("/submit", headers={"X-XSRF-TOKEN": token}).status_code == 200
        assert client.post("/submit", headers={"X-XSRF-TOKEN": "nope"}).status_code == 403

    def test_explicit_repository(self) -> None:
        http = HttpSecurity()
        repository = CookieCsrfTokenRepository(cookie_name="CSRF", header_name="X-CSRF")
        http.csrf(lambda csrf: csrf.csrf_token_repository(repository))
        client = _client(http)
        client.get("/form")
        assert client.post("/submit", headers={"X-CSRF": client.cookies["CSRF"]}).status_code == 200

    @pytest.mark.parametrize("http_only", [True, False])
    def test_http_only_flag(self, http_only: bool) -> None:
        http = HttpSecurity()
        http.csrf(lambda csrf: csrf.csrf_token_repository(CookieCsrfTokenRepository(cookie_http_only=http_only)))
        set_cookie = _client(http).get("/form").headers["set-cookie"]
        assert ("httponly" in set_cookie.lower()) is http_only

    def test_stateless_chain_falls_back_to_cookie(self) -> None:
        http = HttpSecurity()
        http.session_management(lambda s: s.disable())
        client = _client(http)
        assert not http.is_enabled(SessionManagementConfigurer)
        assert isinstance(http.get_shared_object(CsrfTokenRepository), CookieCsrfTokenRepository)

        assert client.post("/submit").status_code == 403
        client.get("/form")
        token = client.cookies["XSRF-TOKEN"]
        assert client.post("/submit", headers={"X-XSRF-TOKEN": token}).status_code == 200
