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
"""Tests for redirecting insecure requests to HTTPS."""

from __future__ import annotations

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from flysec.kernel.exceptions import InvalidConfigurationException
from flysec.security.http_security import HttpSecurity
from flysec.security.matchers import PathPatternRequestMatcher
from flysec.security.port_mapper import PortMapper
from flysec.security.properties import SecurityProperties


async def _plain(request: Request) -> PlainTextResponse:
    return PlainTextResponse(request.url.scheme)


def _client(http: HttpSecurity, base_url: str = "http://testserver") -> TestClient:
    chain = http.build()
    app = Starlette(routes=[Route("/{path:path}", _plain)], middleware=chain.middleware())
    return TestClient(app, base_url=base_url)


class TestHttpsRedirect:
    def test_insecure_request_redirected(self) -> None:
        http = HttpSecurity()
        http.https_redirect()
        response = _client(http).get("/orders?page=2", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://testserver/orders?page=2"

    def test_secure_request_passes(self) -> None:
        http = HttpSecurity()
        http.https_redirect()
        response = _client(http, "https://testserver").get("/orders")
        assert response.status_code == 200
        assert response.text == "https"

    def test_port_mapped(self) -> None:
        http = HttpSecurity()
        http.https_redirect()
        response = _client(http, "http://testserver:8080").get("/", follow_redirects=False)
        assert response.headers["location"] == "https://testserver:8443/"

    def test_port_mapping_from_properties(self) -> None:
        http = HttpSecurity(SecurityProperties(port_mappings={9000: 9443}))
        http.https_redirect()
        response = _client(http, "http://testserver:9000").get("/", follow_redirects=False)
        assert response.headers["location"] == "https://testserver:9443/"

    def test_custom_port_mapper(self) -> None:
        http = HttpSecurity()
        http.https_redirect(lambda redirect: redirect.port_mapper(PortMapper({7000: 443})))
        response = _client(http, "http://testserver:7000").get("/x", follow_redirects=False)
        assert response.headers["location"] == "https://testserver/x"

    def test_unmapped_port(self) -> None:
        http = HttpSecurity()
        http.https_redirect()
        client = _client(http, "http://testserver:9999")
        with pytest.raises(InvalidConfigurationException) as exc_info:
            client.get("/")
        assert exc_info.value.code == "NO_PORT_MAPPING"

    def test_only_matching_requests(self) -> None:
        http = HttpSecurity()
        http.https_redirect(lambda redirect: redirect.https_redirect_when(PathPatternRequestMatcher("/secure/**")))
        client = _client(http)
        assert client.get("/secure/area", follow_redirects=False).status_code == 302
        assert client.get("/open", follow_redirects=False).status_code == 200

    def test_predicate(self) -> None:
        http = HttpSecurity()
        http.https_redirect(
            lambda redirect: redirect.https_redirect_when(lambda r: "x-forwarded-proto" not in r.headers)
        )
        client = _client(http)
        assert client.get("/", follow_redirects=False).status_code == 302
        assert client.get("/", headers={"X-Forwarded-Proto": "https"}, follow_redirects=False).status_code == 200

    def test_redirect_when_requires_a_matcher(self) -> None:
        with pytest.raises(ValueError):
            HttpSecurity().https_redirect(lambda redirect: redirect.https_redirect_when())


class TestPortMapper:
    def test_defaults(self) -> None:
        mapper = PortMapper()
        assert mapper.https_port(80) == 443
        assert mapper.https_port(8080) == 8443
        assert mapper.https_port(1234) is None

    def test_reverse_lookup(self) -> None:
        mapper = PortMapper({8000: 8443})
        assert mapper.http_port(8443) == 8000
        assert mapper.http_port(443) is None
        assert mapper.mappings == {8000: 8443}
