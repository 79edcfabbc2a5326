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
"""Tests for the security response header writers."""

from __future__ import annotations

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from flysec.security.configurers.headers import HeadersConfigurer, HpkpConfig, HstsConfig
from flysec.security.http_security import HttpSecurity
from flysec.security.properties import HeadersProperties, SecurityProperties
from flysec.web.security_headers import (
    ContentSecurityPolicyHeaderWriter,
    HpkpHeaderWriter,
    HstsHeaderWriter,
    ReferrerPolicy,
    XXssProtectionHeaderWriter,
)


async def _plain(request: Request) -> PlainTextResponse:
    return PlainTextResponse("ok")


async def _cached(request: Request) -> PlainTextResponse:
    return PlainTextResponse("ok", headers={"Cache-Control": "max-age=60", "X-Frame-Options": "SAMEORIGIN"})


def _client(http: HttpSecurity, secure: bool = False) -> TestClient:
    chain = http.build()
    app = Starlette(routes=[Route("/cached", _cached), Route("/", _plain)], middleware=chain.middleware())
    return TestClient(app, base_url="https://testserver" if secure else "http://testserver")


def _headers(customizer, secure: bool = False):  # noqa: ANN001, ANN202
    http = HttpSecurity()
    http.headers(customizer)
    return _client(http, secure).get("/").headers


class TestDefaultHeaders:
    def test_defaults_over_http(self) -> None:
        headers = _client(HttpSecurity()).get("/").headers
        assert headers["X-Content-Type-Options"] == "nosniff"
        assert headers["X-XSS-Protection"] == "1; mode=block"
        assert headers["Cache-Control"] == "no-cache, no-store, max-age=0, must-revalidate"
        assert headers["Pragma"] == "no-cache"
        assert headers["Expires"] == "0"
        assert headers["X-Frame-Options"] == "DENY"
        assert "Strict-Transport-Security" not in headers
        assert "Content-Security-Policy" not in headers
        assert "Referrer-Policy" not in headers

    def test_hsts_only_over_https(self) -> None:
        headers = _client(HttpSecurity(), secure=True).get("/").headers
        assert headers["Strict-Transport-Security"] == "max-age=31536000 ; includeSubDomains"

    def test_application_headers_are_kept(self) -> None:
        headers = _client(HttpSecurity()).get("/cached").headers
        assert headers["Cache-Control"] == "max-age=60"
        assert "Pragma" not in headers
        assert headers["X-Frame-Options"] == "SAMEORIGIN"

    def test_hsts_from_properties(self) -> None:
        properties = SecurityProperties(headers=HeadersProperties(hsts_max_age=60, hsts_include_subdomains=False))
        headers = _client(HttpSecurity(properties), secure=True).get("/").headers
        assert headers["Strict-Transport-Security"] == "max-age=60"

    def test_headers_disabled(self) -> None:
        headers = _headers(lambda h: h.disable())
        assert "X-Content-Type-Options" not in headers
        assert "X-Frame-Options" not in headers


class TestHeaderCustomization:
    def test_defaults_disabled(self) -> None:
        headers = _headers(lambda h: h.defaults_disabled(), secure=True)
        defaults = (
            "X-Content-Type-Options",
            "X-XSS-Protection",
            "Pragma",
            "Strict-Transport-Security",
            "X-Frame-Options",
        )
        for name in defaults:
            assert name not in headers

    def test_defaults_disabled_then_reenable_one(self) -> None:
        headers = _headers(lambda h: h.defaults_disabled().content_type_options())
        assert headers["X-Content-Type-Options"] == "nosniff"
        assert "X-Frame-Options" not in headers

    def test_disable_single_writer(self) -> None:
        headers = _headers(lambda h: h.cache_control(lambda cc: cc.disable()))
        assert "Pragma" not in headers
        assert headers["X-Content-Type-Options"] == "nosniff"

    def test_frame_options_same_origin(self) -> None:
        assert _headers(lambda h: h.frame_options(lambda f: f.same_origin()))["X-Frame-Options"] == "SAMEORIGIN"

    def test_xss_protection_variants(self) -> None:
        def _no_block(xss) -> None:  # noqa: ANN001
            xss.block = False

        def _off(xss) -> None:  # noqa: ANN001
            xss.xss_protection_enabled = False

        assert _headers(lambda h: h.xss_protection(_no_block))["X-XSS-Protection"] == "1"
        assert _headers(lambda h: h.xss_protection(_off))["X-XSS-Protection"] == "0"

    def test_hsts_customized(self) -> None:
        def _hsts(hsts: HstsConfig) -> None:
            hsts.max_age_in_seconds = 100
            hsts.include_subdomains = False
            hsts.preload = True

        headers = _headers(lambda h: h.http_strict_transport_security(_hsts), secure=True)
        assert headers["Strict-Transport-Security"] == "max-age=100 ; preload"

    def test_hpkp_needs_pins_and_https(self) -> None:
        def _pins(hpkp: HpkpConfig) -> None:
            hpkp.add_sha256_pins("d6qzRu9zOECb90Uez27xWltNsj0e1Md7GkYYkVoZWmM=")

        expected = 'max-age=5184000 ; pin-sha256="d6qzRu9zOECb90Uez27xWltNsj0e1Md7GkYYkVoZWmM="'
        secure = _headers(lambda h: h.http_public_key_pinning(_pins), secure=True)
        assert secure["Public-Key-Pins-Report-Only"] == expected
        assert "Public-Key-Pins-Report-Only" not in _headers(lambda h: h.http_public_key_pinning(_pins))
        assert "Public-Key-Pins-Report-Only" not in _headers(lambda h: h.http_public_key_pinning(), secure=True)

    def test_content_security_policy(self) -> None:
        assert _headers(lambda h: h.content_security_policy())["Content-Security-Policy"] == "default-src 'self'"

        def _report_only(csp) -> None:  # noqa: ANN001
            csp.policy_directives = "script-src 'self'"
            csp.report_only = True

        headers = _headers(lambda h: h.content_security_policy(_report_only))
        assert headers["Content-Security-Policy-Report-Only"] == "script-src 'self'"
        assert "Content-Security-Policy" not in headers

    def test_referrer_policy(self) -> None:
        assert _headers(lambda h: h.referrer_policy())["Referrer-Policy"] == "no-referrer"

        def _same_origin(referrer) -> None:  # noqa: ANN001
            referrer.policy = ReferrerPolicy.SAME_ORIGIN

        assert _headers(lambda h: h.referrer_policy(_same_origin))["Referrer-Policy"] == "same-origin"

    def test_feature_and_permissions_policy(self) -> None:
        headers = _headers(lambda h: h.feature_policy("geolocation 'none'").permissions_policy("camera=()"))
        assert headers["Feature-Policy"] == "geolocation 'none'"
        assert headers["Permissions-Policy"] == "camera=()"

    def test_writer_order(self) -> None:
        http = HttpSecurity()
        configurer = HeadersConfigurer()
        configurer.content_security_policy()
        names = [type(w).__name__ for w in configurer.writers(http)]
        assert names == [
            "ContentTypeOptionsHeaderWriter",
            "XXssProtectionHeaderWriter",
            "CacheControlHeadersWriter",
            "HstsHeaderWriter",
            "XFrameOptionsHeaderWriter",
            "ContentSecurityPolicyHeaderWriter",
        ]


class TestWriters:
    def test_hsts_rejects_negative_max_age(self) -> None:
        with pytest.raises(ValueError):
            HstsHeaderWriter(max_age_in_seconds=-1)

    def test_hpkp_value_with_options(self) -> None:
        writer = HpkpHeaderWriter(
            {"abc=": "sha256"}, max_age_in_seconds=10, include_subdomains=True, report_only=False, report_uri="/r"
        )
        assert writer.header_name == "Public-Key-Pins"
        assert writer.value == 'max-age=10 ; pin-sha256="abc=" ; includeSubDomains ; report-uri="/r"'

    def test_csp_rejects_empty_policy(self) -> None:
        with pytest.raises(ValueError):
            ContentSecurityPolicyHeaderWriter("  ")

    def test_xss_values(self) -> None:
        assert XXssProtectionHeaderWriter().value == "1; mode=block"
        assert XXssProtectionHeaderWriter(block=False).value == "1"
        assert XXssProtectionHeaderWriter(enabled=False).value == "0"
