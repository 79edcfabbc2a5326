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
"""Tests for WebFilterChainMiddleware: ordering, short-circuit, conditional skip."""

from __future__ import annotations

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from flysec.container import HIGHEST_PRECEDENCE, LOWEST_PRECEDENCE, get_order, order, sort_by_order
from flysec.security.matchers import PathPatternRequestMatcher
from flysec.web.adapters.starlette.filter_chain import WebFilterChainMiddleware, read_form
from flysec.web.adapters.starlette.problem import problem_response
from flysec.web.filters import OncePerRequestFilter

# ---------------------------------------------------------------------------
# Test filters
# ---------------------------------------------------------------------------


@order(HIGHEST_PRECEDENCE + 10)
class HeaderFilter(OncePerRequestFilter):
    """Adds X-Filter-A to every response."""

    async def do_filter(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Filter-A"] = "applied"
        return response


@order(HIGHEST_PRECEDENCE + 20)
class TraceFilter(OncePerRequestFilter):
    """Records the filters that ran before it."""

    async def do_filter(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Filter-B"] = response.headers.get("X-Filter-A", "not yet")
        return response


@order(5)
class ApiOnlyFilter(OncePerRequestFilter):
    url_patterns = ["/api/**"]
    exclude_patterns = ["/api/public"]

    async def do_filter(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Api-Filter"] = "applied"
        return response


class ShortCircuitFilter(OncePerRequestFilter):
    """Answers 401 without calling the application."""

    async def do_filter(self, request, call_next):
        return problem_response(status=401, detail="Nope", path=request.url.path)


class FormPeekFilter(OncePerRequestFilter):
    async def do_filter(self, request, call_next):
        form = await read_form(request)
        response = await call_next(request)
        response.headers["X-Peeked"] = str(form.get("name"))
        return response


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _ok_handler(request: Request) -> PlainTextResponse:
    return PlainTextResponse("OK")


async def _echo_form(request: Request) -> JSONResponse:
    form = await request.form()
    return JSONResponse({"name": form.get("name")})


def _make_app(*filters, security_matcher=None) -> Starlette:
    return Starlette(
        routes=[
            Route("/test", _ok_handler),
            Route("/api/data", _ok_handler),
            Route("/api/public", _ok_handler),
            Route("/health", _ok_handler),
            Route("/echo", _echo_form, methods=["POST"]),
        ],
        middleware=[
            Middleware(WebFilterChainMiddleware, filters=list(filters), security_matcher=security_matcher)
        ],
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestFilterChainOrdering:
    def test_filters_applied_in_order(self):
        resp = TestClient(_make_app(HeaderFilter(), TraceFilter())).get("/test")
        assert resp.status_code == 200
        assert resp.headers["X-Filter-A"] == "applied"
        # TraceFilter is inner, so it sees the response before HeaderFilter
        assert resp.headers["X-Filter-B"] == "not yet"

    def test_order_decorator(self):
        assert get_order(HeaderFilter) < get_order(TraceFilter) < get_order(ApiOnlyFilter)
        assert get_order(ShortCircuitFilter()) == 0
        assert HIGHEST_PRECEDENCE < 0 < LOWEST_PRECEDENCE

    def test_sort_by_order_is_stable(self):
        api, short, header = ApiOnlyFilter(), ShortCircuitFilter(), HeaderFilter()
        peek = FormPeekFilter()
        assert sort_by_order([api, short, peek, header]) == [header, short, peek, api]


class TestFilterChainConditionalSkip:
    def test_url_pattern_filter_applies_to_matching_path(self):
        resp = TestClient(_make_app(ApiOnlyFilter())).get("/api/data")
        assert resp.headers.get("X-Api-Filter") == "applied"

    def test_url_pattern_filter_skipped_for_non_matching_path(self):
        resp = TestClient(_make_app(ApiOnlyFilter())).get("/health")
        assert "X-Api-Filter" not in resp.headers

    def test_excluded_path_skipped(self):
        resp = TestClient(_make_app(ApiOnlyFilter())).get("/api/public")
        assert "X-Api-Filter" not in resp.headers

    def test_security_matcher_bypasses_chain(self):
        app = _make_app(ShortCircuitFilter(), security_matcher=PathPatternRequestMatcher("/api/**"))
        client = TestClient(app)
        assert client.get("/api/data").status_code == 401
        assert client.get("/health").status_code == 200


class TestFilterChainShortCircuit:
    def test_short_circuit_returns_problem_detail(self):
        resp = TestClient(_make_app(ShortCircuitFilter())).get("/test")
        assert resp.status_code == 401
        assert resp.headers["content-type"] == "application/problem+json"
        assert resp.json() == {
            "type": "about:blank",
            "title": "Unauthorized",
            "status": 401,
            "detail": "Nope",
            "instance": "/test",
        }


class TestFilterChainBodyReplay:
    def test_form_read_by_filter_reaches_app(self):
        resp = TestClient(_make_app(FormPeekFilter())).post("/echo", data={"name": "alice"})
        assert resp.json() == {"name": "alice"}
        assert resp.headers["X-Peeked"] == "alice"


class TestFilterChainEmpty:
    def test_no_filters_passes_through(self):
        resp = TestClient(_make_app()).get("/test")
        assert resp.status_code == 200
        assert resp.text == "OK"
