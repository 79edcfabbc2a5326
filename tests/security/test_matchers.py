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
"""Tests for request matchers and path patterns."""

from __future__ import annotations

import re
from types import SimpleNamespace

import pytest

from flysec.security.matchers import (
    AndRequestMatcher,
    FunctionRequestMatcher,
    MediaTypeRequestMatcher,
    NegatedRequestMatcher,
    OrRequestMatcher,
    PathPatternRequestMatcher,
    RegexRequestMatcher,
    SecureRequestMatcher,
    any_request,
    compile_path_pattern,
    to_matcher,
    xhr_request,
)


def _request(
    path: str = "/",
    method: str = "GET",
    headers: dict[str, str] | None = None,
    query: str = "",
    scheme: str = "http",
    root_path: str = "",
) -> SimpleNamespace:
    return SimpleNamespace(
        method=method,
        url=SimpleNamespace(path=path, query=query, scheme=scheme),
        headers=headers or {},
        scope={"root_path": root_path},
    )


class TestPathPatterns:
    @pytest.mark.parametrize(
        ("pattern", "path", "expected"),
        [
            ("/admin/**", "/admin", True),
            ("/admin/**", "/admin/users/1", True),
            ("/admin/**", "/administrator", False),
            ("/api/*", "/api/users", True),
            ("/api/*", "/api/users/1", False),
            ("/file?.txt", "/file1.txt", True),
            ("/file?.txt", "/file12.txt", False),
            ("/path", "/path/", True),
            ("/path", "/path.html", True),
            ("/path", "/paths", False),
            ("/", "/", True),
            ("/**", "/anything/at/all", True),
        ],
    )
    def test_pattern_matching(self, pattern: str, path: str, expected: bool) -> None:
        assert (compile_path_pattern(pattern).fullmatch(path) is not None) is expected

    def test_variables_are_captured(self) -> None:
        matcher = PathPatternRequestMatcher("/user/{user_name}")
        result = matcher.matcher(_request("/user/alice"))
        assert result.matched
        assert result.variables == {"user_name": "alice"}

    def test_variable_with_regex(self) -> None:
        matcher = PathPatternRequestMatcher(r"/orders/{id:\d+}")
        assert matcher.matches(_request("/orders/42"))
        assert not matcher.matches(_request("/orders/abc"))

    def test_method_restriction(self) -> None:
        matcher = PathPatternRequestMatcher("/login", method="post")
        assert matcher.matches(_request("/login", "POST"))
        assert not matcher.matches(_request("/login", "GET"))

    def test_root_path_is_stripped(self) -> None:
        matcher = PathPatternRequestMatcher("/users")
        assert matcher.matches(_request("/app/users", root_path="/app"))

    def test_root_path_restriction(self) -> None:
        matcher = PathPatternRequestMatcher("/users", root_path="/app")
        assert matcher.matches(_request("/app/users", root_path="/app"))
        assert not matcher.matches(_request("/users"))

    def test_no_match_has_no_variables(self) -> None:
        result = PathPatternRequestMatcher("/user/{name}").matcher(_request("/other"))
        assert not result
        assert result.variables == {}


class TestOtherMatchers:
    def test_regex_includes_query(self) -> None:
        matcher = RegexRequestMatcher(r"/reports\?year=\d{4}")
        assert matcher.matches(_request("/reports", query="year=2024"))
        assert not matcher.matches(_request("/reports"))

    def test_regex_case_insensitive(self) -> None:
        assert RegexRequestMatcher("/admin.*", case_insensitive=True).matches(_request("/ADMIN/x"))

    def test_any_request(self) -> None:
        assert any_request.matches(_request("/whatever", "DELETE"))

    def test_function_matcher(self) -> None:
        matcher = FunctionRequestMatcher(lambda r: "X-Internal" in r.headers)
        assert matcher.matches(_request(headers={"X-Internal": "1"}))
        assert not matcher.matches(_request())

    def test_composites(self) -> None:
        get = FunctionRequestMatcher(lambda r: r.method == "GET")
        api = PathPatternRequestMatcher("/api/**")
        assert AndRequestMatcher(get, api).matches(_request("/api/x"))
        assert not AndRequestMatcher(get, api).matches(_request("/api/x", "POST"))
        assert OrRequestMatcher(get, api).matches(_request("/api/x", "POST"))
        assert NegatedRequestMatcher(api).matches(_request("/web"))

    def test_xhr(self) -> None:
        assert xhr_request.matches(_request(headers={"X-Requested-With": "XMLHttpRequest"}))
        assert not xhr_request.matches(_request())

    def test_media_type_ignores_wildcard(self) -> None:
        html = MediaTypeRequestMatcher("text/html")
        assert html.matches(_request(headers={"accept": "text/html,application/xhtml+xml;q=0.9"}))
        assert not html.matches(_request(headers={"accept": "*/*"}))
        assert MediaTypeRequestMatcher("text/html", ignore_wildcard=False).matches(_request(headers={"accept": "*/*"}))

    def test_secure(self) -> None:
        assert SecureRequestMatcher().matches(_request(scheme="https"))
        assert not SecureRequestMatcher().matches(_request())

    def test_matchers_are_callable(self) -> None:
        assert PathPatternRequestMatcher("/a")(_request("/a"))


class TestToMatcher:
    def test_string_becomes_path_pattern(self) -> None:
        matcher = to_matcher("/a/**", method="GET")
        assert isinstance(matcher, PathPatternRequestMatcher)
        assert matcher.method == "GET"

    def test_compiled_regex(self) -> None:
        assert isinstance(to_matcher(re.compile("/a.*")), RegexRequestMatcher)

    def test_callable(self) -> None:
        assert isinstance(to_matcher(lambda r: True), FunctionRequestMatcher)

    def test_matcher_is_returned_unchanged(self) -> None:
        assert to_matcher(any_request) is any_request

    def test_rejects_other_values(self) -> None:
        with pytest.raises(TypeError):
            to_matcher(42)
