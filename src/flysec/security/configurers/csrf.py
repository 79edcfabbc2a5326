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
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from flysec.security.configurers.base import SecurityConfigurer
from flysec.security.csrf import CookieCsrfTokenRepository, CsrfTokenRepository, HttpSessionCsrfTokenRepository
from flysec.security.handlers import AccessDeniedHandler
from flysec.security.matchers import RequestMatcher, to_matcher
from flysec.web.adapters.starlette.filters.csrf_filter import CsrfFilter

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity


class CsrfConfigurer(SecurityConfigurer):
    """CSRF protection for state-changing requests.

    The token repository defaults to the session-backed one, or to the
    double-submit cookie when ``flysec.security.csrf.repository`` is
    ``cookie`` or session management is disabled.
    """

    def __init__(self) -> None:
        super().__init__()
        self._repository: CsrfTokenRepository | None = None
        self._require_matcher: RequestMatcher | None = None
        self._ignoring: list[RequestMatcher] = []
        self._access_denied_handler: AccessDeniedHandler | None = None

    def csrf_token_repository(self, repository: CsrfTokenRepository) -> CsrfConfigurer:
        self._repository = repository
        return self

    def require_csrf_protection_matcher(self, matcher: RequestMatcher) -> CsrfConfigurer:
        self._require_matcher = matcher
        return self

    def ignoring_request_matchers(self, *matchers: Any) -> CsrfConfigurer:
        """Exempt requests; accepts patterns, regexes, callables or matchers."""
        self._ignoring.extend(to_matcher(m) for m in matchers)
        return self

    def access_denied_handler(self, handler: AccessDeniedHandler) -> CsrfConfigurer:
        self._access_denied_handler = handler
        return self

    def _default_repository(self, http: HttpSecurity) -> CsrfTokenRepository:
        props = http.properties.csrf
        # a stateless chain has nowhere to keep a session token
        if props.repository == "cookie" or not http.sessions_enabled:
            return CookieCsrfTokenRepository(
                cookie_name=props.cookie_name, header_name=props.header_name, parameter_name=props.parameter_name
            )
        return HttpSessionCsrfTokenRepository(parameter_name=props.parameter_name)

    def init(self, http: HttpSecurity) -> None:
        http.set_shared_object(CsrfTokenRepository, self._repository or self._default_repository(http))

    def configure(self, http: HttpSecurity) -> None:
        http.add_filter(
            CsrfFilter(
                http.get_shared_object(CsrfTokenRepository),
                require_csrf_protection_matcher=self._require_matcher,
                ignoring_request_matchers=self._ignoring,
                access_denied_handler=self._access_denied_handler,
            )
        )
