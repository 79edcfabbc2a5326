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

from typing import TYPE_CHECKING

from flysec.security.authentication import AuthenticationManager
from flysec.security.configurers.base import SecurityConfigurer
from flysec.security.configurers.exception_handling import ExceptionHandlingConfigurer
from flysec.security.context_repository import NullSecurityContextRepository, SecurityContextRepository
from flysec.security.handlers import AuthenticationEntryPoint, BasicAuthenticationEntryPoint
from flysec.security.matchers import (
    MediaTypeRequestMatcher,
    NegatedRequestMatcher,
    OrRequestMatcher,
    RequestMatcher,
    xhr_request,
)
from flysec.web.adapters.starlette.filters.http_basic_filter import HttpBasicFilter

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity

# XHR calls and clients that did not ask for a page
_api_request: RequestMatcher = OrRequestMatcher(
    xhr_request,
    NegatedRequestMatcher(MediaTypeRequestMatcher("text/html")),
)


class HttpBasicConfigurer(SecurityConfigurer):
    """HTTP Basic authentication.

    Stateless by default: the authenticated context is not stored in the
    session unless a ``security_context_repository`` says otherwise.
    """

    def __init__(self) -> None:
        super().__init__()
        self._realm_name: str | None = None
        self._entry_point: AuthenticationEntryPoint | None = None
        self._authentication_manager: AuthenticationManager | None = None
        self._repository: SecurityContextRepository | None = None

    def realm_name(self, realm_name: str) -> HttpBasicConfigurer:
        self._realm_name = realm_name
        return self

    def authentication_entry_point(self, entry_point: AuthenticationEntryPoint) -> HttpBasicConfigurer:
        self._entry_point = entry_point
        return self

    def authentication_manager(self, manager: AuthenticationManager) -> HttpBasicConfigurer:
        self._authentication_manager = manager
        return self

    def security_context_repository(self, repository: SecurityContextRepository) -> HttpBasicConfigurer:
        self._repository = repository
        return self

    def get_entry_point(self, http: HttpSecurity) -> AuthenticationEntryPoint:
        if self._entry_point is not None:
            return self._entry_point
        return BasicAuthenticationEntryPoint(self._realm_name or http.properties.realm_name)

    def init(self, http: HttpSecurity) -> None:
        exception_handling = http.get_configurer(ExceptionHandlingConfigurer)
        if exception_handling is not None:
            exception_handling.default_authentication_entry_point_for(self.get_entry_point(http), _api_request)

    def configure(self, http: HttpSecurity) -> None:
        http.add_filter(
            HttpBasicFilter(
                self._authentication_manager or http.get_authentication_manager(),
                self.get_entry_point(http),
                self._repository or NullSecurityContextRepository(),
            )
        )
