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

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from flysec.security.configurers.base import SecurityConfigurer
from flysec.security.matchers import FunctionRequestMatcher, OrRequestMatcher, RequestMatcher
from flysec.security.port_mapper import PortMapper
from flysec.web.adapters.starlette.filters.https_redirect_filter import HttpsRedirectFilter

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity


class HttpsRedirectConfigurer(SecurityConfigurer):
    """Redirects insecure requests to HTTPS.

    ``https_redirect_when`` takes matchers or a single predicate function;
    each call replaces the previous one.
    """

    def __init__(self) -> None:
        super().__init__()
        self._port_mapper: PortMapper | None = None
        self._matcher: RequestMatcher | None = None

    def port_mapper(self, port_mapper: PortMapper) -> HttpsRedirectConfigurer:
        self._port_mapper = port_mapper
        return self

    def https_redirect_when(self, *matchers: RequestMatcher | Callable[[Any], bool]) -> HttpsRedirectConfigurer:
        if not matchers:
            raise ValueError("At least one matcher is required")
        if len(matchers) == 1 and not isinstance(matchers[0], RequestMatcher):
            self._matcher = FunctionRequestMatcher(matchers[0])
        else:
            self._matcher = OrRequestMatcher(*matchers)  # type: ignore[arg-type]
        return self

    def configure(self, http: HttpSecurity) -> None:
        port_mapper = self._port_mapper or PortMapper(http.properties.port_mappings)
        http.add_filter(HttpsRedirectFilter(port_mapper, self._matcher))
