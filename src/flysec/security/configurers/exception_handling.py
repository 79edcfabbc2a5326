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
"""Exception handling: which entry point and access-denied handler answer."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flysec.security.configurers.base import SecurityConfigurer
from flysec.security.handlers import (
    AccessDeniedHandler,
    AccessDeniedPageHandler,
    AuthenticationEntryPoint,
    DelegatingAccessDeniedHandler,
    DelegatingAuthenticationEntryPoint,
    ProblemDetailAccessDeniedHandler,
    ProblemDetailAuthenticationEntryPoint,
)
from flysec.security.matchers import RequestMatcher
from flysec.security.savedrequest import NullRequestCache, RequestCache
from flysec.web.adapters.starlette.filters.exception_translation_filter import ExceptionTranslationFilter

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity


class ExceptionHandlingConfigurer(SecurityConfigurer):
    """Resolves the entry point and the access-denied handler.

    Without an explicit entry point, the defaults registered by the
    authentication configurers are used: a single one applies to every
    request, several are chosen by matcher with the first registered as
    the fallback, and with none a 401 problem detail is sent.
    """

    def __init__(self) -> None:
        super().__init__()
        self._entry_point: AuthenticationEntryPoint | None = None
        self._access_denied_handler: AccessDeniedHandler | None = None
        self._default_entry_points: list[tuple[RequestMatcher, AuthenticationEntryPoint]] = []
        self._default_denied_handlers: list[tuple[RequestMatcher, AccessDeniedHandler]] = []

    def authentication_entry_point(self, entry_point: AuthenticationEntryPoint) -> ExceptionHandlingConfigurer:
        self._entry_point = entry_point
        return self

    def access_denied_handler(self, handler: AccessDeniedHandler) -> ExceptionHandlingConfigurer:
        self._access_denied_handler = handler
        return self

    def access_denied_page(self, error_page: str) -> ExceptionHandlingConfigurer:
        """Redirect to *error_page* when access is denied."""
        self._access_denied_handler = AccessDeniedPageHandler(error_page)
        return self

    def default_authentication_entry_point_for(
        self, entry_point: AuthenticationEntryPoint, matcher: RequestMatcher
    ) -> ExceptionHandlingConfigurer:
        self._default_entry_points.append((matcher, entry_point))
        return self

    def default_access_denied_handler_for(
        self, handler: AccessDeniedHandler, matcher: RequestMatcher
    ) -> ExceptionHandlingConfigurer:
        self._default_denied_handlers.append((matcher, handler))
        return self

    def get_authentication_entry_point(self) -> AuthenticationEntryPoint:
        if self._entry_point is not None:
            return self._entry_point
        if not self._default_entry_points:
            return ProblemDetailAuthenticationEntryPoint()
        if len(self._default_entry_points) == 1:
            return self._default_entry_points[0][1]
        return DelegatingAuthenticationEntryPoint(self._default_entry_points, self._default_entry_points[0][1])

    def get_access_denied_handler(self) -> AccessDeniedHandler:
        if self._access_denied_handler is not None:
            return self._access_denied_handler
        if not self._default_denied_handlers:
            return ProblemDetailAccessDeniedHandler()
        return DelegatingAccessDeniedHandler(self._default_denied_handlers, ProblemDetailAccessDeniedHandler())

    def configure(self, http: HttpSecurity) -> None:
        request_cache: RequestCache = http.get_shared_object(RequestCache, NullRequestCache())
        http.add_filter(
            ExceptionTranslationFilter(
                self.get_authentication_entry_point(),
                self.get_access_denied_handler(),
                request_cache,
            )
        )
