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

from flysec.dsl.base import SecurityDsl
from flysec.security.configurers.exception_handling import ExceptionHandlingConfigurer
from flysec.security.handlers import AccessDeniedHandler, AuthenticationEntryPoint
from flysec.security.matchers import RequestMatcher


class ExceptionHandlingDsl(SecurityDsl[ExceptionHandlingConfigurer]):
    """How authentication and access-denied failures are answered.

    ``access_denied_page`` wins over ``access_denied_handler`` when both
    are set.
    """

    def __init__(self) -> None:
        super().__init__()
        self.authentication_entry_point: AuthenticationEntryPoint | None = None
        self.access_denied_handler: AccessDeniedHandler | None = None
        self.access_denied_page: str | None = None
        self._default_entry_points: list[tuple[AuthenticationEntryPoint, RequestMatcher]] = []
        self._default_denied_handlers: list[tuple[AccessDeniedHandler, RequestMatcher]] = []

    def default_authentication_entry_point_for(
        self, entry_point: AuthenticationEntryPoint, matcher: RequestMatcher
    ) -> None:
        self._default_entry_points.append((entry_point, matcher))

    def default_access_denied_handler_for(self, handler: AccessDeniedHandler, matcher: RequestMatcher) -> None:
        self._default_denied_handlers.append((handler, matcher))

    def apply(self, target: ExceptionHandlingConfigurer) -> None:
        self._forward(
            target,
            authentication_entry_point=self.authentication_entry_point,
            access_denied_handler=self.access_denied_handler,
            access_denied_page=self.access_denied_page,
        )
        for entry_point, matcher in self._default_entry_points:
            target.default_authentication_entry_point_for(entry_point, matcher)
        for handler, matcher in self._default_denied_handlers:
            target.default_access_denied_handler_for(handler, matcher)
