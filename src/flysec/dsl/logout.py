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
from flysec.security.configurers.logout import LogoutConfigurer
from flysec.security.handlers import LogoutHandler, LogoutSuccessHandler
from flysec.security.matchers import RequestMatcher


class LogoutDsl(SecurityDsl[LogoutConfigurer]):
    """Logout settings.

    Attributes:
        logout_url: The URL that logs out (``POST`` only while CSRF is on).
        logout_success_url: Redirect target after logout.
        requires_logout: Matcher that replaces ``logout_url``.
        logout_success_handler: Produces the response after logout.
        clear_authentication: Drop the security context.
        invalidate_http_session: Invalidate the whole session.
        permit_all: Grant everyone access to the logout URLs.
    """

    def __init__(self) -> None:
        super().__init__()
        self.logout_url: str | None = None
        self.logout_success_url: str | None = None
        self.requires_logout: RequestMatcher | None = None
        self.logout_success_handler: LogoutSuccessHandler | None = None
        self.clear_authentication: bool | None = None
        self.invalidate_http_session: bool | None = None
        self.permit_all: bool | None = None
        self._logout_handlers: list[LogoutHandler] = []
        self._delete_cookies: list[str] = []

    def add_logout_handler(self, handler: LogoutHandler) -> None:
        self._logout_handlers.append(handler)

    def delete_cookies(self, *cookie_names: str) -> None:
        self._delete_cookies.extend(cookie_names)

    def apply(self, target: LogoutConfigurer) -> None:
        self._forward(
            target,
            logout_url=self.logout_url,
            logout_success_url=self.logout_success_url,
            logout_request_matcher=self.requires_logout,
            logout_success_handler=self.logout_success_handler,
            clear_authentication=self.clear_authentication,
            invalidate_http_session=self.invalidate_http_session,
            permit_all=self.permit_all,
        )
        for handler in self._logout_handlers:
            target.add_logout_handler(handler)
        if self._delete_cookies:
            target.delete_cookies(*self._delete_cookies)
