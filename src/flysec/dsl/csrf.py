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

from typing import Any

from flysec.dsl.base import SecurityDsl
from flysec.security.configurers.csrf import CsrfConfigurer
from flysec.security.csrf import CsrfTokenRepository
from flysec.security.handlers import AccessDeniedHandler
from flysec.security.matchers import RequestMatcher


class CsrfDsl(SecurityDsl[CsrfConfigurer]):
    """CSRF protection settings.

    Attributes:
        access_denied_handler: Answers requests with a missing or wrong token.
        csrf_token_repository: Where tokens are kept (session or cookie).
        require_csrf_protection_matcher: Which requests need a token.
    """

    def __init__(self) -> None:
        super().__init__()
        self.access_denied_handler: AccessDeniedHandler | None = None
        self.csrf_token_repository: CsrfTokenRepository | None = None
        self.require_csrf_protection_matcher: RequestMatcher | None = None
        self._ignoring_request_matchers: list[Any] = []

    def ignoring_request_matchers(self, *matchers: Any) -> None:
        """Exempt requests from the check; patterns, regexes, predicates or matchers."""
        self._ignoring_request_matchers.extend(matchers)

    def apply(self, target: CsrfConfigurer) -> None:
        self._forward(
            target,
            access_denied_handler=self.access_denied_handler,
            csrf_token_repository=self.csrf_token_repository,
            require_csrf_protection_matcher=self.require_csrf_protection_matcher,
        )
        if self._ignoring_request_matchers:
            target.ignoring_request_matchers(*self._ignoring_request_matchers)
