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
"""CsrfFilter: rejects state-changing requests without a valid CSRF token.

The token is exposed to the application as ``request.state.csrf_token``
(a :class:`~flysec.security.csrf.CsrfToken`) so pages can render it into
forms.  The submitted value is read from the token's header or, for form
posts, from its form field.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from starlette.responses import Response

from flysec.container.ordering import HIGHEST_PRECEDENCE, order
from flysec.kernel.exceptions import CsrfException
from flysec.security.csrf import CsrfTokenRepository, default_csrf_matcher, validate_csrf_token
from flysec.security.handlers import AccessDeniedHandler, ProblemDetailAccessDeniedHandler
from flysec.security.matchers import RequestMatcher
from flysec.web.adapters.starlette.filter_chain import read_form
from flysec.web.filters import OncePerRequestFilter
from flysec.web.ports.filter import CallNext

logger = logging.getLogger(__name__)

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


@order(HIGHEST_PRECEDENCE + 200)
class CsrfFilter(OncePerRequestFilter):
    """Synchronizer-token CSRF filter.

    Args:
        repository: Where tokens are loaded from and saved to.
        require_csrf_protection_matcher: Which requests need a token
            (state-changing methods by default).
        ignoring_request_matchers: Requests exempt from the check.
        access_denied_handler: Produces the rejection response (403).
    """

    def __init__(
        self,
        repository: CsrfTokenRepository,
        require_csrf_protection_matcher: RequestMatcher | None = None,
        ignoring_request_matchers: Sequence[RequestMatcher] = (),
        access_denied_handler: AccessDeniedHandler | None = None,
    ) -> None:
        self.repository = repository
        self.require_csrf_protection_matcher = require_csrf_protection_matcher or default_csrf_matcher
        self.ignoring_request_matchers = list(ignoring_request_matchers)
        self.access_denied_handler = access_denied_handler or ProblemDetailAccessDeniedHandler()

    def _requires_protection(self, request: Any) -> bool:
        if not self.require_csrf_protection_matcher.matches(request):
            return False
        return not any(m.matches(request) for m in self.ignoring_request_matchers)

    async def do_filter(self, request: Any, call_next: CallNext) -> Response:
        token = self.repository.load_token(request)
        missing = token is None
        if token is None:
            token = self.repository.generate_token(request)
        request.state.csrf_token = token

        if self._requires_protection(request):
            actual = request.headers.get(token.header_name)
            if actual is None and request.headers.get("content-type", "").startswith(_FORM_TYPES):
                form = await read_form(request)
                value = form.get(token.parameter_name)
                actual = value if isinstance(value, str) else None

            if missing or actual is None or not validate_csrf_token(token.token, actual):
                detail = "Missing CSRF token" if missing or actual is None else "Invalid CSRF token"
                logger.debug("%s for %s %s", detail, request.method, request.url.path)
                return await self.access_denied_handler.handle(request, CsrfException(detail, code="CSRF"))

        response: Response = await call_next(request)
        # a logout handler may have cleared the token meanwhile
        if missing and getattr(request.state, "csrf_token", None) is token:
            self.repository.save_token(token, request, response)
        return response
