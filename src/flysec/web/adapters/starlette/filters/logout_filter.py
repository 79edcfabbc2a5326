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
"""LogoutFilter: ends the authenticated session on the logout URL."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from starlette.responses import Response

from flysec.container.ordering import HIGHEST_PRECEDENCE, order
from flysec.security.context import current_security_context
from flysec.security.handlers import LogoutHandler, LogoutSuccessHandler
from flysec.security.matchers import RequestMatcher
from flysec.web.filters import OncePerRequestFilter
from flysec.web.ports.filter import CallNext

logger = logging.getLogger(__name__)


@order(HIGHEST_PRECEDENCE + 210)
class LogoutFilter(OncePerRequestFilter):
    """Runs the logout handlers when *logout_matcher* accepts a request.

    The success response is produced first and every handler then gets a
    chance to modify it (clearing cookies, dropping the CSRF token).
    """

    def __init__(
        self,
        logout_matcher: RequestMatcher,
        success_handler: LogoutSuccessHandler,
        handlers: Sequence[LogoutHandler] = (),
    ) -> None:
        self.logout_matcher = logout_matcher
        self.success_handler = success_handler
        self.handlers = list(handlers)

    def should_not_filter(self, request: Any) -> bool:
        return not self.logout_matcher.matches(request)

    async def do_filter(self, request: Any, call_next: CallNext) -> Response:
        context = current_security_context(request)
        logger.debug("Logging out %s", context.user_id)
        response = await self.success_handler.on_logout_success(request, context)
        for handler in self.handlers:
            handler.logout(request, response, context)
        return response
