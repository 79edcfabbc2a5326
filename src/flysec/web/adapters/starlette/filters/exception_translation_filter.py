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
"""ExceptionTranslationFilter: turns security exceptions into HTTP responses."""

from __future__ import annotations

import logging
from typing import Any

from starlette.responses import Response

from flysec.container.ordering import HIGHEST_PRECEDENCE, order
from flysec.kernel.exceptions import AccessDeniedException, AuthenticationException
from flysec.security.context import current_security_context
from flysec.security.handlers import AccessDeniedHandler, AuthenticationEntryPoint
from flysec.security.savedrequest import RequestCache
from flysec.web.filters import OncePerRequestFilter
from flysec.web.ports.filter import CallNext

logger = logging.getLogger(__name__)


@order(HIGHEST_PRECEDENCE + 325)
class ExceptionTranslationFilter(OncePerRequestFilter):
    """Catches security exceptions raised further down the chain.

    Authentication failures, and access denials for callers who never
    authenticated, save the request and start authentication through the
    entry point.  Other denials go to the access-denied handler.
    """

    def __init__(
        self,
        entry_point: AuthenticationEntryPoint,
        access_denied_handler: AccessDeniedHandler,
        request_cache: RequestCache,
    ) -> None:
        self.entry_point = entry_point
        self.access_denied_handler = access_denied_handler
        self.request_cache = request_cache

    async def do_filter(self, request: Any, call_next: CallNext) -> Response:
        try:
            return await call_next(request)
        except AuthenticationException as exc:
            return await self._start_authentication(request, exc)
        except AccessDeniedException as exc:
            if not current_security_context(request).is_authenticated:
                cause = AuthenticationException(
                    "Full authentication is required to access this resource", code="UNAUTHENTICATED"
                )
                cause.__cause__ = exc
                return await self._start_authentication(request, cause)
            logger.debug("Access denied for %s: %s", current_security_context(request).user_id, exc)
            return await self.access_denied_handler.handle(request, exc)

    async def _start_authentication(self, request: Any, exc: AuthenticationException) -> Response:
        logger.debug("Starting authentication for %s %s: %s", request.method, request.url.path, exc)
        self.request_cache.save_request(request)
        return await self.entry_point.commence(request, exc)
