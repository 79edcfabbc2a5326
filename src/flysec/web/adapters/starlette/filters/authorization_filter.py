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
"""AuthorizationFilter: enforces the URL authorization rules.

Runs last in the chain, after every authentication filter.  A denied
request raises; :class:`ExceptionTranslationFilter` turns the exception
into the entry point or access-denied response.
"""

from __future__ import annotations

from typing import Any

from flysec.container.ordering import HIGHEST_PRECEDENCE, order
from flysec.kernel.exceptions import AccessDeniedException, AuthenticationException
from flysec.security.access import AuthorizationManager
from flysec.security.context import current_security_context
from flysec.web.filters import OncePerRequestFilter
from flysec.web.ports.filter import CallNext


@order(HIGHEST_PRECEDENCE + 350)
class AuthorizationFilter(OncePerRequestFilter):
    def __init__(self, manager: AuthorizationManager) -> None:
        self.manager = manager

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        decision = self.manager.check(request, current_security_context(request))
        if decision.granted:
            return await call_next(request)
        if decision.status == 401:
            raise AuthenticationException(
                "Full authentication is required to access this resource",
                code="UNAUTHENTICATED",
                context={"reason": decision.reason},
            )
        raise AccessDeniedException(decision.reason or "Access is denied", code="ACCESS_DENIED")
