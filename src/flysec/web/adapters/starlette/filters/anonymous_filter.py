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
"""AnonymousAuthenticationFilter: gives unauthenticated callers the anonymous principal."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any

from flysec.container.ordering import HIGHEST_PRECEDENCE, order
from flysec.security.context import (
    ANONYMOUS_AUTHORITIES,
    ANONYMOUS_PRINCIPAL,
    SecurityContext,
    current_security_context,
)
from flysec.web.filters import OncePerRequestFilter
from flysec.web.ports.filter import CallNext


@order(HIGHEST_PRECEDENCE + 300)
class AnonymousAuthenticationFilter(OncePerRequestFilter):
    """Installs an anonymous context when no earlier filter authenticated the request.

    Args:
        key: Identifies contexts created by this filter; random by default.
        principal: The anonymous principal name.
        authorities: Authorities granted to the anonymous principal.
    """

    def __init__(
        self,
        key: str | None = None,
        principal: str = ANONYMOUS_PRINCIPAL,
        authorities: Sequence[str] = ANONYMOUS_AUTHORITIES,
    ) -> None:
        self.key = key or uuid.uuid4().hex
        self.principal = principal
        self.authorities = tuple(authorities)

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        if current_security_context(request).user_id is None:
            request.state.security_context = SecurityContext.anonymous_user(self.principal, self.authorities, self.key)
        return await call_next(request)
