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
"""SecurityContextFilter: restores the security context stored by an earlier request."""

from __future__ import annotations

from typing import Any

from flysec.container.ordering import HIGHEST_PRECEDENCE, order
from flysec.security.context import SecurityContext
from flysec.security.context_repository import SecurityContextRepository
from flysec.web.filters import OncePerRequestFilter
from flysec.web.ports.filter import CallNext


@order(HIGHEST_PRECEDENCE + 175)
class SecurityContextFilter(OncePerRequestFilter):
    def __init__(self, repository: SecurityContextRepository) -> None:
        self.repository = repository

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        request.state.security_context = self.repository.load_context(request) or SecurityContext.empty()
        return await call_next(request)
