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
"""Filter ports: the request/response filter contract used by the security chain."""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any, Protocol, runtime_checkable

# Calls the next filter, or the application once the chain is exhausted.
CallNext = Callable[..., Coroutine[Any, Any, Any]]


@runtime_checkable
class WebFilter(Protocol):
    """A single step of the security filter chain.

    Filters are sorted by ``@order`` and run inside one
    ``WebFilterChainMiddleware``.  A filter either answers the request
    itself (redirect, challenge, rejection) or delegates to ``call_next``
    and may then decorate the response.
    """

    async def do_filter(self, request: Any, call_next: CallNext) -> Any: ...

    def should_not_filter(self, request: Any) -> bool:
        """Return ``True`` to skip this filter for the given request."""
        ...
