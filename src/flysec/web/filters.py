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
"""OncePerRequestFilter: base class for filters with path-pattern scoping.

Framework-agnostic: only ``request.url`` is read, so no Starlette import
is needed here.
"""

from __future__ import annotations

import abc
from typing import Any

from flysec.security.matchers import PathPatternRequestMatcher
from flysec.web.ports.filter import CallNext


class OncePerRequestFilter(abc.ABC):
    """Abstract base class for :class:`WebFilter` implementations.

    Attributes:
        url_patterns: Path patterns this filter applies to.  Empty means
            every path.
        exclude_patterns: Path patterns skipped even when ``url_patterns``
            matches.
    """

    url_patterns: list[str] = []
    exclude_patterns: list[str] = []

    def should_not_filter(self, request: Any) -> bool:
        if self.url_patterns and not any(
            PathPatternRequestMatcher(p).matches(request) for p in self.url_patterns
        ):
            return True
        return any(PathPatternRequestMatcher(p).matches(request) for p in self.exclude_patterns)

    @abc.abstractmethod
    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        """Execute the filter logic.  Call ``await call_next(request)`` to proceed."""
        ...
