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
"""RequestCacheFilter: forgets the saved request once the user comes back to it."""

from __future__ import annotations

from typing import Any

from flysec.container.ordering import HIGHEST_PRECEDENCE, order
from flysec.security.savedrequest import RequestCache
from flysec.web.filters import OncePerRequestFilter
from flysec.web.ports.filter import CallNext


@order(HIGHEST_PRECEDENCE + 275)
class RequestCacheFilter(OncePerRequestFilter):
    def __init__(self, request_cache: RequestCache) -> None:
        self.request_cache = request_cache

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        saved = self.request_cache.get_matching_request(request)
        if saved is not None:
            request.state.saved_request = saved
        return await call_next(request)
