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

from typing import TYPE_CHECKING

from flysec.security.configurers.base import SecurityConfigurer
from flysec.security.savedrequest import HttpSessionRequestCache, NullRequestCache, RequestCache
from flysec.web.adapters.starlette.filters.request_cache_filter import RequestCacheFilter

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity


class RequestCacheConfigurer(SecurityConfigurer):
    """Remembers the request that triggered authentication.

    Defaults to the session-backed cache when sessions are on.
    """

    def __init__(self) -> None:
        super().__init__()
        self._request_cache: RequestCache | None = None

    def request_cache(self, request_cache: RequestCache) -> RequestCacheConfigurer:
        self._request_cache = request_cache
        return self

    def init(self, http: HttpSecurity) -> None:
        cache = self._request_cache
        if cache is None:
            cache = HttpSessionRequestCache() if http.sessions_enabled else NullRequestCache()
        http.set_shared_object(RequestCache, cache)

    def configure(self, http: HttpSecurity) -> None:
        http.add_filter(RequestCacheFilter(http.get_shared_object(RequestCache)))
