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
from flysec.session.adapters.memory import InMemorySessionStore
from flysec.session.filter import SessionFilter
from flysec.session.ports.outbound import SessionStore

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity


class SessionManagementConfigurer(SecurityConfigurer):
    """Server-side sessions keyed by a cookie.

    Cookie name and TTL default to ``flysec.security.session.*``.  Without
    an explicit store, a shared :class:`SessionStore` or a fresh in-memory
    store is used.
    """

    def __init__(self) -> None:
        super().__init__()
        self._session_store: SessionStore | None = None
        self._cookie_name: str | None = None
        self._ttl: int | None = None

    def session_store(self, store: SessionStore) -> SessionManagementConfigurer:
        self._session_store = store
        return self

    def cookie_name(self, name: str) -> SessionManagementConfigurer:
        self._cookie_name = name
        return self

    def ttl(self, seconds: int) -> SessionManagementConfigurer:
        if seconds <= 0:
            raise ValueError(f"ttl must be positive, got {seconds}")
        self._ttl = seconds
        return self

    def configure(self, http: HttpSecurity) -> None:
        props = http.properties.session
        store = self._session_store or http.get_shared_object(SessionStore) or InMemorySessionStore()
        http.add_filter(
            SessionFilter(
                store,
                cookie_name=self._cookie_name or props.cookie_name,
                ttl=self._ttl or props.ttl,
            )
        )
