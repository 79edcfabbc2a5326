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

from collections.abc import Sequence
from typing import TYPE_CHECKING

from flysec.container.ordering import get_order
from flysec.security.configurers.base import SecurityConfigurer
from flysec.security.context import ANONYMOUS_AUTHORITIES, ANONYMOUS_PRINCIPAL
from flysec.web.adapters.starlette.filters.anonymous_filter import AnonymousAuthenticationFilter
from flysec.web.ports.filter import WebFilter

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity


class AnonymousConfigurer(SecurityConfigurer):
    """Gives unauthenticated requests an anonymous principal."""

    def __init__(self) -> None:
        super().__init__()
        self._key: str | None = None
        self._principal = ANONYMOUS_PRINCIPAL
        self._authorities: tuple[str, ...] = ANONYMOUS_AUTHORITIES
        self._filter: WebFilter | None = None

    def key(self, key: str) -> AnonymousConfigurer:
        self._key = key
        return self

    def principal(self, principal: str) -> AnonymousConfigurer:
        self._principal = principal
        return self

    def authorities(self, *authorities: str | Sequence[str]) -> AnonymousConfigurer:
        """Accepts ``authorities("ROLE_A", "ROLE_B")`` or ``authorities(["ROLE_A"])``."""
        flat: list[str] = []
        for item in authorities:
            flat.extend([item] if isinstance(item, str) else item)
        self._authorities = tuple(flat)
        return self

    def authentication_filter(self, web_filter: WebFilter) -> AnonymousConfigurer:
        """Replace the anonymous filter; it runs where the default one would."""
        self._filter = web_filter
        return self

    def configure(self, http: HttpSecurity) -> None:
        if self._filter is not None:
            http.add_filter(self._filter, order=get_order(AnonymousAuthenticationFilter))
            return
        http.add_filter(AnonymousAuthenticationFilter(self._key, self._principal, self._authorities))
