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

from flysec.dsl.base import SecurityDsl
from flysec.security.configurers.anonymous import AnonymousConfigurer
from flysec.web.ports.filter import WebFilter


class AnonymousDsl(SecurityDsl[AnonymousConfigurer]):
    """Anonymous authentication settings.

    Attributes:
        key: Identifies anonymous contexts created by this chain.
        principal: Principal name given to anonymous users.
        authorities: Authorities granted to anonymous users.
        authentication_filter: Replaces the default anonymous filter.
    """

    def __init__(self) -> None:
        super().__init__()
        self.key: str | None = None
        self.principal: str | None = None
        self.authorities: Sequence[str] | None = None
        self.authentication_filter: WebFilter | None = None

    def apply(self, target: AnonymousConfigurer) -> None:
        self._forward(
            target,
            key=self.key,
            principal=self.principal,
            authentication_filter=self.authentication_filter,
        )
        if self.authorities is not None:
            target.authorities(list(self.authorities))
