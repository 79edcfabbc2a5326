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

from flysec.dsl.base import SecurityDsl
from flysec.security.authentication import AuthenticationManager
from flysec.security.configurers.http_basic import HttpBasicConfigurer
from flysec.security.context_repository import SecurityContextRepository
from flysec.security.handlers import AuthenticationEntryPoint


class HttpBasicDsl(SecurityDsl[HttpBasicConfigurer]):
    """HTTP Basic settings: ``realm_name``, ``authentication_entry_point``,
    ``authentication_manager`` and ``security_context_repository``."""

    def __init__(self) -> None:
        super().__init__()
        self.realm_name: str | None = None
        self.authentication_entry_point: AuthenticationEntryPoint | None = None
        self.authentication_manager: AuthenticationManager | None = None
        self.security_context_repository: SecurityContextRepository | None = None

    def apply(self, target: HttpBasicConfigurer) -> None:
        self._forward(
            target,
            realm_name=self.realm_name,
            authentication_entry_point=self.authentication_entry_point,
            authentication_manager=self.authentication_manager,
            security_context_repository=self.security_context_repository,
        )
