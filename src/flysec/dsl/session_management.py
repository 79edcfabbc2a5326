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
from flysec.security.configurers.session_management import SessionManagementConfigurer
from flysec.session.ports.outbound import SessionStore


class SessionManagementDsl(SecurityDsl[SessionManagementConfigurer]):
    """Session settings: ``session_store``, ``cookie_name`` and ``ttl`` (seconds)."""

    def __init__(self) -> None:
        super().__init__()
        self.session_store: SessionStore | None = None
        self.cookie_name: str | None = None
        self.ttl: int | None = None

    def apply(self, target: SessionManagementConfigurer) -> None:
        self._forward(target, session_store=self.session_store, cookie_name=self.cookie_name, ttl=self.ttl)
