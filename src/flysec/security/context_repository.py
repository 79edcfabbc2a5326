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
"""Where the security context lives between requests."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from flysec.security.context import SecurityContext

SECURITY_CONTEXT_KEY = "SECURITY_CONTEXT"


@runtime_checkable
class SecurityContextRepository(Protocol):
    def load_context(self, request: Any) -> SecurityContext | None: ...

    def save_context(self, context: SecurityContext | None, request: Any) -> None: ...


class HttpSessionSecurityContextRepository:
    """Keeps the authenticated context in the HTTP session.

    Anonymous contexts are never stored.  Saving ``None`` removes the
    stored context.
    """

    def __init__(self, attribute_name: str = SECURITY_CONTEXT_KEY) -> None:
        self.attribute_name = attribute_name

    def load_context(self, request: Any) -> SecurityContext | None:
        session = getattr(request.state, "session", None)
        if session is None:
            return None
        context = session.get_attribute(self.attribute_name)
        return context if isinstance(context, SecurityContext) else None

    def save_context(self, context: SecurityContext | None, request: Any) -> None:
        session = getattr(request.state, "session", None)
        if session is None:
            return
        if context is None or not context.is_authenticated:
            session.remove_attribute(self.attribute_name)
        else:
            session.set_attribute(self.attribute_name, context)


class NullSecurityContextRepository:
    """Stateless: nothing is loaded or stored."""

    def load_context(self, request: Any) -> SecurityContext | None:
        return None

    def save_context(self, context: SecurityContext | None, request: Any) -> None:
        return None
