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
"""Security context for request-scoped authentication and authorization."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

ROLE_PREFIX = "ROLE_"
ANONYMOUS_PRINCIPAL = "anonymousUser"
ANONYMOUS_AUTHORITIES: tuple[str, ...] = ("ROLE_ANONYMOUS",)


def split_authorities(authorities: Iterable[str]) -> tuple[list[str], list[str]]:
    """Split granted authorities into ``(roles, permissions)``.

    ``ROLE_``-prefixed authorities become roles (prefix stripped); all
    others are kept verbatim as permissions.
    """
    roles: list[str] = []
    permissions: list[str] = []
    for authority in authorities:
        if authority.startswith(ROLE_PREFIX):
            roles.append(authority[len(ROLE_PREFIX):])
        else:
            permissions.append(authority)
    return roles, permissions


@dataclass(frozen=True)
class SecurityContext:
    """Holds authentication and authorization data for the current request.

    Populated by the authentication filters (form login, HTTP basic, bearer
    token, OAuth2 login, anonymous) and stored on
    ``request.state.security_context``.

    Attributes:
        user_id: Principal name; ``None`` when nobody is authenticated.
        roles: Role names without the ``ROLE_`` prefix.
        permissions: Non-role authorities (scopes, permission strings).
        attributes: Extra principal attributes (claims, user info).
        anonymous: ``True`` for the anonymous principal.
        authentication_method: How the principal authenticated
            (``"form"``, ``"basic"``, ``"bearer"``, ``"oauth2"``, ...).
    """

    user_id: str | None = None
    roles: list[str] = field(default_factory=list)
    permissions: list[str] = field(default_factory=list)
    attributes: dict[str, Any] = field(default_factory=dict)
    anonymous: bool = False
    authentication_method: str | None = None

    @property
    def is_authenticated(self) -> bool:
        """Whether a real (non-anonymous) principal is present."""
        return self.user_id is not None and not self.anonymous

    @property
    def authorities(self) -> list[str]:
        """Granted authorities: ``ROLE_``-prefixed roles followed by permissions."""
        return [f"{ROLE_PREFIX}{role}" for role in self.roles] + list(self.permissions)

    def has_role(self, role: str) -> bool:
        """Check if the user has a specific role (``ROLE_`` prefix optional)."""
        return role.removeprefix(ROLE_PREFIX) in self.roles

    def has_any_role(self, roles: Iterable[str]) -> bool:
        """Check if the user has any of the specified roles."""
        return any(self.has_role(role) for role in roles)

    def has_authority(self, authority: str) -> bool:
        return authority in self.authorities

    def has_any_authority(self, authorities: Iterable[str]) -> bool:
        granted = set(self.authorities)
        return any(authority in granted for authority in authorities)

    def has_permission(self, permission: str) -> bool:
        """Check if the user has a specific permission."""
        return permission in self.permissions

    @classmethod
    def empty(cls) -> SecurityContext:
        """Create a context with no principal at all."""
        return cls()

    @classmethod
    def anonymous_user(
        cls,
        principal: str = ANONYMOUS_PRINCIPAL,
        authorities: Iterable[str] = ANONYMOUS_AUTHORITIES,
        key: str | None = None,
    ) -> SecurityContext:
        """Create the anonymous principal used when nobody has logged in."""
        roles, permissions = split_authorities(authorities)
        return cls(
            user_id=principal,
            roles=roles,
            permissions=permissions,
            attributes={"anonymous_key": key} if key is not None else {},
            anonymous=True,
            authentication_method="anonymous",
        )


def current_security_context(request: Any) -> SecurityContext:
    """Return the context stored on *request*, or an empty one."""
    state = getattr(request, "state", None)
    context = getattr(state, "security_context", None)
    return context if isinstance(context, SecurityContext) else SecurityContext.empty()
