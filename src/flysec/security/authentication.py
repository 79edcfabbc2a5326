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
"""Username/password authentication: users, password encoding, managers."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import bcrypt as _bcrypt

from flysec.kernel.exceptions import BadCredentialsException
from flysec.security.context import ROLE_PREFIX, SecurityContext, split_authorities

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Password encoding
# ---------------------------------------------------------------------------


@runtime_checkable
class PasswordEncoder(Protocol):
    """Port for password hashing and verification."""

    def hash(self, raw_password: str) -> str: ...

    def verify(self, raw_password: str, hashed_password: str) -> bool: ...


class BcryptPasswordEncoder:
    """PasswordEncoder adapter using bcrypt.

    Args:
        rounds: Number of bcrypt hashing rounds (default: 12).
    """

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, raw_password: str) -> str:
        salt = _bcrypt.gensalt(rounds=self._rounds)
        return _bcrypt.hashpw(raw_password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, raw_password: str, hashed_password: str) -> bool:
        try:
            return _bcrypt.checkpw(raw_password.encode("utf-8"), hashed_password.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password is not a bcrypt hash")
            return False


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserDetails:
    """A user as known to a :class:`UserDetailsService`.

    Attributes:
        username: The login name.
        password: The encoded password.
        authorities: Granted authorities (``ROLE_``-prefixed roles and
            plain permissions).
        enabled: Disabled users cannot log in.
    """

    username: str
    password: str
    authorities: tuple[str, ...] = field(default_factory=tuple)
    enabled: bool = True

    @classmethod
    def with_roles(cls, username: str, password: str, *roles: str) -> UserDetails:
        """Build a user whose *roles* are given without the ``ROLE_`` prefix."""
        return cls(username, password, tuple(f"{ROLE_PREFIX}{role.removeprefix(ROLE_PREFIX)}" for role in roles))

    def to_security_context(self, authentication_method: str) -> SecurityContext:
        roles, permissions = split_authorities(self.authorities)
        return SecurityContext(
            user_id=self.username,
            roles=roles,
            permissions=permissions,
            authentication_method=authentication_method,
        )


@runtime_checkable
class UserDetailsService(Protocol):
    async def load_user_by_username(self, username: str) -> UserDetails | None: ...


class InMemoryUserDetailsService:
    def __init__(self, *users: UserDetails) -> None:
        self._users: dict[str, UserDetails] = {u.username: u for u in users}

    def create_user(self, user: UserDetails) -> None:
        self._users[user.username] = user

    def user_exists(self, username: str) -> bool:
        return username in self._users

    async def load_user_by_username(self, username: str) -> UserDetails | None:
        return self._users.get(username)


# ---------------------------------------------------------------------------
# Authentication managers
# ---------------------------------------------------------------------------


@runtime_checkable
class AuthenticationManager(Protocol):
    """Turns submitted credentials into a :class:`SecurityContext`.

    Raises:
        AuthenticationException: If the credentials are rejected.
    """

    async def authenticate(
        self, username: str, password: str, authentication_method: str = "password"
    ) -> SecurityContext: ...


class UserDetailsAuthenticationManager:
    """Checks a password against the user loaded from a :class:`UserDetailsService`."""

    def __init__(
        self, user_details_service: UserDetailsService, password_encoder: PasswordEncoder | None = None
    ) -> None:
        self.user_details_service = user_details_service
        self.password_encoder = password_encoder or BcryptPasswordEncoder()

    async def authenticate(
        self, username: str, password: str, authentication_method: str = "password"
    ) -> SecurityContext:
        user = await self.user_details_service.load_user_by_username(username)
        if user is None or not user.enabled or not self.password_encoder.verify(password, user.password):
            logger.debug("Authentication failed for user %r", username)
            raise BadCredentialsException("Bad credentials", code="BAD_CREDENTIALS")
        return user.to_security_context(authentication_method)


def in_memory_users(
    encoder: PasswordEncoder, users: Iterable[tuple[str, str, Iterable[str]]]
) -> InMemoryUserDetailsService:
    """Build an in-memory service from ``(username, raw_password, roles)`` triples."""
    return InMemoryUserDetailsService(
        *(UserDetails.with_roles(name, encoder.hash(raw), *roles) for name, raw, roles in users)
    )
