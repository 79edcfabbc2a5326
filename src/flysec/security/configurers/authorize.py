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
"""URL authorization rules.

Usage::

    http.authorize_requests() \\
        .request_matchers("/api/admin/**").has_role("ADMIN") \\
        .request_matchers("/api/**").authenticated() \\
        .request_matchers("/health", "/docs").permit_all() \\
        .any_request().deny_all()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from flysec.security.access import (
    ANONYMOUS,
    AUTHENTICATED,
    DENY_ALL,
    FULLY_AUTHENTICATED,
    PERMIT_ALL,
    AccessCondition,
    AccessRule,
    AuthorizationManager,
    SecurityRule,
    access,
    has_any_authority,
    has_any_role,
    has_authority,
    has_permission,
    has_role,
)
from flysec.security.configurers.base import SecurityConfigurer
from flysec.security.matchers import OrRequestMatcher, RequestMatcher, any_request, to_matcher
from flysec.web.adapters.starlette.filters.authorization_filter import AuthorizationFilter

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity


class _RequestMatcherBuilder:
    """Intermediate builder returned by ``request_matchers(...)``."""

    def __init__(self, registry: AuthorizeRequestsConfigurer, matcher: RequestMatcher) -> None:
        self._registry = registry
        self._matcher = matcher

    def _rule(self, rule: AccessRule) -> AuthorizeRequestsConfigurer:
        self._registry.add_rule(self._matcher, rule)
        return self._registry

    def permit_all(self) -> AuthorizeRequestsConfigurer:
        return self._rule(PERMIT_ALL)

    def deny_all(self) -> AuthorizeRequestsConfigurer:
        return self._rule(DENY_ALL)

    def authenticated(self) -> AuthorizeRequestsConfigurer:
        return self._rule(AUTHENTICATED)

    def fully_authenticated(self) -> AuthorizeRequestsConfigurer:
        return self._rule(FULLY_AUTHENTICATED)

    def anonymous(self) -> AuthorizeRequestsConfigurer:
        return self._rule(ANONYMOUS)

    def has_role(self, role: str) -> AuthorizeRequestsConfigurer:
        return self._rule(has_role(role))

    def has_any_role(self, *roles: str) -> AuthorizeRequestsConfigurer:
        return self._rule(has_any_role(*roles))

    def has_authority(self, authority: str) -> AuthorizeRequestsConfigurer:
        return self._rule(has_authority(authority))

    def has_any_authority(self, *authorities: str) -> AuthorizeRequestsConfigurer:
        return self._rule(has_any_authority(*authorities))

    def has_permission(self, permission: str) -> AuthorizeRequestsConfigurer:
        return self._rule(has_permission(permission))

    def access(self, condition: AccessCondition) -> AuthorizeRequestsConfigurer:
        """Guard with a ``(AuthorizationContext) -> bool`` callable."""
        return self._rule(access(condition))


class AuthorizeRequestsConfigurer(SecurityConfigurer):
    """Collects ``(matcher, rule)`` pairs; first match wins, no match is denied.

    Rules that other configurers mark as permit-all (the login page, the
    logout URL) are evaluated ahead of the declared rules.
    """

    def __init__(self) -> None:
        super().__init__()
        self._rules: list[SecurityRule] = []
        self._permitted: list[SecurityRule] = []

    @property
    def rules(self) -> list[SecurityRule]:
        """The effective rule list, in evaluation order."""
        return self._permitted + self._rules

    def request_matchers(self, *matchers: Any, method: str | None = None) -> _RequestMatcherBuilder:
        """Begin a rule for path patterns, regexes, callables or matchers."""
        if not matchers:
            raise ValueError("At least one matcher is required")
        resolved = [to_matcher(m, method) for m in matchers]
        matcher = resolved[0] if len(resolved) == 1 else OrRequestMatcher(*resolved)
        return _RequestMatcherBuilder(self, matcher)

    def any_request(self) -> _RequestMatcherBuilder:
        """Begin a catch-all rule.  This should be the last rule."""
        return _RequestMatcherBuilder(self, any_request)

    def add_rule(self, matcher: RequestMatcher, rule: AccessRule) -> None:
        self._rules.append(SecurityRule(matcher, rule))

    def permit_all(self, *matchers: RequestMatcher) -> None:
        """Permit *matchers* ahead of every declared rule."""
        self._permitted.extend(SecurityRule(m, PERMIT_ALL) for m in matchers)

    def configure(self, http: HttpSecurity) -> None:
        http.add_filter(AuthorizationFilter(AuthorizationManager(self.rules)))
