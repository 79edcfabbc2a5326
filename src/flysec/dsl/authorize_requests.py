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
"""``authorize_requests`` block: an ordered list of ``(matcher, access)`` rules.

Rules are checked in declaration order and the first matching rule
decides; a request that no rule matches is denied::

    with dsl.authorize_requests() as auth:
        auth.authorize("/public/**", permit_all)
        auth.authorize("/admin/**", has_role("ADMIN"))
        auth.authorize("/user/{name}", access(lambda ctx: ctx.variables["name"] == ctx.security_context.user_id))
        auth.authorize(any_request, authenticated)
"""

from __future__ import annotations

from typing import Any

from flysec.dsl.base import SecurityDsl
from flysec.security.access import (
    ANONYMOUS,
    AUTHENTICATED,
    DENY_ALL,
    FULLY_AUTHENTICATED,
    PERMIT_ALL,
    AccessRule,
    access,
    has_any_authority,
    has_any_role,
    has_authority,
    has_permission,
    has_role,
)
from flysec.security.configurers.authorize import AuthorizeRequestsConfigurer
from flysec.security.matchers import PathPatternRequestMatcher, RequestMatcher, any_request, to_matcher

permit_all = PERMIT_ALL
deny_all = DENY_ALL
authenticated = AUTHENTICATED
fully_authenticated = FULLY_AUTHENTICATED
anonymous = ANONYMOUS
any_exchange = any_request

__all__ = [
    "AuthorizeExchangeDsl",
    "AuthorizeRequestsDsl",
    "access",
    "anonymous",
    "any_exchange",
    "any_request",
    "authenticated",
    "deny_all",
    "fully_authenticated",
    "has_any_authority",
    "has_any_role",
    "has_authority",
    "has_permission",
    "has_role",
    "permit_all",
]


class AuthorizeRequestsDsl(SecurityDsl[AuthorizeRequestsConfigurer]):
    """Access rules evaluated first-match-wins, deny when nothing matches."""

    permit_all = PERMIT_ALL
    deny_all = DENY_ALL
    authenticated = AUTHENTICATED
    fully_authenticated = FULLY_AUTHENTICATED
    anonymous = ANONYMOUS
    any_request = any_request
    any_exchange = any_request

    has_role = staticmethod(has_role)
    has_any_role = staticmethod(has_any_role)
    has_authority = staticmethod(has_authority)
    has_any_authority = staticmethod(has_any_authority)
    has_permission = staticmethod(has_permission)
    access = staticmethod(access)

    def __init__(self) -> None:
        super().__init__()
        self.rules: list[tuple[RequestMatcher, AccessRule]] = []

    def authorize(self, matcher: Any, *args: Any) -> None:
        """Add a rule.

        ``authorize(matcher, access)`` takes a path pattern, a compiled regex,
        a predicate or a :class:`RequestMatcher`.  ``authorize(pattern,
        root_path, access)`` only matches requests routed through the
        ASGI mount *root_path*.  *access* defaults to ``authenticated``.
        """
        if len(args) > 2:
            raise TypeError("authorize() takes a matcher, an optional root path and an access rule")
        rule = args[-1] if args else AUTHENTICATED
        if not isinstance(rule, AccessRule):
            raise TypeError(f"Expected an access rule, got {rule!r}")
        if len(args) == 2:
            if not isinstance(matcher, str):
                raise TypeError("A root path can only be combined with a path pattern")
            self.rules.append((PathPatternRequestMatcher(matcher, root_path=args[0]), rule))
        else:
            self.rules.append((to_matcher(matcher), rule))

    def apply(self, target: AuthorizeRequestsConfigurer) -> None:
        for matcher, rule in self.rules:
            target.add_rule(matcher, rule)


AuthorizeExchangeDsl = AuthorizeRequestsDsl
