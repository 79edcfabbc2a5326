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
"""Authorization rule list: ordered ``matcher -> condition`` pairs.

Rules are evaluated in declaration order.  The first rule whose matcher
accepts the request decides the outcome and later rules are never looked
at.  A request that no rule matches is denied.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, cast

from flysec.security.context import SecurityContext
from flysec.security.matchers import RequestMatcher

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Access rule model
# ---------------------------------------------------------------------------


class AccessRuleType(Enum):
    """The kind of access check to perform on a matched request."""

    PERMIT_ALL = auto()
    DENY_ALL = auto()
    AUTHENTICATED = auto()
    FULLY_AUTHENTICATED = auto()
    ANONYMOUS = auto()
    HAS_ROLE = auto()
    HAS_ANY_ROLE = auto()
    HAS_AUTHORITY = auto()
    HAS_ANY_AUTHORITY = auto()
    HAS_PERMISSION = auto()
    CUSTOM = auto()


@dataclass(frozen=True)
class AuthorizationContext:
    """What a custom access condition gets to look at.

    Attributes:
        request: The incoming request.
        security_context: The caller's security context.
        variables: Path variables captured by the rule's matcher.
    """

    request: Any
    security_context: SecurityContext
    variables: Mapping[str, str] = field(default_factory=dict)


AccessCondition = Callable[[AuthorizationContext], bool]


@dataclass(frozen=True)
class AccessRule:
    """A single access condition.

    Attributes:
        rule_type: The kind of check to perform.
        value: The role, authority or permission name, a tuple of names,
            or the condition callable for ``CUSTOM``.  ``None`` for rules
            that need no additional data.
    """

    rule_type: AccessRuleType
    value: str | tuple[str, ...] | AccessCondition | None = None

    def __repr__(self) -> str:
        if self.value is None:
            return self.rule_type.name.lower()
        return f"{self.rule_type.name.lower()}({self.value!r})"


@dataclass(frozen=True)
class SecurityRule:
    """A pairing of a request matcher and the access rule that guards it."""

    matcher: RequestMatcher
    rule: AccessRule


@dataclass(frozen=True)
class AuthorizationDecision:
    """Result of evaluating the rule list for one request.

    Attributes:
        granted: Whether access is allowed.
        status: 200 when granted, 401 when the caller is not authenticated,
            403 otherwise.
        rule: The rule that decided, or ``None`` when nothing matched.
        reason: Human-readable explanation used in error responses.
    """

    granted: bool
    status: int = 200
    rule: SecurityRule | None = None
    reason: str = ""


# ---------------------------------------------------------------------------
# Rule factories
# ---------------------------------------------------------------------------

PERMIT_ALL = AccessRule(AccessRuleType.PERMIT_ALL)
DENY_ALL = AccessRule(AccessRuleType.DENY_ALL)
AUTHENTICATED = AccessRule(AccessRuleType.AUTHENTICATED)
FULLY_AUTHENTICATED = AccessRule(AccessRuleType.FULLY_AUTHENTICATED)
ANONYMOUS = AccessRule(AccessRuleType.ANONYMOUS)


def has_role(role: str) -> AccessRule:
    return AccessRule(AccessRuleType.HAS_ROLE, role)


def has_any_role(*roles: str) -> AccessRule:
    return AccessRule(AccessRuleType.HAS_ANY_ROLE, tuple(roles))


def has_authority(authority: str) -> AccessRule:
    return AccessRule(AccessRuleType.HAS_AUTHORITY, authority)


def has_any_authority(*authorities: str) -> AccessRule:
    return AccessRule(AccessRuleType.HAS_ANY_AUTHORITY, tuple(authorities))


def has_permission(permission: str) -> AccessRule:
    return AccessRule(AccessRuleType.HAS_PERMISSION, permission)


def access(condition: AccessCondition) -> AccessRule:
    """Guard with an arbitrary ``(AuthorizationContext) -> bool`` callable."""
    return AccessRule(AccessRuleType.CUSTOM, condition)


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def _names(value: Any) -> Iterable[str]:
    return cast(tuple[str, ...], value)


def evaluate(rule: AccessRule, context: AuthorizationContext) -> tuple[bool, str]:
    """Evaluate one access rule; returns ``(granted, reason)``."""
    sc = context.security_context
    rule_type = rule.rule_type

    if rule_type is AccessRuleType.PERMIT_ALL:
        return True, ""
    if rule_type is AccessRuleType.DENY_ALL:
        return False, "Access to this resource is denied."
    # no remember-me, so every authenticated principal is fully authenticated
    if rule_type in (AccessRuleType.AUTHENTICATED, AccessRuleType.FULLY_AUTHENTICATED):
        return sc.is_authenticated, "Authentication is required to access this resource."
    if rule_type is AccessRuleType.ANONYMOUS:
        return not sc.is_authenticated, "This resource is only available to anonymous users."
    if rule_type is AccessRuleType.HAS_ROLE:
        return sc.has_role(cast(str, rule.value)), f"Required role '{rule.value}' is not granted."
    if rule_type is AccessRuleType.HAS_ANY_ROLE:
        roles = list(_names(rule.value))
        return sc.has_any_role(roles), f"One of roles {roles} is required."
    if rule_type is AccessRuleType.HAS_AUTHORITY:
        return sc.has_authority(cast(str, rule.value)), f"Required authority '{rule.value}' is not granted."
    if rule_type is AccessRuleType.HAS_ANY_AUTHORITY:
        authorities = list(_names(rule.value))
        return sc.has_any_authority(authorities), f"One of authorities {authorities} is required."
    if rule_type is AccessRuleType.HAS_PERMISSION:
        return sc.has_permission(cast(str, rule.value)), f"Required permission '{rule.value}' is not granted."

    condition = cast(AccessCondition, rule.value)
    return bool(condition(context)), "Access condition was not satisfied."


def _denied_status(security_context: SecurityContext) -> int:
    return 403 if security_context.is_authenticated else 401


class AuthorizationManager:
    """Evaluates an ordered rule list, first match wins, deny by default."""

    def __init__(self, rules: Sequence[SecurityRule]) -> None:
        self._rules = list(rules)

    @property
    def rules(self) -> list[SecurityRule]:
        return list(self._rules)

    def check(self, request: Any, security_context: SecurityContext) -> AuthorizationDecision:
        for security_rule in self._rules:
            result = security_rule.matcher.matcher(request)
            if not result.matched:
                continue
            context = AuthorizationContext(request, security_context, result.variables)
            granted, reason = evaluate(security_rule.rule, context)
            logger.debug(
                "Rule %r matched %s %s: %s",
                security_rule.rule,
                request.method,
                request.url.path,
                "granted" if granted else "denied",
            )
            if granted:
                return AuthorizationDecision(True, 200, security_rule)
            return AuthorizationDecision(False, _denied_status(security_context), security_rule, reason)

        logger.debug("No authorization rule matched %s %s, denying", request.method, request.url.path)
        return AuthorizationDecision(
            False, _denied_status(security_context), None, "No authorization rule matches this request."
        )
