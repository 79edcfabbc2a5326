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
"""flysec Security: security context, request matchers, authorization rules and authentication.

The filter-chain builder lives in :mod:`flysec.security.http_security`.
"""

from flysec.security.access import (
    ANONYMOUS,
    AUTHENTICATED,
    DENY_ALL,
    FULLY_AUTHENTICATED,
    PERMIT_ALL,
    AccessRule,
    AccessRuleType,
    AuthorizationContext,
    AuthorizationDecision,
    AuthorizationManager,
    SecurityRule,
    access,
    has_any_authority,
    has_any_role,
    has_authority,
    has_permission,
    has_role,
)
from flysec.security.authentication import (
    AuthenticationManager,
    BcryptPasswordEncoder,
    InMemoryUserDetailsService,
    PasswordEncoder,
    UserDetails,
    UserDetailsAuthenticationManager,
    UserDetailsService,
)
from flysec.security.context import SecurityContext, current_security_context
from flysec.security.matchers import (
    AnyRequestMatcher,
    FunctionRequestMatcher,
    PathPatternRequestMatcher,
    RegexRequestMatcher,
    RequestMatcher,
    any_request,
    to_matcher,
)
from flysec.security.properties import SecurityProperties

__all__ = [
    "ANONYMOUS",
    "AUTHENTICATED",
    "AccessRule",
    "AccessRuleType",
    "AnyRequestMatcher",
    "AuthenticationManager",
    "AuthorizationContext",
    "AuthorizationDecision",
    "AuthorizationManager",
    "BcryptPasswordEncoder",
    "DENY_ALL",
    "FULLY_AUTHENTICATED",
    "FunctionRequestMatcher",
    "InMemoryUserDetailsService",
    "PERMIT_ALL",
    "PasswordEncoder",
    "PathPatternRequestMatcher",
    "RegexRequestMatcher",
    "RequestMatcher",
    "SecurityContext",
    "SecurityProperties",
    "SecurityRule",
    "UserDetails",
    "UserDetailsAuthenticationManager",
    "UserDetailsService",
    "access",
    "any_request",
    "current_security_context",
    "has_any_authority",
    "has_any_role",
    "has_authority",
    "has_permission",
    "has_role",
    "to_matcher",
]
