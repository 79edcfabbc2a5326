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
"""Nested-block DSL over :class:`~flysec.security.http_security.HttpSecurity`.

Each block holds optional settings and forwards only the ones that were
given, so anything left unset keeps the builder's default.
"""

from flysec.dsl.anonymous import AnonymousDsl
from flysec.dsl.authorize_requests import (
    AuthorizeExchangeDsl,
    AuthorizeRequestsDsl,
    access,
    anonymous,
    any_exchange,
    any_request,
    authenticated,
    deny_all,
    fully_authenticated,
    has_any_authority,
    has_any_role,
    has_authority,
    has_permission,
    has_role,
    permit_all,
)
from flysec.dsl.base import SecurityDsl
from flysec.dsl.cors import CorsDsl
from flysec.dsl.csrf import CsrfDsl
from flysec.dsl.exception_handling import ExceptionHandlingDsl
from flysec.dsl.form_login import FormLoginDsl
from flysec.dsl.headers import (
    CacheControlDsl,
    ContentSecurityPolicyDsl,
    ContentTypeOptionsDsl,
    FrameOptionsDsl,
    HeadersDsl,
    HttpPublicKeyPinningDsl,
    HttpStrictTransportSecurityDsl,
    ReferrerPolicyDsl,
    XssProtectionConfigDsl,
)
from flysec.dsl.http_basic import HttpBasicDsl
from flysec.dsl.http_security_dsl import HttpSecurityDsl, http
from flysec.dsl.https_redirect import HttpsRedirectDsl
from flysec.dsl.logout import LogoutDsl
from flysec.dsl.oauth2 import (
    AuthorizationEndpointDsl,
    JwtDsl,
    OAuth2LoginDsl,
    OAuth2ResourceServerDsl,
    OpaqueTokenDsl,
    RedirectionEndpointDsl,
    TokenEndpointDsl,
    UserInfoEndpointDsl,
)
from flysec.dsl.request_cache import RequestCacheDsl
from flysec.dsl.session_management import SessionManagementDsl

__all__ = [
    "AnonymousDsl",
    "AuthorizationEndpointDsl",
    "AuthorizeExchangeDsl",
    "AuthorizeRequestsDsl",
    "CacheControlDsl",
    "ContentSecurityPolicyDsl",
    "ContentTypeOptionsDsl",
    "CorsDsl",
    "CsrfDsl",
    "ExceptionHandlingDsl",
    "FormLoginDsl",
    "FrameOptionsDsl",
    "HeadersDsl",
    "HttpBasicDsl",
    "HttpPublicKeyPinningDsl",
    "HttpSecurityDsl",
    "HttpStrictTransportSecurityDsl",
    "HttpsRedirectDsl",
    "JwtDsl",
    "LogoutDsl",
    "OAuth2LoginDsl",
    "OAuth2ResourceServerDsl",
    "OpaqueTokenDsl",
    "RedirectionEndpointDsl",
    "ReferrerPolicyDsl",
    "RequestCacheDsl",
    "SecurityDsl",
    "SessionManagementDsl",
    "TokenEndpointDsl",
    "UserInfoEndpointDsl",
    "XssProtectionConfigDsl",
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
    "http",
    "permit_all",
]
