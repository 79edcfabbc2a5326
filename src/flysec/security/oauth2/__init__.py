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
"""OAuth2 support: client registrations, login flow pieces, bearer token validation."""

from flysec.security.oauth2.client import (
    ClientRegistration,
    ClientRegistrationRepository,
    InMemoryClientRegistrationRepository,
    OAuth2AuthorizationRequest,
    common_provider,
)
from flysec.security.oauth2.introspection import HttpxOpaqueTokenIntrospector, OpaqueTokenIntrospector
from flysec.security.oauth2.jwt import (
    JwkSetUriJwtDecoder,
    JwtAuthenticationConverter,
    JwtAuthenticationProvider,
    JwtDecoder,
    SecretKeyJwtDecoder,
    claims_to_security_context,
)
from flysec.security.oauth2.login import (
    AccessTokenResponseClient,
    AuthorizationRequestRepository,
    HttpSessionOAuth2AuthorizationRequestRepository,
    HttpxAuthorizationCodeTokenResponseClient,
    HttpxOAuth2UserService,
    OAuth2UserService,
)

__all__ = [
    "AccessTokenResponseClient",
    "AuthorizationRequestRepository",
    "ClientRegistration",
    "ClientRegistrationRepository",
    "HttpSessionOAuth2AuthorizationRequestRepository",
    "HttpxAuthorizationCodeTokenResponseClient",
    "HttpxOAuth2UserService",
    "HttpxOpaqueTokenIntrospector",
    "InMemoryClientRegistrationRepository",
    "JwkSetUriJwtDecoder",
    "JwtAuthenticationConverter",
    "JwtAuthenticationProvider",
    "JwtDecoder",
    "OAuth2AuthorizationRequest",
    "OAuth2UserService",
    "OpaqueTokenIntrospector",
    "SecretKeyJwtDecoder",
    "claims_to_security_context",
    "common_provider",
]
