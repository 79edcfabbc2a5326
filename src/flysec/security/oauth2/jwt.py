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
"""JWT decoding for the resource server: shared-secret and JWKS decoders."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import jwt
from jwt import PyJWKClient

from flysec.kernel.exceptions import InvalidTokenException
from flysec.security.context import SecurityContext


@runtime_checkable
class JwtDecoder(Protocol):
    """Decodes and verifies a compact JWT into its claims.

    Raises:
        InvalidTokenException: If the token is malformed, expired or its
            signature does not verify.
    """

    def decode(self, token: str) -> dict[str, Any]: ...


class SecretKeyJwtDecoder:
    """HMAC-signed tokens sharing a secret with the issuer.

    Args:
        secret: Secret key for HMAC-based signing.
        algorithm: JWT algorithm (default: HS256).
        issuer: Expected ``iss`` claim, if any.
        audience: Expected ``aud`` claim, if any.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        issuer: str | None = None,
        audience: str | None = None,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._issuer = issuer
        self._audience = audience

    def encode(self, payload: dict[str, Any]) -> str:
        """Encode a payload into a JWT token (handy for tests and tooling)."""
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                audience=self._audience,
            )
        except jwt.PyJWTError as exc:
            raise InvalidTokenException(f"Invalid token: {exc}", code="INVALID_TOKEN") from exc


class JwkSetUriJwtDecoder:
    """Validates RS256-signed JWTs using a remote JWKS endpoint.

    Fetches public keys from the JWKS URI and caches them.

    Args:
        jwk_set_uri: The JWKS endpoint URL (e.g.,
            ``"https://auth.example.com/.well-known/jwks.json"``).
        issuer: Expected token issuer (optional).
        audience: Expected token audience (optional).
        algorithms: Allowed algorithms (default: ``["RS256"]``).
    """

    def __init__(
        self,
        jwk_set_uri: str,
        issuer: str | None = None,
        audience: str | None = None,
        algorithms: list[str] | None = None,
    ) -> None:
        self.jwk_set_uri = jwk_set_uri
        self._jwks_client = PyJWKClient(jwk_set_uri)
        self._issuer = issuer
        self._audience = audience
        self._algorithms = algorithms or ["RS256"]

    def decode(self, token: str) -> dict[str, Any]:
        try:
            signing_key = self._jwks_client.get_signing_key_from_jwt(token)
            return jwt.decode(
                token,
                signing_key.key,
                algorithms=self._algorithms,
                issuer=self._issuer,
                audience=self._audience,
            )
        except jwt.PyJWTError as exc:
            raise InvalidTokenException(f"Token validation failed: {exc}", code="INVALID_TOKEN") from exc


JwtAuthenticationConverter = Callable[[dict[str, Any]], SecurityContext]


def claims_to_security_context(claims: dict[str, Any], authentication_method: str = "bearer") -> SecurityContext:
    """Default claim mapping.

    - ``sub``: maps to *user_id*
    - ``roles`` or ``realm_access.roles``: maps to *roles*
    - ``permissions`` or ``scope`` (space-separated): maps to *permissions*
    """
    roles = claims.get("roles", [])
    if not roles:
        realm_access = claims.get("realm_access", {})
        if isinstance(realm_access, dict):
            roles = realm_access.get("roles", [])

    permissions = claims.get("permissions", [])
    if not permissions:
        scope = claims.get("scope", "")
        if isinstance(scope, str) and scope:
            permissions = scope.split()
        elif isinstance(scope, list):
            permissions = [str(s) for s in scope]

    return SecurityContext(
        user_id=claims.get("sub"),
        roles=list(roles),
        permissions=list(permissions),
        attributes=dict(claims),
        authentication_method=authentication_method,
    )


class JwtAuthenticationProvider:
    """Decodes a bearer token and converts its claims to a context."""

    def __init__(self, decoder: JwtDecoder, converter: JwtAuthenticationConverter | None = None) -> None:
        self.decoder = decoder
        self.converter = converter or claims_to_security_context

    async def authenticate(self, token: str) -> SecurityContext:
        context = self.converter(self.decoder.decode(token))
        if context.user_id is None:
            raise InvalidTokenException("Token has no subject", code="INVALID_TOKEN")
        return context
