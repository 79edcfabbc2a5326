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
"""Opaque token introspection (RFC 7662) over httpx."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from flysec.kernel.exceptions import ExternalServiceException, InvalidTokenException
from flysec.security.context import SecurityContext
from flysec.security.oauth2.jwt import claims_to_security_context

logger = logging.getLogger(__name__)


@runtime_checkable
class OpaqueTokenIntrospector(Protocol):
    async def introspect(self, token: str) -> SecurityContext: ...


class HttpxOpaqueTokenIntrospector:
    """Asks the authorization server whether a token is active.

    Args:
        introspection_uri: The introspection endpoint.
        client_id: Client id for HTTP basic authentication to the endpoint.
        client_secret: Client secret for HTTP basic authentication.
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        introspection_uri: str,
        client_id: str,
        client_secret: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.introspection_uri = introspection_uri
        self.client_id = client_id
        self.client_secret = client_secret
        self._transport = transport

    async def introspect(self, token: str) -> SecurityContext:
        claims = await self._post(token)
        if not claims.get("active", False):
            raise InvalidTokenException("Provided token isn't active", code="INVALID_TOKEN")
        return claims_to_security_context(claims)

    async def _post(self, token: str) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self.introspection_uri,
                    data={"token": token, "token_type_hint": "access_token"},
                    auth=(self.client_id, self.client_secret),
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise ExternalServiceException(
                f"Introspection request to {self.introspection_uri} failed: {exc}", code="INTROSPECTION_FAILED"
            ) from exc

        if response.status_code != 200:
            logger.warning("Introspection endpoint answered HTTP %d", response.status_code)
            raise InvalidTokenException(
                f"Introspection endpoint answered HTTP {response.status_code}", code="INVALID_TOKEN"
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise ExternalServiceException(
                f"Introspection endpoint answered with a non-JSON body: {exc}", code="INTROSPECTION_FAILED"
            ) from exc
        if not isinstance(body, dict):
            raise ExternalServiceException(
                "Introspection endpoint answered with a non-object JSON body", code="INTROSPECTION_FAILED"
            )
        return body
