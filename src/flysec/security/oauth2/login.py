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
"""OAuth2 login building blocks: authorization request storage, code exchange, user info."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from flysec.kernel.exceptions import AuthenticationException
from flysec.security.context import SecurityContext
from flysec.security.oauth2.client import ClientRegistration, OAuth2AuthorizationRequest

logger = logging.getLogger(__name__)

AUTHORIZATION_REQUEST_KEY = "OAUTH2_AUTHORIZATION_REQUEST"


def _json_object(response: httpx.Response, code: str) -> dict[str, Any]:
    """Parse a provider response body that must be a JSON object."""
    try:
        body = response.json()
    except ValueError as exc:
        raise AuthenticationException(f"Provider answered with a non-JSON body: {exc}", code=code) from exc
    if not isinstance(body, dict):
        raise AuthenticationException("Provider answered with a non-object JSON body", code=code)
    return body


# ---------------------------------------------------------------------------
# Authorization request storage
# ---------------------------------------------------------------------------


@runtime_checkable
class AuthorizationRequestRepository(Protocol):
    def save_authorization_request(self, authorization_request: OAuth2AuthorizationRequest, request: Any) -> None: ...

    def remove_authorization_request(self, request: Any) -> OAuth2AuthorizationRequest | None:
        """Remove and return the stored request (one-time use)."""
        ...


class HttpSessionOAuth2AuthorizationRequestRepository:
    def save_authorization_request(self, authorization_request: OAuth2AuthorizationRequest, request: Any) -> None:
        session = getattr(request.state, "session", None)
        if session is None:
            logger.warning("No session to store the OAuth2 authorization request in")
            return
        session.set_attribute(AUTHORIZATION_REQUEST_KEY, authorization_request)

    def remove_authorization_request(self, request: Any) -> OAuth2AuthorizationRequest | None:
        session = getattr(request.state, "session", None)
        if session is None:
            return None
        stored = session.get_attribute(AUTHORIZATION_REQUEST_KEY)
        session.remove_attribute(AUTHORIZATION_REQUEST_KEY)
        return stored if isinstance(stored, OAuth2AuthorizationRequest) else None


# ---------------------------------------------------------------------------
# Token endpoint
# ---------------------------------------------------------------------------


@runtime_checkable
class AccessTokenResponseClient(Protocol):
    """Exchanges an authorization code for tokens at the provider's token endpoint."""

    async def get_token_response(
        self, registration: ClientRegistration, code: str, redirect_uri: str
    ) -> dict[str, Any]: ...


class HttpxAuthorizationCodeTokenResponseClient:
    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    async def get_token_response(
        self, registration: ClientRegistration, code: str, redirect_uri: str
    ) -> dict[str, Any]:
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
            "client_id": registration.client_id,
            "client_secret": registration.client_secret,
        }
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(registration.token_uri, data=data, headers={"Accept": "application/json"})
        except httpx.HTTPError as exc:
            raise AuthenticationException(
                f"Token request to {registration.token_uri} failed: {exc}", code="invalid_token_response"
            ) from exc

        if response.status_code != 200:
            logger.error("Token exchange failed (HTTP %d): %s", response.status_code, response.text)
            raise AuthenticationException(
                f"Token endpoint answered HTTP {response.status_code}", code="invalid_token_response"
            )
        body = _json_object(response, "invalid_token_response")
        if not body.get("access_token"):
            raise AuthenticationException("Token response has no access_token", code="invalid_token_response")
        return body


# ---------------------------------------------------------------------------
# User info endpoint
# ---------------------------------------------------------------------------


@runtime_checkable
class OAuth2UserService(Protocol):
    async def load_user(self, registration: ClientRegistration, token_response: dict[str, Any]) -> SecurityContext: ...


class HttpxOAuth2UserService:
    """Fetches the user from the provider's userinfo endpoint.

    The principal name is read from ``registration.user_name_attribute``;
    every granted scope becomes a ``SCOPE_<scope>`` permission and the user
    gets the ``USER`` role.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    async def load_user(self, registration: ClientRegistration, token_response: dict[str, Any]) -> SecurityContext:
        if not registration.user_info_uri:
            raise AuthenticationException(
                f"Missing user info URI for registration '{registration.registration_id}'",
                code="missing_user_info_uri",
            )
        access_token = token_response["access_token"]
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(
                    registration.user_info_uri,
                    headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise AuthenticationException(
                f"User info request failed: {exc}", code="invalid_user_info_response"
            ) from exc

        if response.status_code != 200:
            logger.warning("User info fetch failed (HTTP %d): %s", response.status_code, response.text)
            raise AuthenticationException(
                f"User info endpoint answered HTTP {response.status_code}", code="invalid_user_info_response"
            )

        user_info = _json_object(response, "invalid_user_info_response")
        name = user_info.get(registration.user_name_attribute)
        if name is None:
            raise AuthenticationException(
                f"User info has no '{registration.user_name_attribute}' attribute", code="invalid_user_info_response"
            )

        granted = token_response.get("scope")
        scopes = granted.split() if isinstance(granted, str) else list(registration.scopes)
        return SecurityContext(
            user_id=str(name),
            roles=["USER"],
            permissions=[f"SCOPE_{scope}" for scope in scopes],
            attributes=user_info,
            authentication_method="oauth2",
        )
