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
"""OAuth2 client registrations and the repository that looks them up."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from flysec.kernel.exceptions import InvalidConfigurationException

DEFAULT_REDIRECT_URI = "{base_url}/login/oauth2/code/{registration_id}"


@dataclass(frozen=True)
class ClientRegistration:
    """One OAuth2 provider as seen by this application (the client).

    ``redirect_uri`` may use the ``{base_url}`` and ``{registration_id}``
    placeholders, expanded per request.
    """

    registration_id: str
    client_id: str
    client_secret: str = ""
    authorization_grant_type: str = "authorization_code"
    redirect_uri: str = DEFAULT_REDIRECT_URI
    scopes: tuple[str, ...] = ()
    authorization_uri: str = ""
    token_uri: str = ""
    user_info_uri: str = ""
    user_name_attribute: str = "sub"
    jwk_set_uri: str = ""
    issuer_uri: str = ""
    client_name: str = ""

    def expand_redirect_uri(self, base_url: str) -> str:
        return self.redirect_uri.format(base_url=base_url.rstrip("/"), registration_id=self.registration_id)


_COMMON_PROVIDERS: dict[str, dict[str, Any]] = {
    "google": {
        "scopes": ("openid", "profile", "email"),
        "authorization_uri": "https://accounts.google.com/o/oauth2/v2/auth",
        "token_uri": "https://www.googleapis.com/oauth2/v4/token",
        "user_info_uri": "https://www.googleapis.com/oauth2/v3/userinfo",
        "jwk_set_uri": "https://www.googleapis.com/oauth2/v3/certs",
        "issuer_uri": "https://accounts.google.com",
        "user_name_attribute": "sub",
        "client_name": "Google",
    },
    "github": {
        "scopes": ("read:user",),
        "authorization_uri": "https://github.com/login/oauth/authorize",
        "token_uri": "https://github.com/login/oauth/access_token",
        "user_info_uri": "https://api.github.com/user",
        "user_name_attribute": "id",
        "client_name": "GitHub",
    },
    "facebook": {
        "scopes": ("public_profile", "email"),
        "authorization_uri": "https://www.facebook.com/v2.8/dialog/oauth",
        "token_uri": "https://graph.facebook.com/v2.8/oauth/access_token",
        "user_info_uri": "https://graph.facebook.com/me?fields=id,name,email",
        "user_name_attribute": "id",
        "client_name": "Facebook",
    },
    "okta": {
        "scopes": ("openid", "profile", "email"),
        "user_name_attribute": "sub",
        "client_name": "Okta",
    },
}


def common_provider(provider: str, client_id: str, client_secret: str = "", **overrides: Any) -> ClientRegistration:
    """Create a registration pre-filled for a well-known provider.

    Usage::

        common_provider("google", client_id="...", client_secret="...")
        common_provider("github", registration_id="gh", client_id="...")
    """
    try:
        defaults = _COMMON_PROVIDERS[provider]
    except KeyError:
        raise InvalidConfigurationException(
            f"Unknown OAuth2 provider '{provider}'", code="UNKNOWN_PROVIDER"
        ) from None
    values: dict[str, Any] = {"registration_id": provider, **defaults, **overrides}
    return ClientRegistration(client_id=client_id, client_secret=client_secret, **values)


@runtime_checkable
class ClientRegistrationRepository(Protocol):
    def find_by_registration_id(self, registration_id: str) -> ClientRegistration | None: ...


class InMemoryClientRegistrationRepository:
    """Registrations kept in a dict keyed by registration id; iteration keeps insertion order."""

    def __init__(self, *registrations: ClientRegistration) -> None:
        if not registrations:
            raise InvalidConfigurationException("At least one client registration is required")
        self._registrations: dict[str, ClientRegistration] = {}
        for registration in registrations:
            if registration.registration_id in self._registrations:
                raise InvalidConfigurationException(
                    f"Duplicate client registration '{registration.registration_id}'"
                )
            self._registrations[registration.registration_id] = registration

    def find_by_registration_id(self, registration_id: str) -> ClientRegistration | None:
        return self._registrations.get(registration_id)

    def __iter__(self) -> Iterator[ClientRegistration]:
        return iter(list(self._registrations.values()))


@dataclass(frozen=True)
class OAuth2AuthorizationRequest:
    """The in-flight authorization request kept in the session between redirect and callback."""

    registration_id: str
    state: str
    redirect_uri: str
    scopes: tuple[str, ...] = field(default_factory=tuple)
