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
"""BearerTokenFilter: authenticates OAuth2 bearer tokens (RFC 6750)."""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

from starlette.responses import Response

from flysec.container.ordering import HIGHEST_PRECEDENCE, order
from flysec.kernel.exceptions import AuthenticationException, ExternalServiceException, InvalidTokenException
from flysec.security.context import SecurityContext
from flysec.security.handlers import AuthenticationEntryPoint
from flysec.web.filters import OncePerRequestFilter
from flysec.web.ports.filter import CallNext

logger = logging.getLogger(__name__)

_BEARER_RE = re.compile(r"^Bearer (?P<token>[a-zA-Z0-9\-._~+/]+=*)$", re.IGNORECASE)

TokenAuthenticator = Callable[[str], Awaitable[SecurityContext]]


@runtime_checkable
class BearerTokenResolver(Protocol):
    def resolve(self, request: Any) -> str | None: ...


class DefaultBearerTokenResolver:
    """Reads the token from the ``Authorization`` header.

    Args:
        allow_uri_query_parameter: Also accept ``?access_token=...``.
        bearer_token_header_name: Header to read instead of ``Authorization``.
    """

    def __init__(
        self, allow_uri_query_parameter: bool = False, bearer_token_header_name: str = "Authorization"
    ) -> None:
        self.allow_uri_query_parameter = allow_uri_query_parameter
        self.bearer_token_header_name = bearer_token_header_name

    def resolve(self, request: Any) -> str | None:
        header = request.headers.get(self.bearer_token_header_name)
        from_header = None
        if header and header.lower().startswith("bearer"):
            match = _BEARER_RE.match(header)
            if match is None:
                raise InvalidTokenException("Bearer token is malformed", code="INVALID_TOKEN")
            from_header = match.group("token")

        from_query = request.query_params.get("access_token") if self.allow_uri_query_parameter else None
        if from_header and from_query:
            raise InvalidTokenException("Found multiple bearer tokens in the request", code="INVALID_REQUEST")
        return from_header or from_query


@order(HIGHEST_PRECEDENCE + 250)
class BearerTokenFilter(OncePerRequestFilter):
    """Authenticates bearer tokens with a JWT decoder or an introspector."""

    def __init__(
        self,
        authenticator: TokenAuthenticator,
        entry_point: AuthenticationEntryPoint,
        resolver: BearerTokenResolver | None = None,
    ) -> None:
        self.authenticator = authenticator
        self.entry_point = entry_point
        self.resolver = resolver or DefaultBearerTokenResolver()

    async def do_filter(self, request: Any, call_next: CallNext) -> Response:
        try:
            token = self.resolver.resolve(request)
            if token is None:
                return await call_next(request)
            context = await self.authenticator(token)
        except AuthenticationException as exc:
            logger.debug("Bearer token rejected: %s", exc)
            return await self.entry_point.commence(request, exc)
        except ExternalServiceException as exc:
            logger.warning("Bearer token could not be verified: %s", exc)
            return await self.entry_point.commence(request, InvalidTokenException(str(exc), code="INVALID_TOKEN"))

        request.state.security_context = context
        return await call_next(request)
