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
"""HttpBasicFilter: authenticates ``Authorization: Basic`` credentials."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any

from starlette.responses import Response

from flysec.container.ordering import HIGHEST_PRECEDENCE, order
from flysec.kernel.exceptions import AuthenticationException, BadCredentialsException
from flysec.security.authentication import AuthenticationManager
from flysec.security.context_repository import SecurityContextRepository
from flysec.security.handlers import AuthenticationEntryPoint
from flysec.web.filters import OncePerRequestFilter
from flysec.web.ports.filter import CallNext

logger = logging.getLogger(__name__)


def decode_basic_credentials(header: str) -> tuple[str, str] | None:
    """Return ``(username, password)`` from a Basic header, ``None`` if it is not Basic.

    Raises:
        BadCredentialsException: If the header is Basic but malformed.
    """
    scheme, _, encoded = header.strip().partition(" ")
    if scheme.lower() != "basic":
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise BadCredentialsException("Failed to decode basic authentication token", code="BAD_CREDENTIALS") from exc
    username, sep, password = decoded.partition(":")
    if not sep:
        raise BadCredentialsException("Invalid basic authentication token", code="BAD_CREDENTIALS")
    return username, password


@order(HIGHEST_PRECEDENCE + 240)
class HttpBasicFilter(OncePerRequestFilter):
    """Authenticates requests carrying Basic credentials.

    Requests without credentials pass through untouched; rejected
    credentials go straight to the entry point (a 401 challenge).
    """

    def __init__(
        self,
        authentication_manager: AuthenticationManager,
        entry_point: AuthenticationEntryPoint,
        repository: SecurityContextRepository,
    ) -> None:
        self.authentication_manager = authentication_manager
        self.entry_point = entry_point
        self.repository = repository

    async def do_filter(self, request: Any, call_next: CallNext) -> Response:
        header = request.headers.get("authorization")
        if not header:
            return await call_next(request)
        try:
            credentials = decode_basic_credentials(header)
            if credentials is None:
                return await call_next(request)
            context = await self.authentication_manager.authenticate(*credentials, "basic")
        except AuthenticationException as exc:
            logger.debug("Basic authentication failed: %s", exc)
            return await self.entry_point.commence(request, exc)

        request.state.security_context = context
        self.repository.save_context(context, request)
        return await call_next(request)
