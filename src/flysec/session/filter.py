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
"""SessionFilter: loads and persists HTTP sessions via cookies."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from flysec.container.ordering import HIGHEST_PRECEDENCE, order
from flysec.session.ports.outbound import SessionStore
from flysec.session.session import HttpSession
from flysec.web.filters import OncePerRequestFilter
from flysec.web.ports.filter import CallNext

logger = logging.getLogger(__name__)

DEFAULT_COOKIE_NAME = "FLYSEC_SESSION"
DEFAULT_TTL = 1800  # 30 minutes


@order(HIGHEST_PRECEDENCE + 150)
class SessionFilter(OncePerRequestFilter):
    """Manages server-side sessions via a configurable cookie.

    Attaches an ``HttpSession`` to ``request.state.session``.  A new
    session is only stored (and its cookie only sent) once something is
    written to it, so stateless requests never create sessions.
    """

    def __init__(
        self,
        store: SessionStore,
        cookie_name: str = DEFAULT_COOKIE_NAME,
        ttl: int = DEFAULT_TTL,
    ) -> None:
        self._store = store
        self._cookie_name = cookie_name
        self._ttl = ttl

    @property
    def cookie_name(self) -> str:
        return self._cookie_name

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        session = await self._load_or_create_session(request)
        request.state.session = session

        response = await call_next(request)
        await self._persist_session(session)

        path = request.scope.get("root_path") or "/"
        if session.invalidated:
            if not session.is_new:
                response.delete_cookie(key=self._cookie_name, path=path)
        elif session.is_new and session.modified:
            response.set_cookie(
                key=self._cookie_name,
                value=session.id,
                httponly=True,
                samesite="lax",
                secure=request.url.scheme == "https",
                max_age=self._ttl,
                path=path,
            )
        return response

    async def _load_or_create_session(self, request: Any) -> HttpSession:
        session_id = request.cookies.get(self._cookie_name)
        if session_id:
            data = await self._store.get(session_id)
            if data is not None:
                return HttpSession(session_id, data)
            logger.debug("Session %s expired or unknown, starting a new one", session_id)
        return HttpSession(uuid.uuid4().hex, is_new=True)

    async def _persist_session(self, session: HttpSession) -> None:
        if session.invalidated:
            await self._store.delete(session.id)
        elif session.modified:
            await self._store.save(session.id, session.get_data(), self._ttl)
