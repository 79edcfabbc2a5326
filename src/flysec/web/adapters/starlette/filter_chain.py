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
"""WebFilterChainMiddleware: pure ASGI middleware running the security filters."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, cast

from starlette.datastructures import FormData
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from flysec.security.matchers import RequestMatcher
from flysec.web.ports.filter import CallNext, WebFilter

_BODY_KEY = "flysec.body"


async def read_form(request: Request) -> FormData:
    """Parse the request form while keeping the body for the application.

    Filters that inspect form fields (login, CSRF) go through here so the
    downstream app can still read the body once the chain hands it over.
    """
    body = await request.body()
    request.scope[_BODY_KEY] = body
    return await request.form()


def _replaying(scope: Scope, receive: Receive) -> Receive:
    body: bytes | None = scope.get(_BODY_KEY)
    if body is None:
        return receive
    sent = False

    async def _receive() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return _receive


class WebFilterChainMiddleware:
    """Pure ASGI middleware that executes a sorted chain of :class:`WebFilter` instances.

    Requests rejected by *security_matcher* skip the chain entirely.  Each
    filter's ``should_not_filter()`` is checked before invocation.
    """

    def __init__(
        self,
        app: ASGIApp,
        filters: Sequence[WebFilter] = (),
        security_matcher: RequestMatcher | None = None,
    ) -> None:
        self.app = app
        self._filters = list(filters)
        self._security_matcher = security_matcher

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive, send)
        if self._security_matcher is not None and not self._security_matcher.matches(request):
            await self.app(scope, receive, send)
            return

        async def _call_app(req: Any) -> Response:
            """Terminal: run downstream ASGI app and capture its response."""
            status_code = 200
            raw_headers: list[tuple[bytes, bytes]] = []
            body_parts: list[bytes] = []

            async def _intercept(message: Message) -> None:
                nonlocal status_code, raw_headers
                if message["type"] == "http.response.start":
                    status_code = message["status"]
                    raw_headers = list(message.get("headers", []))
                elif message["type"] == "http.response.body":
                    body = message.get("body", b"")
                    if body:
                        body_parts.append(body)

            await self.app(scope, _replaying(scope, receive), _intercept)

            response = Response(content=b"".join(body_parts), status_code=status_code)
            response.raw_headers[:] = raw_headers
            return response

        chain: CallNext = _call_app
        for f in reversed(self._filters):
            chain = _wrap(f, chain)

        response = cast(Response, await chain(request))
        await response(scope, receive, send)


def _wrap(web_filter: WebFilter, next_call: CallNext) -> CallNext:
    """Create a closure that conditionally invokes *web_filter*."""

    async def _inner(request: Request) -> Response:
        if web_filter.should_not_filter(request):
            return cast(Response, await next_call(request))
        return cast(Response, await web_filter.do_filter(request, next_call))

    return _inner
