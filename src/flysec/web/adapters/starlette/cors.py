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
"""CorsDispatchMiddleware: runs Starlette's CORSMiddleware per matching config."""

from __future__ import annotations

from typing import Any

from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from flysec.web.cors import CORSConfig, CorsConfigurationSource


class CorsDispatchMiddleware:
    """Applies the CORS policy a :class:`CorsConfigurationSource` selects.

    Requests without a matching configuration are passed through without
    any CORS handling.  One ``CORSMiddleware`` is built per distinct
    policy and reused.
    """

    def __init__(self, app: ASGIApp, source: CorsConfigurationSource) -> None:
        self.app = app
        self._source = source
        self._delegates: dict[tuple[Any, ...], CORSMiddleware] = {}

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        config = self._source.get_cors_configuration(Request(scope))
        if config is None:
            await self.app(scope, receive, send)
            return
        await self._delegate(config)(scope, receive, send)

    @property
    def delegate_count(self) -> int:
        return len(self._delegates)

    def _delegate(self, config: CORSConfig) -> CORSMiddleware:
        # keyed by policy so equal configs built per request share one delegate
        key = (
            tuple(config.allowed_origins),
            tuple(config.allowed_methods),
            tuple(config.allowed_headers),
            config.allow_credentials,
            tuple(config.exposed_headers),
            config.max_age,
        )
        delegate = self._delegates.get(key)
        if delegate is None:
            delegate = CORSMiddleware(
                self.app,
                allow_origins=config.allowed_origins,
                allow_methods=config.allowed_methods,
                allow_headers=config.allowed_headers,
                allow_credentials=config.allow_credentials,
                expose_headers=config.exposed_headers,
                max_age=config.max_age,
            )
            self._delegates[key] = delegate
        return delegate
