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
"""HeaderWriterFilter: adds the configured security headers to every response."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from starlette.responses import Response

from flysec.container.ordering import HIGHEST_PRECEDENCE, order
from flysec.web.filters import OncePerRequestFilter
from flysec.web.ports.filter import CallNext
from flysec.web.security_headers import HeaderWriter


@order(HIGHEST_PRECEDENCE + 100)
class HeaderWriterFilter(OncePerRequestFilter):
    def __init__(self, writers: Sequence[HeaderWriter]) -> None:
        self.writers = list(writers)

    async def do_filter(self, request: Any, call_next: CallNext) -> Response:
        response: Response = await call_next(request)
        for writer in self.writers:
            writer.write_headers(request, response)
        return response
