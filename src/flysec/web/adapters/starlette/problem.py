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
"""RFC 7807 problem-detail responses."""

from __future__ import annotations

from collections.abc import Mapping

from starlette.responses import JSONResponse

_TITLES = {400: "Bad Request", 401: "Unauthorized", 403: "Forbidden", 502: "Bad Gateway"}


def problem_response(
    *,
    status: int,
    detail: str,
    path: str,
    title: str | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    """Build an RFC 7807 problem-detail JSON response."""
    return JSONResponse(
        {
            "type": "about:blank",
            "title": title or _TITLES.get(status, "Error"),
            "status": status,
            "detail": detail,
            "instance": path,
        },
        status_code=status,
        headers=dict(headers) if headers else None,
        media_type="application/problem+json",
    )
