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
"""Request cache: remembers the request that triggered a login."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from flysec.security.matchers import (
    AndRequestMatcher,
    FunctionRequestMatcher,
    NegatedRequestMatcher,
    RequestMatcher,
    xhr_request,
)

SAVED_REQUEST_KEY = "SAVED_REQUEST"


@dataclass(frozen=True)
class SavedRequest:
    """The URL and method of a request interrupted by authentication."""

    url: str
    method: str = "GET"


@runtime_checkable
class RequestCache(Protocol):
    def save_request(self, request: Any) -> None: ...

    def get_request(self, request: Any) -> SavedRequest | None: ...

    def remove_request(self, request: Any) -> None: ...

    def get_matching_request(self, request: Any) -> SavedRequest | None:
        """Return and forget the saved request if *request* is its replay."""
        ...


def _relative_url(request: Any) -> str:
    url = request.url.path
    if request.url.query:
        url += f"?{request.url.query}"
    return url


class HttpSessionRequestCache:
    """Stores the saved request in the HTTP session.

    Only non-XHR ``GET`` requests are saved unless a different
    *request_matcher* is given.
    """

    def __init__(self, request_matcher: RequestMatcher | None = None, attribute_name: str = SAVED_REQUEST_KEY) -> None:
        self.request_matcher = request_matcher or AndRequestMatcher(
            FunctionRequestMatcher(lambda request: request.method == "GET"),
            NegatedRequestMatcher(xhr_request),
        )
        self.attribute_name = attribute_name

    def save_request(self, request: Any) -> None:
        session = getattr(request.state, "session", None)
        if session is None or not self.request_matcher.matches(request):
            return
        session.set_attribute(self.attribute_name, SavedRequest(_relative_url(request), request.method))

    def get_request(self, request: Any) -> SavedRequest | None:
        session = getattr(request.state, "session", None)
        if session is None:
            return None
        saved = session.get_attribute(self.attribute_name)
        return saved if isinstance(saved, SavedRequest) else None

    def remove_request(self, request: Any) -> None:
        session = getattr(request.state, "session", None)
        if session is not None:
            session.remove_attribute(self.attribute_name)

    def get_matching_request(self, request: Any) -> SavedRequest | None:
        saved = self.get_request(request)
        if saved is None or saved.url != _relative_url(request) or saved.method != request.method:
            return None
        self.remove_request(request)
        return saved


class NullRequestCache:
    """Never saves anything."""

    def save_request(self, request: Any) -> None:
        return None

    def get_request(self, request: Any) -> SavedRequest | None:
        return None

    def remove_request(self, request: Any) -> None:
        return None

    def get_matching_request(self, request: Any) -> SavedRequest | None:
        return None
