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
from __future__ import annotations

from collections.abc import Callable
from typing import Any

from flysec.dsl.base import SecurityDsl
from flysec.security.configurers.https_redirect import HttpsRedirectConfigurer
from flysec.security.matchers import RequestMatcher
from flysec.security.port_mapper import PortMapper


class HttpsRedirectDsl(SecurityDsl[HttpsRedirectConfigurer]):
    """Redirect insecure requests to HTTPS.

    ``https_redirect_when`` accepts matchers or one predicate function.
    Only the last call counts; without one every insecure request is
    redirected.
    """

    def __init__(self) -> None:
        super().__init__()
        self.port_mapper: PortMapper | None = None
        self._redirect_matchers: tuple[RequestMatcher, ...] | None = None
        self._redirect_matcher_function: Callable[[Any], bool] | None = None

    def https_redirect_when(self, *matchers: RequestMatcher | Callable[[Any], bool]) -> None:
        if not matchers:
            raise ValueError("At least one matcher is required")
        if len(matchers) == 1 and not isinstance(matchers[0], RequestMatcher):
            self._redirect_matchers = None
            self._redirect_matcher_function = matchers[0]
        else:
            if not all(isinstance(m, RequestMatcher) for m in matchers):
                raise TypeError("https_redirect_when() takes request matchers or a single predicate function")
            self._redirect_matcher_function = None
            self._redirect_matchers = tuple(matchers)  # type: ignore[arg-type]

    def apply(self, target: HttpsRedirectConfigurer) -> None:
        self._forward(target, port_mapper=self.port_mapper)
        if self._redirect_matchers is not None:
            target.https_redirect_when(*self._redirect_matchers)
        if self._redirect_matcher_function is not None:
            target.https_redirect_when(self._redirect_matcher_function)
