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
"""HttpsRedirectFilter: sends insecure requests to their HTTPS equivalent."""

from __future__ import annotations

import logging
from typing import Any

from starlette.responses import RedirectResponse, Response

from flysec.container.ordering import HIGHEST_PRECEDENCE, order
from flysec.kernel.exceptions import InvalidConfigurationException
from flysec.security.matchers import RequestMatcher, SecureRequestMatcher
from flysec.security.port_mapper import PortMapper
from flysec.web.filters import OncePerRequestFilter
from flysec.web.ports.filter import CallNext

logger = logging.getLogger(__name__)


@order(HIGHEST_PRECEDENCE + 50)
class HttpsRedirectFilter(OncePerRequestFilter):
    """Redirects (302) insecure requests accepted by *request_matcher*.

    Without a matcher every insecure request is redirected.
    """

    def __init__(self, port_mapper: PortMapper | None = None, request_matcher: RequestMatcher | None = None) -> None:
        self.port_mapper = port_mapper or PortMapper()
        self.request_matcher = request_matcher
        self._secure = SecureRequestMatcher()

    def should_not_filter(self, request: Any) -> bool:
        if self._secure.matches(request):
            return True
        return self.request_matcher is not None and not self.request_matcher.matches(request)

    async def do_filter(self, request: Any, call_next: CallNext) -> Response:
        url = request.url
        port = url.port
        netloc = url.hostname or ""
        if port is not None:
            https_port = self.port_mapper.https_port(port)
            if https_port is None:
                raise InvalidConfigurationException(
                    f"Unable to redirect to HTTPS: no port mapping for port {port}", code="NO_PORT_MAPPING"
                )
            if https_port != 443:
                netloc = f"{netloc}:{https_port}"
        location = str(url.replace(scheme="https", netloc=netloc))
        logger.debug("Redirecting %s to %s", url, location)
        return RedirectResponse(url=location, status_code=302)
