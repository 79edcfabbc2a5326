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
"""Maps HTTP ports to their HTTPS counterparts for redirects."""

from __future__ import annotations

from collections.abc import Mapping

DEFAULT_PORT_MAPPINGS: dict[int, int] = {80: 443, 8080: 8443}


class PortMapper:
    """Looks up the HTTPS port to redirect an insecure request to.

    Args:
        mappings: ``{http_port: https_port}``; defaults to ``80 -> 443`` and
            ``8080 -> 8443``.
    """

    def __init__(self, mappings: Mapping[int, int] | None = None) -> None:
        self._mappings = dict(DEFAULT_PORT_MAPPINGS if mappings is None else mappings)

    @property
    def mappings(self) -> dict[int, int]:
        return dict(self._mappings)

    def https_port(self, http_port: int) -> int | None:
        return self._mappings.get(http_port)

    def http_port(self, https_port: int) -> int | None:
        for http, https in self._mappings.items():
            if https == https_port:
                return http
        return None
