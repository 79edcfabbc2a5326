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

from typing import TYPE_CHECKING

from flysec.kernel.exceptions import InvalidConfigurationException
from flysec.security.configurers.base import SecurityConfigurer
from flysec.web.cors import CorsConfigurationSource

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity


class CorsConfigurer(SecurityConfigurer):
    """Answers CORS requests ahead of the filter chain.

    Uses the given configuration source, else a shared
    :class:`CorsConfigurationSource` registered on the builder.
    """

    def __init__(self) -> None:
        super().__init__()
        self._source: CorsConfigurationSource | None = None

    def configuration_source(self, source: CorsConfigurationSource) -> CorsConfigurer:
        self._source = source
        return self

    def configure(self, http: HttpSecurity) -> None:
        source = self._source or http.get_shared_object(CorsConfigurationSource)
        if source is None:
            raise InvalidConfigurationException(
                "CORS is enabled but no CorsConfigurationSource was configured",
                code="MISSING_CORS_SOURCE",
            )
        http.cors_configuration_source = source
