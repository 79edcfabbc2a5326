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

from flysec.dsl.base import SecurityDsl
from flysec.security.configurers.cors import CorsConfigurer
from flysec.web.cors import CorsConfigurationSource


class CorsDsl(SecurityDsl[CorsConfigurer]):
    """CORS settings.  Without a ``configuration_source`` a shared one must be registered."""

    def __init__(self) -> None:
        super().__init__()
        self.configuration_source: CorsConfigurationSource | None = None

    def apply(self, target: CorsConfigurer) -> None:
        self._forward(target, configuration_source=self.configuration_source)
