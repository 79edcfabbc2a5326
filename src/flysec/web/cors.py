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
"""CORS configuration and per-request configuration sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from flysec.security.matchers import PathPatternRequestMatcher


@dataclass(frozen=True)
class CORSConfig:
    """Configuration for Cross-Origin Resource Sharing."""

    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    allowed_methods: list[str] = field(default_factory=lambda: ["GET"])
    allowed_headers: list[str] = field(default_factory=lambda: ["*"])
    allow_credentials: bool = False
    exposed_headers: list[str] = field(default_factory=list)
    max_age: int = 600  # seconds


@runtime_checkable
class CorsConfigurationSource(Protocol):
    """Looks up the CORS configuration that applies to a request."""

    def get_cors_configuration(self, request: Any) -> CORSConfig | None: ...


class UrlBasedCorsConfigurationSource:
    """Selects a :class:`CORSConfig` by path pattern, first registration wins.

    Usage::

        source = UrlBasedCorsConfigurationSource()
        source.register_cors_configuration("/api/**", CORSConfig(allowed_origins=["https://app.example"]))
    """

    def __init__(self) -> None:
        self._configurations: list[tuple[PathPatternRequestMatcher, CORSConfig]] = []

    def register_cors_configuration(self, pattern: str, config: CORSConfig) -> None:
        self._configurations.append((PathPatternRequestMatcher(pattern), config))

    def get_cors_configuration(self, request: Any) -> CORSConfig | None:
        for matcher, config in self._configurations:
            if matcher.matches(request):
                return config
        return None
