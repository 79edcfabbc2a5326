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
"""Security response header writers.

Each writer adds its header(s) to a response unless the application already
set them.  The ``HeaderWriterFilter`` runs the configured writers after the
rest of the chain has produced a response.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from flysec.security.matchers import RequestMatcher, SecureRequestMatcher


@runtime_checkable
class HeaderWriter(Protocol):
    def write_headers(self, request: Any, response: Any) -> None: ...


def _set_if_absent(response: Any, name: str, value: str) -> None:
    if name not in response.headers:
        response.headers[name] = value


class StaticHeadersWriter:
    """Writes a fixed set of headers."""

    def __init__(self, headers: Mapping[str, str]) -> None:
        self.headers = dict(headers)

    def write_headers(self, request: Any, response: Any) -> None:
        for name, value in self.headers.items():
            _set_if_absent(response, name, value)


class ContentTypeOptionsHeaderWriter(StaticHeadersWriter):
    def __init__(self) -> None:
        super().__init__({"X-Content-Type-Options": "nosniff"})


class XXssProtectionHeaderWriter:
    """``X-XSS-Protection``: ``1; mode=block`` by default, ``0`` when disabled."""

    def __init__(self, enabled: bool = True, block: bool = True) -> None:
        self.enabled = enabled
        self.block = block

    @property
    def value(self) -> str:
        if not self.enabled:
            return "0"
        return "1; mode=block" if self.block else "1"

    def write_headers(self, request: Any, response: Any) -> None:
        _set_if_absent(response, "X-XSS-Protection", self.value)


class CacheControlHeadersWriter:
    """Prevents caching unless the application set its own cache headers."""

    HEADERS = {
        "Cache-Control": "no-cache, no-store, max-age=0, must-revalidate",
        "Pragma": "no-cache",
        "Expires": "0",
    }

    def write_headers(self, request: Any, response: Any) -> None:
        if response.status_code == 304:
            return
        if any(name in response.headers for name in self.HEADERS):
            return
        for name, value in self.HEADERS.items():
            response.headers[name] = value


class HstsHeaderWriter:
    """``Strict-Transport-Security``, written for secure requests only by default.

    Args:
        max_age_in_seconds: The ``max-age`` directive.
        include_subdomains: Adds ``includeSubDomains``.
        preload: Adds ``preload``.
        request_matcher: Which requests get the header.
    """

    def __init__(
        self,
        max_age_in_seconds: int = 31536000,
        include_subdomains: bool = True,
        preload: bool = False,
        request_matcher: RequestMatcher | None = None,
    ) -> None:
        if max_age_in_seconds < 0:
            raise ValueError(f"max_age_in_seconds must be non-negative, got {max_age_in_seconds}")
        self.max_age_in_seconds = max_age_in_seconds
        self.include_subdomains = include_subdomains
        self.preload = preload
        self.request_matcher = request_matcher or SecureRequestMatcher()

    @property
    def value(self) -> str:
        value = f"max-age={self.max_age_in_seconds}"
        if self.include_subdomains:
            value += " ; includeSubDomains"
        if self.preload:
            value += " ; preload"
        return value

    def write_headers(self, request: Any, response: Any) -> None:
        if self.request_matcher.matches(request):
            _set_if_absent(response, "Strict-Transport-Security", self.value)


class XFrameOptionsMode(str, Enum):
    DENY = "DENY"
    SAMEORIGIN = "SAMEORIGIN"


class XFrameOptionsHeaderWriter:
    def __init__(self, mode: XFrameOptionsMode = XFrameOptionsMode.DENY) -> None:
        self.mode = XFrameOptionsMode(mode)

    def write_headers(self, request: Any, response: Any) -> None:
        _set_if_absent(response, "X-Frame-Options", self.mode.value)


class HpkpHeaderWriter:
    """``Public-Key-Pins`` (or ``-Report-Only``); nothing is written without pins.

    Args:
        pins: Mapping of base64 fingerprint to hash algorithm
            (``{"d6qzRu9z...=": "sha256"}``).
        max_age_in_seconds: The ``max-age`` directive (60 days by default).
        include_subdomains: Adds ``includeSubDomains``.
        report_only: Use the ``Public-Key-Pins-Report-Only`` header.
        report_uri: Adds ``report-uri``.
    """

    def __init__(
        self,
        pins: Mapping[str, str] | None = None,
        max_age_in_seconds: int = 5184000,
        include_subdomains: bool = False,
        report_only: bool = True,
        report_uri: str | None = None,
    ) -> None:
        if max_age_in_seconds < 0:
            raise ValueError(f"max_age_in_seconds must be non-negative, got {max_age_in_seconds}")
        self.pins = dict(pins or {})
        self.max_age_in_seconds = max_age_in_seconds
        self.include_subdomains = include_subdomains
        self.report_only = report_only
        self.report_uri = report_uri
        self._secure = SecureRequestMatcher()

    def add_sha256_pins(self, *pins: str) -> None:
        for pin in pins:
            self.pins[pin] = "sha256"

    @property
    def header_name(self) -> str:
        return "Public-Key-Pins-Report-Only" if self.report_only else "Public-Key-Pins"

    @property
    def value(self) -> str:
        parts = [f"max-age={self.max_age_in_seconds}"]
        parts += [f'pin-{algorithm}="{pin}"' for pin, algorithm in self.pins.items()]
        if self.include_subdomains:
            parts.append("includeSubDomains")
        if self.report_uri:
            parts.append(f'report-uri="{self.report_uri}"')
        return " ; ".join(parts)

    def write_headers(self, request: Any, response: Any) -> None:
        if not self.pins or not self._secure.matches(request):
            return
        _set_if_absent(response, self.header_name, self.value)


class ContentSecurityPolicyHeaderWriter:
    def __init__(self, policy_directives: str, report_only: bool = False) -> None:
        if not policy_directives or not policy_directives.strip():
            raise ValueError("policy_directives cannot be empty")
        self.policy_directives = policy_directives
        self.report_only = report_only

    @property
    def header_name(self) -> str:
        return "Content-Security-Policy-Report-Only" if self.report_only else "Content-Security-Policy"

    def write_headers(self, request: Any, response: Any) -> None:
        _set_if_absent(response, self.header_name, self.policy_directives)


class ReferrerPolicy(str, Enum):
    NO_REFERRER = "no-referrer"
    NO_REFERRER_WHEN_DOWNGRADE = "no-referrer-when-downgrade"
    SAME_ORIGIN = "same-origin"
    ORIGIN = "origin"
    STRICT_ORIGIN = "strict-origin"
    ORIGIN_WHEN_CROSS_ORIGIN = "origin-when-cross-origin"
    STRICT_ORIGIN_WHEN_CROSS_ORIGIN = "strict-origin-when-cross-origin"
    UNSAFE_URL = "unsafe-url"


class ReferrerPolicyHeaderWriter:
    def __init__(self, policy: ReferrerPolicy = ReferrerPolicy.NO_REFERRER) -> None:
        self.policy = ReferrerPolicy(policy)

    def write_headers(self, request: Any, response: Any) -> None:
        _set_if_absent(response, "Referrer-Policy", self.policy.value)


class FeaturePolicyHeaderWriter(StaticHeadersWriter):
    def __init__(self, policy_directives: str) -> None:
        super().__init__({"Feature-Policy": policy_directives})


class PermissionsPolicyHeaderWriter(StaticHeadersWriter):
    def __init__(self, policy: str) -> None:
        super().__init__({"Permissions-Policy": policy})
