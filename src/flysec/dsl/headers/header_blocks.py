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
"""Nested blocks of the ``headers`` block, one per response header."""

from __future__ import annotations

from datetime import timedelta

from flysec.dsl.base import SecurityDsl
from flysec.security.configurers.headers import (
    CacheControlConfig,
    ContentSecurityPolicyConfig,
    ContentTypeOptionsConfig,
    FrameOptionsConfig,
    HpkpConfig,
    HstsConfig,
    ReferrerPolicyConfig,
    XssProtectionConfig,
)
from flysec.security.matchers import RequestMatcher
from flysec.web.security_headers import ReferrerPolicy, XFrameOptionsMode


class ContentTypeOptionsDsl(SecurityDsl[ContentTypeOptionsConfig]):
    """``X-Content-Type-Options: nosniff``; can only be disabled."""


class CacheControlDsl(SecurityDsl[CacheControlConfig]):
    """``Cache-Control``, ``Pragma`` and ``Expires`` no-cache headers; can only be disabled."""


class XssProtectionConfigDsl(SecurityDsl[XssProtectionConfig]):
    def __init__(self) -> None:
        super().__init__()
        self.block: bool | None = None
        self.xss_protection_enabled: bool | None = None

    def apply(self, target: XssProtectionConfig) -> None:
        self._assign(target, block=self.block, xss_protection_enabled=self.xss_protection_enabled)


class HttpStrictTransportSecurityDsl(SecurityDsl[HstsConfig]):
    """``Strict-Transport-Security``, written on secure requests only.

    Attributes:
        max_age_in_seconds: ``max-age`` directive.
        request_matcher: Narrows the requests that get the header.
        include_subdomains: Adds ``includeSubDomains``.
        preload: Adds ``preload``.
    """

    def __init__(self) -> None:
        super().__init__()
        self.max_age_in_seconds: int | None = None
        self.request_matcher: RequestMatcher | None = None
        self.include_subdomains: bool | None = None
        self.preload: bool | None = None

    @property
    def max_age(self) -> timedelta | None:
        return None if self.max_age_in_seconds is None else timedelta(seconds=self.max_age_in_seconds)

    @max_age.setter
    def max_age(self, value: timedelta) -> None:
        self.max_age_in_seconds = int(value.total_seconds())

    def apply(self, target: HstsConfig) -> None:
        self._assign(
            target,
            max_age_in_seconds=self.max_age_in_seconds,
            request_matcher=self.request_matcher,
            include_subdomains=self.include_subdomains,
            preload=self.preload,
        )


class FrameOptionsDsl(SecurityDsl[FrameOptionsConfig]):
    def __init__(self) -> None:
        super().__init__()
        self.mode: XFrameOptionsMode | None = None

    def deny(self) -> None:
        self.mode = XFrameOptionsMode.DENY

    def same_origin(self) -> None:
        self.mode = XFrameOptionsMode.SAMEORIGIN

    def apply(self, target: FrameOptionsConfig) -> None:
        self._assign(target, mode=self.mode)


class HttpPublicKeyPinningDsl(SecurityDsl[HpkpConfig]):
    """``Public-Key-Pins`` (or ``-Report-Only``); *pins* maps pin to hash algorithm."""

    def __init__(self) -> None:
        super().__init__()
        self.pins: dict[str, str] | None = None
        self.max_age_in_seconds: int | None = None
        self.include_subdomains: bool | None = None
        self.report_only: bool | None = None
        self.report_uri: str | None = None

    def apply(self, target: HpkpConfig) -> None:
        self._assign(
            target,
            max_age_in_seconds=self.max_age_in_seconds,
            include_subdomains=self.include_subdomains,
            report_only=self.report_only,
            report_uri=self.report_uri,
        )
        if self.pins is not None:
            target.pins = dict(self.pins)


class ContentSecurityPolicyDsl(SecurityDsl[ContentSecurityPolicyConfig]):
    def __init__(self) -> None:
        super().__init__()
        self.policy_directives: str | None = None
        self.report_only: bool | None = None

    def apply(self, target: ContentSecurityPolicyConfig) -> None:
        self._assign(target, policy_directives=self.policy_directives, report_only=self.report_only)


class ReferrerPolicyDsl(SecurityDsl[ReferrerPolicyConfig]):
    def __init__(self) -> None:
        super().__init__()
        self.policy: ReferrerPolicy | None = None

    def apply(self, target: ReferrerPolicyConfig) -> None:
        self._assign(target, policy=self.policy)
