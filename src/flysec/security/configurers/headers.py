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
"""Security response headers.

Five writers are on by default: ``X-Content-Type-Options``,
``X-XSS-Protection``, cache control, HSTS and ``X-Frame-Options``.
``defaults_disabled()`` turns them all off; each can also be disabled on
its own.  HPKP, CSP, ``Referrer-Policy``, ``Feature-Policy`` and
``Permissions-Policy`` are written only once configured.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from flysec.security.configurers.base import SecurityConfigurer
from flysec.security.matchers import RequestMatcher
from flysec.web.adapters.starlette.filters.header_writer_filter import HeaderWriterFilter
from flysec.web.security_headers import (
    CacheControlHeadersWriter,
    ContentSecurityPolicyHeaderWriter,
    ContentTypeOptionsHeaderWriter,
    FeaturePolicyHeaderWriter,
    HeaderWriter,
    HpkpHeaderWriter,
    HstsHeaderWriter,
    PermissionsPolicyHeaderWriter,
    ReferrerPolicy,
    ReferrerPolicyHeaderWriter,
    XFrameOptionsHeaderWriter,
    XFrameOptionsMode,
    XXssProtectionHeaderWriter,
)

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity

_H = TypeVar("_H", bound="_HeaderConfig")


class _HeaderConfig:
    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    def disable(self) -> None:
        self.enabled = False


class ContentTypeOptionsConfig(_HeaderConfig):
    pass


class CacheControlConfig(_HeaderConfig):
    pass


class XssProtectionConfig(_HeaderConfig):
    def __init__(self) -> None:
        super().__init__()
        self.xss_protection_enabled = True
        self.block = True


class HstsConfig(_HeaderConfig):
    """``Strict-Transport-Security``; max age and subdomains default from properties."""

    def __init__(self) -> None:
        super().__init__()
        self.max_age_in_seconds: int | None = None
        self.include_subdomains: bool | None = None
        self.preload = False
        self.request_matcher: RequestMatcher | None = None


class FrameOptionsConfig(_HeaderConfig):
    def __init__(self) -> None:
        super().__init__()
        self.mode = XFrameOptionsMode.DENY

    def deny(self) -> None:
        self.mode = XFrameOptionsMode.DENY

    def same_origin(self) -> None:
        self.mode = XFrameOptionsMode.SAMEORIGIN


class HpkpConfig(_HeaderConfig):
    def __init__(self) -> None:
        super().__init__(enabled=False)
        self.pins: dict[str, str] = {}
        self.max_age_in_seconds = 5184000
        self.include_subdomains = False
        self.report_only = True
        self.report_uri: str | None = None

    def add_sha256_pins(self, *pins: str) -> None:
        for pin in pins:
            self.pins[pin] = "sha256"


class ContentSecurityPolicyConfig(_HeaderConfig):
    def __init__(self) -> None:
        super().__init__(enabled=False)
        self.policy_directives = "default-src 'self'"
        self.report_only = False


class ReferrerPolicyConfig(_HeaderConfig):
    def __init__(self) -> None:
        super().__init__(enabled=False)
        self.policy = ReferrerPolicy.NO_REFERRER


class HeadersConfigurer(SecurityConfigurer):
    """Adds a :class:`HeaderWriterFilter` with the enabled writers.

    Usage::

        http.headers(lambda headers: headers
            .frame_options(lambda frame: frame.same_origin())
            .content_security_policy(lambda csp: setattr(csp, "policy_directives", "script-src 'self'")))
    """

    def __init__(self) -> None:
        super().__init__()
        self.content_type_options_config = ContentTypeOptionsConfig()
        self.xss_protection_config = XssProtectionConfig()
        self.cache_control_config = CacheControlConfig()
        self.hsts_config = HstsConfig()
        self.frame_options_config = FrameOptionsConfig()
        self.hpkp_config = HpkpConfig()
        self.content_security_policy_config = ContentSecurityPolicyConfig()
        self.referrer_policy_config = ReferrerPolicyConfig()
        self._feature_policy: str | None = None
        self._permissions_policy: str | None = None
        self._extra_writers: list[HeaderWriter] = []

    @staticmethod
    def _apply(config: _H, customizer: Callable[[_H], None] | None) -> None:
        config.enabled = True
        if customizer is not None:
            customizer(config)

    def defaults_disabled(self) -> HeadersConfigurer:
        for config in (
            self.content_type_options_config,
            self.xss_protection_config,
            self.cache_control_config,
            self.hsts_config,
            self.frame_options_config,
        ):
            config.disable()
        return self

    def content_type_options(
        self, customizer: Callable[[ContentTypeOptionsConfig], None] | None = None
    ) -> HeadersConfigurer:
        self._apply(self.content_type_options_config, customizer)
        return self

    def xss_protection(self, customizer: Callable[[XssProtectionConfig], None] | None = None) -> HeadersConfigurer:
        self._apply(self.xss_protection_config, customizer)
        return self

    def cache_control(self, customizer: Callable[[CacheControlConfig], None] | None = None) -> HeadersConfigurer:
        self._apply(self.cache_control_config, customizer)
        return self

    def http_strict_transport_security(
        self, customizer: Callable[[HstsConfig], None] | None = None
    ) -> HeadersConfigurer:
        self._apply(self.hsts_config, customizer)
        return self

    def frame_options(self, customizer: Callable[[FrameOptionsConfig], None] | None = None) -> HeadersConfigurer:
        self._apply(self.frame_options_config, customizer)
        return self

    def http_public_key_pinning(self, customizer: Callable[[HpkpConfig], None] | None = None) -> HeadersConfigurer:
        self._apply(self.hpkp_config, customizer)
        return self

    def content_security_policy(
        self, customizer: Callable[[ContentSecurityPolicyConfig], None] | None = None
    ) -> HeadersConfigurer:
        self._apply(self.content_security_policy_config, customizer)
        return self

    def referrer_policy(self, customizer: Callable[[ReferrerPolicyConfig], None] | None = None) -> HeadersConfigurer:
        self._apply(self.referrer_policy_config, customizer)
        return self

    def feature_policy(self, policy_directives: str) -> HeadersConfigurer:
        self._feature_policy = policy_directives
        return self

    def permissions_policy(self, policy: str) -> HeadersConfigurer:
        self._permissions_policy = policy
        return self

    def add_header_writer(self, writer: HeaderWriter) -> HeadersConfigurer:
        self._extra_writers.append(writer)
        return self

    def writers(self, http: HttpSecurity) -> list[HeaderWriter]:
        """The header writers in the order they run."""
        props = http.properties.headers
        writers: list[HeaderWriter] = []
        if self.content_type_options_config.enabled:
            writers.append(ContentTypeOptionsHeaderWriter())
        if self.xss_protection_config.enabled:
            xss = self.xss_protection_config
            writers.append(XXssProtectionHeaderWriter(xss.xss_protection_enabled, xss.block))
        if self.cache_control_config.enabled:
            writers.append(CacheControlHeadersWriter())
        if self.hsts_config.enabled:
            hsts = self.hsts_config
            writers.append(
                HstsHeaderWriter(
                    props.hsts_max_age if hsts.max_age_in_seconds is None else hsts.max_age_in_seconds,
                    props.hsts_include_subdomains if hsts.include_subdomains is None else hsts.include_subdomains,
                    hsts.preload,
                    hsts.request_matcher,
                )
            )
        if self.frame_options_config.enabled:
            writers.append(XFrameOptionsHeaderWriter(self.frame_options_config.mode))
        if self.hpkp_config.enabled:
            hpkp = self.hpkp_config
            writers.append(
                HpkpHeaderWriter(
                    hpkp.pins, hpkp.max_age_in_seconds, hpkp.include_subdomains, hpkp.report_only, hpkp.report_uri
                )
            )
        if self.content_security_policy_config.enabled:
            csp = self.content_security_policy_config
            writers.append(ContentSecurityPolicyHeaderWriter(csp.policy_directives, csp.report_only))
        if self.referrer_policy_config.enabled:
            writers.append(ReferrerPolicyHeaderWriter(self.referrer_policy_config.policy))
        if self._feature_policy is not None:
            writers.append(FeaturePolicyHeaderWriter(self._feature_policy))
        if self._permissions_policy is not None:
            writers.append(PermissionsPolicyHeaderWriter(self._permissions_policy))
        return writers + self._extra_writers

    def configure(self, http: HttpSecurity) -> None:
        writers = self.writers(http)
        if writers:
            http.add_filter(HeaderWriterFilter(writers))
