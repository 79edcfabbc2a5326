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
"""``headers`` block: which security response headers are written.

Nested blocks are applied in the order they were declared; a nested
block that is declared turns its header on even if ``defaults_disabled``
was called::

    with dsl.headers() as headers:
        headers.defaults_disabled = True
        headers.content_security_policy(policy_directives="script-src 'self'")
        with headers.frame_options() as frame_options:
            frame_options.same_origin()
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from flysec.dsl.base import SecurityDsl, configure_block
from flysec.dsl.headers.header_blocks import (
    CacheControlDsl,
    ContentSecurityPolicyDsl,
    ContentTypeOptionsDsl,
    FrameOptionsDsl,
    HttpPublicKeyPinningDsl,
    HttpStrictTransportSecurityDsl,
    ReferrerPolicyDsl,
    XssProtectionConfigDsl,
)
from flysec.security.configurers.headers import HeadersConfigurer


class HeadersDsl(SecurityDsl[HeadersConfigurer]):
    """Security header settings.

    Attributes:
        defaults_disabled: Start from no headers instead of the default set.
    """

    def __init__(self) -> None:
        super().__init__()
        self.defaults_disabled: bool | None = None
        self._feature_policy: str | None = None
        self._permissions_policy: str | None = None
        self._steps: list[Callable[[HeadersConfigurer], Any]] = []

    def content_type_options(
        self, configure: Callable[[ContentTypeOptionsDsl], None] | None = None, **properties: Any
    ) -> ContentTypeOptionsDsl:
        block = configure_block(ContentTypeOptionsDsl(), configure, properties)
        self._steps.append(lambda headers: headers.content_type_options(block.get()))
        return block

    def xss_protection(
        self, configure: Callable[[XssProtectionConfigDsl], None] | None = None, **properties: Any
    ) -> XssProtectionConfigDsl:
        block = configure_block(XssProtectionConfigDsl(), configure, properties)
        self._steps.append(lambda headers: headers.xss_protection(block.get()))
        return block

    def cache_control(
        self, configure: Callable[[CacheControlDsl], None] | None = None, **properties: Any
    ) -> CacheControlDsl:
        block = configure_block(CacheControlDsl(), configure, properties)
        self._steps.append(lambda headers: headers.cache_control(block.get()))
        return block

    def http_strict_transport_security(
        self, configure: Callable[[HttpStrictTransportSecurityDsl], None] | None = None, **properties: Any
    ) -> HttpStrictTransportSecurityDsl:
        block = configure_block(HttpStrictTransportSecurityDsl(), configure, properties)
        self._steps.append(lambda headers: headers.http_strict_transport_security(block.get()))
        return block

    def frame_options(
        self, configure: Callable[[FrameOptionsDsl], None] | None = None, **properties: Any
    ) -> FrameOptionsDsl:
        block = configure_block(FrameOptionsDsl(), configure, properties)
        self._steps.append(lambda headers: headers.frame_options(block.get()))
        return block

    def http_public_key_pinning(
        self, configure: Callable[[HttpPublicKeyPinningDsl], None] | None = None, **properties: Any
    ) -> HttpPublicKeyPinningDsl:
        block = configure_block(HttpPublicKeyPinningDsl(), configure, properties)
        self._steps.append(lambda headers: headers.http_public_key_pinning(block.get()))
        return block

    def content_security_policy(
        self, configure: Callable[[ContentSecurityPolicyDsl], None] | None = None, **properties: Any
    ) -> ContentSecurityPolicyDsl:
        block = configure_block(ContentSecurityPolicyDsl(), configure, properties)
        self._steps.append(lambda headers: headers.content_security_policy(block.get()))
        return block

    def referrer_policy(
        self, configure: Callable[[ReferrerPolicyDsl], None] | None = None, **properties: Any
    ) -> ReferrerPolicyDsl:
        block = configure_block(ReferrerPolicyDsl(), configure, properties)
        self._steps.append(lambda headers: headers.referrer_policy(block.get()))
        return block

    def feature_policy(self, policy_directives: str) -> None:
        self._feature_policy = policy_directives

    def permissions_policy(self, policy: str) -> None:
        self._permissions_policy = policy

    def apply(self, target: HeadersConfigurer) -> None:
        if self.defaults_disabled:
            target.defaults_disabled()
        for step in self._steps:
            step(target)
        self._forward(target, feature_policy=self._feature_policy, permissions_policy=self._permissions_policy)
