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
"""Security configuration properties (flysec.security.*)."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from flysec.core.config import config_properties


def _kebab(name: str) -> str:
    return name.replace("_", "-")


class _Properties(BaseModel):
    model_config = ConfigDict(alias_generator=_kebab, populate_by_name=True, extra="ignore")


class SessionProperties(_Properties):
    cookie_name: str = "FLYSEC_SESSION"
    ttl: int = 1800


class CsrfProperties(_Properties):
    repository: Literal["session", "cookie"] = "session"
    cookie_name: str = "XSRF-TOKEN"
    header_name: str = "X-XSRF-TOKEN"
    parameter_name: str = "_csrf"


class HeadersProperties(_Properties):
    hsts_max_age: int = 31536000
    hsts_include_subdomains: bool = True


@config_properties(prefix="flysec.security")
class SecurityProperties(_Properties):
    """Defaults applied by :meth:`HttpSecurity.from_config`."""

    login_page: str = "/login"
    realm_name: str = "Realm"
    session: SessionProperties = Field(default_factory=SessionProperties)
    csrf: CsrfProperties = Field(default_factory=CsrfProperties)
    headers: HeadersProperties = Field(default_factory=HeadersProperties)
    port_mappings: dict[int, int] = Field(default_factory=lambda: {80: 443, 8080: 8443})
