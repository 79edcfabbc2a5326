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
"""Configurer base class.

Each security concern (form login, CSRF, headers, ...) is configured by one
configurer registered on :class:`~flysec.security.http_security.HttpSecurity`.
Building runs two phases over every enabled configurer, in registration
order: ``init`` (publish shared objects, register entry points and
permit-all rules), then ``configure`` (create filters).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity


class SecurityConfigurer:
    """Base class for the per-concern configurers."""

    def __init__(self) -> None:
        self.disabled = False

    def disable(self) -> None:
        """Remove this concern from the built filter chain."""
        self.disabled = True

    def init(self, http: HttpSecurity) -> None:
        """Phase one: runs for every configurer before any ``configure``."""

    def configure(self, http: HttpSecurity) -> None:
        """Phase two: add filters to *http*."""
