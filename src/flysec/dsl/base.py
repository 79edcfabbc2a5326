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
"""Base class for DSL blocks.

A block is a plain holder of optional settings.  Nothing is forwarded
until :meth:`SecurityDsl.get` is called; the customizer it returns passes
on only the settings that were given, so every other setting keeps the
default of the object it configures.  ``disable()`` is forwarded last.

Blocks work as context managers::

    with dsl.form_login() as form_login:
        form_login.login_page = "/log-in"

or with a configuration function, or with keyword arguments::

    dsl.form_login(lambda form_login: form_login.default_success_url("/home"))
    dsl.form_login(login_page="/log-in")
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Generic, TypeVar

T = TypeVar("T")
D = TypeVar("D", bound="SecurityDsl[Any]")


class SecurityDsl(Generic[T]):
    """Collects settings for one configuration target of type ``T``."""

    def __init__(self) -> None:
        self._disabled = False

    def __enter__(self: D) -> D:
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def disable(self) -> None:
        self._disabled = True

    def get(self) -> Callable[[T], None]:
        """Return the customizer that forwards the settings to a target."""

        def customize(target: T) -> None:
            self.apply(target)
            if self._disabled:
                target.disable()  # type: ignore[attr-defined]

        return customize

    def apply(self, target: T) -> None:
        """Forward every setting that was given to *target*."""

    @staticmethod
    def _forward(target: Any, **settings: Any) -> None:
        # call target.<name>(value) for each setting that is not None
        for name, value in settings.items():
            if value is not None:
                getattr(target, name)(value)

    @staticmethod
    def _assign(target: Any, **settings: Any) -> None:
        # like _forward, for targets configured through plain attributes
        for name, value in settings.items():
            if value is not None:
                setattr(target, name, value)


def configure_block(
    dsl: D,
    configure: Callable[[D], None] | None = None,
    properties: Mapping[str, Any] | None = None,
) -> D:
    """Apply keyword *properties*, then *configure*, to a new block."""
    for name, value in (properties or {}).items():
        if name.startswith("_") or not hasattr(dsl, name) or callable(getattr(type(dsl), name, None)):
            raise TypeError(f"{type(dsl).__name__} has no setting '{name}'")
        setattr(dsl, name, value)
    if configure is not None:
        configure(dsl)
    return dsl
