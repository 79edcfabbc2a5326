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
"""LoggingPort: how the security filters' log output is set up.

Every flysec module logs through ``logging.getLogger(__name__)``; a logging
port decides how those records are rendered and at which levels.  It is
driven by the ``flysec.logging`` config section::

    flysec:
      logging:
        format: json          # or console
        level:
          root: INFO
          flysec.security: DEBUG
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from flysec.core.config import Config


@runtime_checkable
class LoggingPort(Protocol):
    """Configures log rendering and levels for the security filter chain."""

    def configure(self, config: Config) -> None:
        """Apply ``flysec.logging.format`` and the ``flysec.logging.level`` map."""
        ...

    def get_logger(self, name: str) -> Any:
        """Return a bound logger for *name*, e.g. to log authentication events."""
        ...

    def set_level(self, name: str, level: str) -> None:
        """Change one logger's level at runtime (``root`` for the root logger)."""
        ...
