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
"""In-memory session store with TTL-based expiry."""

from __future__ import annotations

import asyncio
import time
from typing import Any


class InMemorySessionStore:
    """In-memory session store guarded by an ``asyncio.Lock``.

    Expired sessions are dropped when read and swept on every save.
    Suitable for single-process applications and tests.
    """

    def __init__(self) -> None:
        self._store: dict[str, tuple[dict[str, Any], float]] = {}
        self._lock = asyncio.Lock()

    async def get(self, session_id: str) -> dict[str, Any] | None:
        """Retrieve session data. Returns ``None`` if missing or expired."""
        async with self._lock:
            entry = self._store.get(session_id)
            if entry is None:
                return None
            data, expires_at = entry
            if time.monotonic() > expires_at:
                del self._store[session_id]
                return None
            return dict(data)

    async def save(self, session_id: str, data: dict[str, Any], ttl: int) -> None:
        async with self._lock:
            now = time.monotonic()
            self._purge_expired(now)
            self._store[session_id] = (dict(data), now + ttl)

    async def delete(self, session_id: str) -> None:
        async with self._lock:
            self._store.pop(session_id, None)

    async def purge_expired(self) -> int:
        """Drop every expired session; returns how many were removed."""
        async with self._lock:
            return self._purge_expired(time.monotonic())

    def _purge_expired(self, now: float) -> int:
        expired = [sid for sid, (_, expires_at) in self._store.items() if now > expires_at]
        for sid in expired:
            del self._store[sid]
        return len(expired)

    def __len__(self) -> int:
        return len(self._store)
