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
"""Unified exception hierarchy for flysec.

All library exceptions inherit from FlySecException, enabling unified
error handling across modules.

Categories:
- SecurityException: Authentication, authorization and CSRF errors
- ConfigurationException: Invalid builder or property configuration
- ExternalServiceException: OAuth2 provider and introspection failures
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class FlySecException(Exception):
    """Base exception for all flysec errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "INVALID_TOKEN").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.context: dict = context if context is not None else {}


# ---------------------------------------------------------------------------
# Security
# ---------------------------------------------------------------------------


class SecurityException(FlySecException):
    """Authentication and authorization errors."""


class AuthenticationException(SecurityException):
    """Authentication is required but was not provided or is invalid."""


class BadCredentialsException(AuthenticationException):
    """Username/password (or equivalent) did not match."""


class InvalidTokenException(AuthenticationException):
    """A bearer token could not be decoded, verified or introspected."""


class AccessDeniedException(SecurityException):
    """Authenticated caller lacks permission to perform the operation."""


class CsrfException(AccessDeniedException):
    """The CSRF token was missing or did not match."""


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationException(FlySecException):
    """Configuration could not be loaded or bound."""


class InvalidConfigurationException(ConfigurationException):
    """A security builder was configured in a contradictory way."""


# ---------------------------------------------------------------------------
# External services
# ---------------------------------------------------------------------------


class ExternalServiceException(FlySecException):
    """Failure communicating with an external or third-party service."""
