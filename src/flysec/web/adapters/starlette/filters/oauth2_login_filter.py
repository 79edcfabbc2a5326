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
"""OAuth2LoginFilter: the browser-facing authorization_code flow.

Two endpoints are handled:

- ``GET <authorization_base_uri>/{registration_id}`` redirects the browser
  to the provider's authorization endpoint.
- ``GET <redirection endpoint>`` (``/login/oauth2/code/*`` by default)
  handles the provider callback: the code is exchanged for tokens, the
  user is loaded and the :class:`SecurityContext` is stored.
"""

from __future__ import annotations

import logging
import secrets
from typing import Any
from urllib.parse import urlencode

from starlette.responses import RedirectResponse, Response

from flysec.container.ordering import HIGHEST_PRECEDENCE, order
from flysec.kernel.exceptions import AuthenticationException
from flysec.security.context_repository import SecurityContextRepository
from flysec.security.handlers import AuthenticationFailureHandler, AuthenticationSuccessHandler
from flysec.security.matchers import PathPatternRequestMatcher
from flysec.security.oauth2.client import ClientRegistrationRepository, OAuth2AuthorizationRequest
from flysec.security.oauth2.login import (
    AccessTokenResponseClient,
    AuthorizationRequestRepository,
    OAuth2UserService,
)
from flysec.web.adapters.starlette.problem import problem_response
from flysec.web.filters import OncePerRequestFilter
from flysec.web.ports.filter import CallNext

logger = logging.getLogger(__name__)

DEFAULT_AUTHORIZATION_BASE_URI = "/oauth2/authorization"
DEFAULT_REDIRECTION_BASE_URI = "/login/oauth2/code/*"


@order(HIGHEST_PRECEDENCE + 220)
class OAuth2LoginFilter(OncePerRequestFilter):
    def __init__(
        self,
        client_registration_repository: ClientRegistrationRepository,
        authorization_request_repository: AuthorizationRequestRepository,
        access_token_response_client: AccessTokenResponseClient,
        user_service: OAuth2UserService,
        success_handler: AuthenticationSuccessHandler,
        failure_handler: AuthenticationFailureHandler,
        repository: SecurityContextRepository,
        authorization_base_uri: str = DEFAULT_AUTHORIZATION_BASE_URI,
        redirection_base_uri: str = DEFAULT_REDIRECTION_BASE_URI,
    ) -> None:
        self.client_registration_repository = client_registration_repository
        self.authorization_request_repository = authorization_request_repository
        self.access_token_response_client = access_token_response_client
        self.user_service = user_service
        self.success_handler = success_handler
        self.failure_handler = failure_handler
        self.repository = repository
        self._authorization_matcher = PathPatternRequestMatcher(
            authorization_base_uri.rstrip("/") + "/{registration_id}", "GET"
        )
        self._redirection_matcher = PathPatternRequestMatcher(redirection_base_uri)

    def should_not_filter(self, request: Any) -> bool:
        return not (self._authorization_matcher.matches(request) or self._is_callback(request))

    def _is_callback(self, request: Any) -> bool:
        params = request.query_params
        has_response = ("code" in params or "error" in params) and "state" in params
        return has_response and self._redirection_matcher.matches(request)

    async def do_filter(self, request: Any, call_next: CallNext) -> Response:
        result = self._authorization_matcher.matcher(request)
        if result.matched:
            return await self._redirect_to_provider(request, result.variables["registration_id"])
        return await self._handle_callback(request)

    async def _redirect_to_provider(self, request: Any, registration_id: str) -> Response:
        registration = self.client_registration_repository.find_by_registration_id(registration_id)
        if registration is None:
            logger.warning("Unknown client registration: %s", registration_id)
            return problem_response(
                status=400,
                detail=f"No registration found for '{registration_id}'",
                path=request.url.path,
            )

        state = secrets.token_urlsafe(32)
        redirect_uri = registration.expand_redirect_uri(str(request.base_url))
        self.authorization_request_repository.save_authorization_request(
            OAuth2AuthorizationRequest(registration_id, state, redirect_uri, registration.scopes), request
        )
        params = {
            "response_type": "code",
            "client_id": registration.client_id,
            "redirect_uri": redirect_uri,
            "scope": " ".join(registration.scopes),
            "state": state,
        }
        logger.debug("Redirecting to OAuth2 provider %s", registration.client_name or registration_id)
        return RedirectResponse(url=f"{registration.authorization_uri}?{urlencode(params)}", status_code=302)

    async def _handle_callback(self, request: Any) -> Response:
        params = request.query_params
        try:
            stored = self.authorization_request_repository.remove_authorization_request(request)
            if stored is None:
                raise AuthenticationException("Authorization request not found", code="authorization_request_not_found")
            if not secrets.compare_digest(stored.state, params.get("state", "")):
                raise AuthenticationException("Invalid state parameter", code="invalid_state_parameter")
            if "error" in params:
                raise AuthenticationException(
                    params.get("error_description") or params["error"], code=params["error"]
                )

            registration = self.client_registration_repository.find_by_registration_id(stored.registration_id)
            if registration is None:
                raise AuthenticationException(
                    f"Client registration '{stored.registration_id}' not found", code="client_registration_not_found"
                )
            token_response = await self.access_token_response_client.get_token_response(
                registration, params["code"], stored.redirect_uri
            )
            context = await self.user_service.load_user(registration, token_response)
        except AuthenticationException as exc:
            logger.warning("OAuth2 login failed: %s", exc)
            return await self.failure_handler.on_authentication_failure(request, exc)

        logger.info("OAuth2 login successful for user %s via %s", context.user_id, stored.registration_id)
        request.state.security_context = context
        self.repository.save_context(context, request)
        return await self.success_handler.on_authentication_success(request, context)
