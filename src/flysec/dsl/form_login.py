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
from __future__ import annotations

from flysec.dsl.base import SecurityDsl
from flysec.security.configurers.form_login import FormLoginConfigurer
from flysec.security.handlers import AuthenticationFailureHandler, AuthenticationSuccessHandler


class FormLoginDsl(SecurityDsl[FormLoginConfigurer]):
    """Form login settings.

    Attributes:
        login_page: Where unauthenticated browsers are sent.  A default
            page is rendered when this is left unset.
        login_processing_url: Where the form is posted; defaults to the
            login page.
        username_parameter: Form field holding the username.
        password_parameter: Form field holding the password.
        authentication_success_handler: Runs after a successful login.
        authentication_failure_handler: Runs after a failed login.
        failure_url: Redirect target after a failed login.
        permit_all: Grant everyone access to the login URLs.
    """

    def __init__(self) -> None:
        super().__init__()
        self.login_page: str | None = None
        self.login_processing_url: str | None = None
        self.username_parameter: str | None = None
        self.password_parameter: str | None = None
        self.authentication_success_handler: AuthenticationSuccessHandler | None = None
        self.authentication_failure_handler: AuthenticationFailureHandler | None = None
        self.failure_url: str | None = None
        self.permit_all: bool | None = None
        self._default_success_url: tuple[str, bool] | None = None

    def default_success_url(self, default_success_url: str, always_use: bool = False) -> None:
        """Where to go after login when no saved request applies (or always, with *always_use*)."""
        self._default_success_url = (default_success_url, always_use)

    def apply(self, target: FormLoginConfigurer) -> None:
        self._forward(
            target,
            login_page=self.login_page,
            login_processing_url=self.login_processing_url,
            username_parameter=self.username_parameter,
            password_parameter=self.password_parameter,
            success_handler=self.authentication_success_handler,
            failure_handler=self.authentication_failure_handler,
            failure_url=self.failure_url,
            permit_all=self.permit_all,
        )
        if self._default_success_url is not None:
            target.default_success_url(*self._default_success_url)
