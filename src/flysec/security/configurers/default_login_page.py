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

from typing import TYPE_CHECKING

from flysec.security.configurers.base import SecurityConfigurer
from flysec.security.configurers.form_login import FormLoginConfigurer
from flysec.security.configurers.oauth2_login import OAuth2LoginConfigurer
from flysec.web.adapters.starlette.filters.form_login_filter import DefaultLoginPageFilter

if TYPE_CHECKING:
    from flysec.security.http_security import HttpSecurity


class DefaultLoginPageConfigurer(SecurityConfigurer):
    """Renders a login page unless the application provides its own.

    The page shows the form when form login is on and one link per
    client registration when OAuth2 login is on.
    """

    def configure(self, http: HttpSecurity) -> None:
        form_login = http.get_configurer(FormLoginConfigurer)
        oauth2_login = http.get_configurer(OAuth2LoginConfigurer)
        if form_login is not None:
            if form_login.custom_login_page:
                return
            login_page = form_login.get_login_page(http)
        elif oauth2_login is not None:
            if oauth2_login.custom_login_page:
                return
            login_page = oauth2_login.get_login_page(http)
        else:
            return

        username_parameter, password_parameter = form_login.parameters if form_login else ("username", "password")
        http.add_filter(
            DefaultLoginPageFilter(
                login_page_url=login_page,
                form_login_enabled=form_login is not None,
                login_processing_url=form_login.get_login_processing_url(http) if form_login else login_page,
                username_parameter=username_parameter,
                password_parameter=password_parameter,
                oauth2_links=oauth2_login.login_links(http) if oauth2_login else None,
            )
        )
