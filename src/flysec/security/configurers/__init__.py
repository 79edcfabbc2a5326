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
"""One configurer per security concern, driven by :class:`~flysec.security.http_security.HttpSecurity`."""

from flysec.security.configurers.anonymous import AnonymousConfigurer
from flysec.security.configurers.authorize import AuthorizeRequestsConfigurer
from flysec.security.configurers.base import SecurityConfigurer
from flysec.security.configurers.cors import CorsConfigurer
from flysec.security.configurers.csrf import CsrfConfigurer
from flysec.security.configurers.default_login_page import DefaultLoginPageConfigurer
from flysec.security.configurers.exception_handling import ExceptionHandlingConfigurer
from flysec.security.configurers.form_login import FormLoginConfigurer
from flysec.security.configurers.headers import HeadersConfigurer
from flysec.security.configurers.http_basic import HttpBasicConfigurer
from flysec.security.configurers.https_redirect import HttpsRedirectConfigurer
from flysec.security.configurers.logout import LogoutConfigurer
from flysec.security.configurers.oauth2_login import OAuth2LoginConfigurer
from flysec.security.configurers.request_cache import RequestCacheConfigurer
from flysec.security.configurers.resource_server import OAuth2ResourceServerConfigurer
from flysec.security.configurers.session_management import SessionManagementConfigurer

__all__ = [
    "AnonymousConfigurer",
    "AuthorizeRequestsConfigurer",
    "CorsConfigurer",
    "CsrfConfigurer",
    "DefaultLoginPageConfigurer",
    "ExceptionHandlingConfigurer",
    "FormLoginConfigurer",
    "HeadersConfigurer",
    "HttpBasicConfigurer",
    "HttpsRedirectConfigurer",
    "LogoutConfigurer",
    "OAuth2LoginConfigurer",
    "OAuth2ResourceServerConfigurer",
    "RequestCacheConfigurer",
    "SecurityConfigurer",
    "SessionManagementConfigurer",
]
