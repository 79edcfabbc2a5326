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
"""Built-in security WebFilter implementations for Starlette."""

from flysec.web.adapters.starlette.filters.anonymous_filter import AnonymousAuthenticationFilter
from flysec.web.adapters.starlette.filters.authorization_filter import AuthorizationFilter
from flysec.web.adapters.starlette.filters.bearer_token_filter import (
    BearerTokenFilter,
    BearerTokenResolver,
    DefaultBearerTokenResolver,
)
from flysec.web.adapters.starlette.filters.csrf_filter import CsrfFilter
from flysec.web.adapters.starlette.filters.exception_translation_filter import ExceptionTranslationFilter
from flysec.web.adapters.starlette.filters.form_login_filter import DefaultLoginPageFilter, FormLoginFilter
from flysec.web.adapters.starlette.filters.header_writer_filter import HeaderWriterFilter
from flysec.web.adapters.starlette.filters.http_basic_filter import HttpBasicFilter
from flysec.web.adapters.starlette.filters.https_redirect_filter import HttpsRedirectFilter
from flysec.web.adapters.starlette.filters.logout_filter import LogoutFilter
from flysec.web.adapters.starlette.filters.oauth2_login_filter import OAuth2LoginFilter
from flysec.web.adapters.starlette.filters.request_cache_filter import RequestCacheFilter
from flysec.web.adapters.starlette.filters.security_context_filter import SecurityContextFilter

__all__ = [
    "AnonymousAuthenticationFilter",
    "AuthorizationFilter",
    "BearerTokenFilter",
    "BearerTokenResolver",
    "CsrfFilter",
    "DefaultBearerTokenResolver",
    "DefaultLoginPageFilter",
    "ExceptionTranslationFilter",
    "FormLoginFilter",
    "HeaderWriterFilter",
    "HttpBasicFilter",
    "HttpsRedirectFilter",
    "LogoutFilter",
    "OAuth2LoginFilter",
    "RequestCacheFilter",
    "SecurityContextFilter",
]
