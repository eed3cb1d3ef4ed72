# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client exports."""

from .adapters import StubHttpClient
from .client import HttpClient, HttpClientFactory, create_default_http_client
from .headers import has_header, parse_header_line
from .httpx_client import HttpxClient
from .models import HttpRequest, HttpResponse

__all__ = [
    "HttpClient",
    "HttpClientFactory",
    "HttpxClient",
    "HttpRequest",
    "HttpResponse",
    "StubHttpClient",
    "create_default_http_client",
    "has_header",
    "parse_header_line",
]
