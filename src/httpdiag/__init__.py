# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
httpdiag package entrypoint.

Outbound HTTP calls with bounded, immediate retry. When an attempt fails at the socket
level, the target host is resolved and pinged and the findings are appended to the
call's message log. Transport behavior sits behind an injectable client interface.
"""

from .config import HttpSettings, load_http_settings
from .diagnostics import Diagnostics, ProbeResult, ProbeStatus
from .errors import ErrorCategory, categorize_exception, is_network_related
from .executor import CallOutcome, CallRequest, HttpMethod, RequestExecutor, perform_http_call
from .http import (
    HttpClient,
    HttpRequest,
    HttpResponse,
    HttpxClient,
    StubHttpClient,
    create_default_http_client,
)
from .log import setup_logging
from .version import __version__

__all__ = [
    "CallOutcome",
    "CallRequest",
    "Diagnostics",
    "ErrorCategory",
    "HttpClient",
    "HttpMethod",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "ProbeResult",
    "ProbeStatus",
    "RequestExecutor",
    "StubHttpClient",
    "__version__",
    "categorize_exception",
    "create_default_http_client",
    "is_network_related",
    "load_http_settings",
    "perform_http_call",
    "setup_logging",
]
