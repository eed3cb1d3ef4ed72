# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import errno
import socket
import ssl
from collections.abc import Iterator
from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    CONNECTION_REFUSED = "CONNECTION_REFUSED"
    HOST_UNREACHABLE = "HOST_UNREACHABLE"
    DNS_FAILURE = "DNS_FAILURE"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


# Socket-level faults. Only these trigger network diagnostics.
NETWORK_CATEGORIES = frozenset(
    {
        ErrorCategory.CONNECTION_REFUSED,
        ErrorCategory.HOST_UNREACHABLE,
        ErrorCategory.DNS_FAILURE,
        ErrorCategory.CONNECTION_ERROR,
    }
)

_UNREACHABLE_ERRNOS = frozenset(
    code
    for code in (
        getattr(errno, "ENETUNREACH", None),
        getattr(errno, "EHOSTUNREACH", None),
        getattr(errno, "EHOSTDOWN", None),
        getattr(errno, "ENETDOWN", None),
    )
    if code is not None
)


def _iter_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _socket_category(exc: BaseException) -> ErrorCategory | None:
    # ssl.SSLError, socket.gaierror and TimeoutError all subclass OSError; order matters.
    if isinstance(exc, (ssl.SSLError, ssl.CertificateError)):
        return ErrorCategory.SSL_ERROR
    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_FAILURE
    if isinstance(exc, TimeoutError):
        return ErrorCategory.TIMEOUT
    if isinstance(exc, ConnectionRefusedError):
        return ErrorCategory.CONNECTION_REFUSED
    if isinstance(exc, OSError) and exc.errno in _UNREACHABLE_ERRNOS:
        return ErrorCategory.HOST_UNREACHABLE
    if isinstance(exc, ConnectionError):
        return ErrorCategory.CONNECTION_ERROR
    if isinstance(exc, OSError) and exc.errno is not None:
        return ErrorCategory.CONNECTION_ERROR
    return None


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.

    The exception chain is searched for a socket-level root cause first; only when none
    is found does the outermost httpx exception type decide the category.
    """
    for link in _iter_exception_chain(exc):
        category = _socket_category(link)
        if category is not None:
            return category

    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT
    if isinstance(exc, httpx.ProxyError):
        return ErrorCategory.PROTOCOL_ERROR
    if isinstance(exc, httpx.NetworkError):
        return ErrorCategory.CONNECTION_ERROR
    if isinstance(exc, (httpx.UnsupportedProtocol, httpx.InvalidURL)):
        return ErrorCategory.INVALID_REQUEST
    if isinstance(exc, (httpx.ProtocolError, httpx.DecodingError, httpx.TooManyRedirects)):
        return ErrorCategory.PROTOCOL_ERROR
    if isinstance(exc, (TypeError, ValueError)):
        return ErrorCategory.INVALID_REQUEST

    return ErrorCategory.UNKNOWN_ERROR


def is_network_related(category: ErrorCategory | str | None) -> bool:
    """Return True when a category denotes a socket-level (network-root-cause) fault."""
    if category is None:
        return False
    try:
        return ErrorCategory(category) in NETWORK_CATEGORIES
    except ValueError:
        return False


__all__ = [
    "NETWORK_CATEGORIES",
    "ErrorCategory",
    "categorize_exception",
    "is_network_related",
]
