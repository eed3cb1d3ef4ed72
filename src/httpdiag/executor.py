# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Bounded-retry HTTP call execution with network diagnostics.

`RequestExecutor.execute` sends a request up to `retries` times, back to back, and
returns a `CallOutcome` instead of raising. Every failed attempt adds messages to the
outcome log:

- a non-2xx response adds the status line and the response body;
- a transport failure adds the error message and, when the failure is rooted in a
  socket-level fault, the marker line plus the diagnostics report for the URL.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import suppress
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from .config import HttpSettings, load_http_settings
from .diagnostics import Diagnostics
from .errors import categorize_exception, is_network_related
from .http.client import HttpClient, HttpClientFactory, create_default_http_client
from .http.models import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

DEFAULT_RETRIES = 3
DIAGNOSTICS_MARKER = "Performing network diagnostics..."


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


@dataclass(frozen=True)
class CallRequest:
    """One outbound call: target, method, optional body/headers and the retry budget."""

    url: str
    method: HttpMethod = HttpMethod.GET
    body: bytes | str | None = None
    content_type: str | None = None
    headers: Mapping[str, str] | None = None
    retries: int = DEFAULT_RETRIES

    def __post_init__(self) -> None:
        if not self.url or not str(self.url).strip():
            raise ValueError("url must be a non-empty string")
        if isinstance(self.retries, bool) or not isinstance(self.retries, int):
            raise ValueError(f"retries must be an integer, got {self.retries!r}")
        if self.retries < 0:
            raise ValueError(f"retries must be >= 0, got {self.retries}")
        try:
            method = self.method if isinstance(self.method, HttpMethod) else HttpMethod(str(self.method).upper())
        except ValueError:
            raise ValueError(f"Unsupported HTTP method {self.method!r}") from None
        object.__setattr__(self, "method", method)
        if self.headers is not None:
            object.__setattr__(self, "headers", MappingProxyType({str(k): str(v) for k, v in self.headers.items()}))

    def to_http_request(self) -> HttpRequest:
        return HttpRequest(
            url=self.url,
            method=self.method.value,
            headers=self.headers,
            body=self.body,
            content_type=self.content_type,
        )


@dataclass(frozen=True)
class CallOutcome:
    """
    Result of one call.

    `response` is set iff `success`. `messages` keeps every line produced across all
    attempts, in order. Unpacks as `success, response, messages`.
    """

    success: bool
    response: HttpResponse | None = None
    messages: tuple[str, ...] = field(default_factory=tuple)
    attempts: int = 0

    def __iter__(self) -> Iterator[Any]:
        return iter((self.success, self.response, list(self.messages)))


class RequestExecutor:
    """Executes CallRequests with fixed-count immediate retry."""

    def __init__(
        self,
        client_factory: HttpClientFactory | None = None,
        diagnostics: Diagnostics | None = None,
        *,
        settings: HttpSettings | None = None,
    ):
        self.settings = settings or load_http_settings()
        self._client_factory = client_factory or (lambda: create_default_http_client(self.settings))
        self.diagnostics = diagnostics or Diagnostics(settings=self.settings)

    def execute(self, request: CallRequest) -> CallOutcome:
        if request.retries == 0:
            return CallOutcome(success=False)

        messages: list[str] = []
        attempts = 0

        try:
            client = self._client_factory()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Could not create HTTP client for %s: %s", request.url, exc)
            messages.append(f"HTTP request exception: {exc}")
            return CallOutcome(success=False, messages=tuple(messages))

        http_request = request.to_http_request()
        try:
            for attempt in range(request.retries):
                attempts += 1
                logger.debug("%s %s attempt %d/%d", http_request.method, request.url, attempt + 1, request.retries)
                response = self._send(client, http_request)

                if response.is_success:
                    return CallOutcome(success=True, response=response, messages=tuple(messages), attempts=attempts)

                if response.ok:
                    messages.append(f"HTTP call failed with status code: {response.status_code}")
                    messages.append(f"Response: {response.body_snippet}")
                    continue

                error = response.error_message or response.error_type or "unknown transport error"
                messages.append(f"HTTP request exception: {error}")
                if self.settings.diagnostics_enabled and is_network_related(response.error_category):
                    messages.append(DIAGNOSTICS_MARKER)
                    messages.extend(self.diagnostics.diagnose(request.url))
        finally:
            with suppress(Exception):
                client.close()

        logger.warning("%s %s failed after %d attempt(s)", http_request.method, request.url, attempts)
        return CallOutcome(success=False, messages=tuple(messages), attempts=attempts)

    @staticmethod
    def _send(client: HttpClient, request: HttpRequest) -> HttpResponse:
        try:
            return client.request(request)
        except Exception as exc:  # noqa: BLE001
            category = categorize_exception(exc)
            return HttpResponse(
                ok=False,
                url=request.url,
                error_category=category.value,
                error_message=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
            )


def perform_http_call(
    url: str,
    method: HttpMethod | str = HttpMethod.GET,
    body: bytes | str | None = None,
    headers: Mapping[str, str] | None = None,
    retries: int = DEFAULT_RETRIES,
    *,
    content_type: str | None = None,
    client_factory: HttpClientFactory | None = None,
    diagnostics: Diagnostics | None = None,
) -> CallOutcome:
    """Build a CallRequest and execute it with a fresh RequestExecutor."""
    request = CallRequest(
        url=url,
        method=method,  # type: ignore[arg-type]
        body=body,
        content_type=content_type,
        headers=headers,
        retries=retries,
    )
    return RequestExecutor(client_factory, diagnostics).execute(request)


__all__ = [
    "DEFAULT_RETRIES",
    "DIAGNOSTICS_MARKER",
    "CallOutcome",
    "CallRequest",
    "HttpMethod",
    "RequestExecutor",
    "perform_http_call",
]
