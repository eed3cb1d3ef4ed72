# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Programmable HttpClient implementations."""

from __future__ import annotations

from collections.abc import Iterable

from .client import HttpClient
from .models import HttpRequest, HttpResponse


class StubHttpClient(HttpClient):
    """
    Deterministic, scripted HttpClient for tests and dry runs.

    Each call to `request` consumes the next scripted item. A `BaseException` instance is
    raised instead of returned. Once the script runs out the last item is repeated.
    """

    def __init__(self, script: Iterable[HttpResponse | BaseException] | None = None):
        self._script: list[HttpResponse | BaseException] = list(script or [])
        self.requests: list[HttpRequest] = []
        self.closed = False

    def request(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        if not self._script:
            return HttpResponse(ok=False, status_code=None, error_message="No stubbed response configured")
        index = min(len(self.requests) - 1, len(self._script) - 1)
        item = self._script[index]
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        self.closed = True
