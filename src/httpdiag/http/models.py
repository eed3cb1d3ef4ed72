# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models shared by transports and the executor."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True)
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "GET"
    headers: Mapping[str, str] | None = None
    body: bytes | str | None = None
    content_type: str | None = None
    timeout: float | None = None


@dataclass
class HttpResponse:
    """
    Normalized HTTP response.

    `ok` only says that the transport produced a response; an HTTP 500 is still `ok=True`.
    Transport failures carry `ok=False` plus the error fields.
    """

    ok: bool
    status_code: int | None = None
    headers: dict[str, str] = field(default_factory=dict)
    text: str = ""
    content: bytes = b""
    url: str | None = None
    error_category: str | None = None
    error_message: str | None = None
    error_type: str | None = None

    @property
    def is_success(self) -> bool:
        """True for a transport-level success with a 2xx status."""
        return self.ok and self.status_code is not None and 200 <= self.status_code < 300

    @property
    def body_snippet(self) -> str:
        """Decoded body text, empty when no body was read."""
        return self.text or ""


__all__ = ["HttpRequest", "HttpResponse"]
