# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for httpdiag."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"httpdiag/{__version__}"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class HttpSettings:
    """HTTP call and diagnostics defaults."""

    timeout: float = 100.0
    retries: int = 3
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    ping_timeout: float = 5.0
    diagnostics_enabled: bool = True

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        retries = _int_env("HTTPDIAG_HTTP_RETRIES", cls.retries)
        if retries < 0:
            retries = cls.retries
        timeout = _float_env("HTTPDIAG_HTTP_TIMEOUT", cls.timeout)
        if timeout <= 0:
            timeout = cls.timeout
        ping_timeout = _float_env("HTTPDIAG_PING_TIMEOUT", cls.ping_timeout)
        if ping_timeout <= 0:
            ping_timeout = cls.ping_timeout
        return cls(
            timeout=timeout,
            retries=retries,
            user_agent=os.getenv("HTTPDIAG_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("HTTPDIAG_HTTP_REDIRECTS", cls.allow_redirects),
            ping_timeout=ping_timeout,
            diagnostics_enabled=_bool_env("HTTPDIAG_DIAGNOSTICS", cls.diagnostics_enabled),
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()
