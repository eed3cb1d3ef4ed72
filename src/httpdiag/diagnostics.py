# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Network diagnostics run after a socket-level transport failure.

A diagnostics pass resolves the target host and pings every resolved address, producing
one human-readable line per step. The pass never raises; internal failures become a
single `Network diagnostics failed: ...` line.
"""

from __future__ import annotations

import logging
import math
import socket
import subprocess
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlsplit

from .config import HttpSettings, load_http_settings

logger = logging.getLogger(__name__)

DIAGNOSTICS_FAILED_PREFIX = "Network diagnostics failed"


class ProbeStatus(str, Enum):
    SUCCESS = "SUCCESS"
    TIMED_OUT = "TIMED_OUT"
    UNREACHABLE = "UNREACHABLE"
    FAILED = "FAILED"
    UNAVAILABLE = "UNAVAILABLE"


@dataclass(frozen=True)
class ProbeResult:
    address: str
    status: ProbeStatus

    @property
    def message(self) -> str:
        if self.status is ProbeStatus.SUCCESS:
            return f"Ping to {self.address} successful."
        return f"Ping to {self.address} failed with status: {self.status.value}"


Resolver = Callable[[str], Sequence[str]]
Pinger = Callable[[str, float], ProbeStatus]


def resolve_host(host: str) -> list[str]:
    """Resolve a host name to its unique addresses, in resolver order."""
    addresses: list[str] = []
    for _family, _type, _proto, _canon, sockaddr in socket.getaddrinfo(host, None):
        address = str(sockaddr[0])
        if address not in addresses:
            addresses.append(address)
    return addresses


def _ping_command(address: str, timeout: float) -> list[str]:
    if sys.platform.startswith("win"):
        return ["ping", "-n", "1", "-w", str(max(1, int(timeout * 1000))), address]
    if sys.platform == "darwin":
        if ":" in address:
            # ping6 has no wait flag; the subprocess timeout bounds it.
            return ["ping6", "-c", "1", address]
        return ["ping", "-c", "1", "-W", str(max(1, int(timeout * 1000))), address]
    return ["ping", "-c", "1", "-W", str(max(1, math.ceil(timeout))), address]


def ping_address(address: str, timeout: float) -> ProbeStatus:
    """Send one echo request through the platform `ping` utility."""
    try:
        completed = subprocess.run(
            _ping_command(address, timeout),
            capture_output=True,
            text=True,
            timeout=timeout + 5.0,
            check=False,
        )
    except (FileNotFoundError, PermissionError):
        return ProbeStatus.UNAVAILABLE
    except subprocess.TimeoutExpired:
        return ProbeStatus.TIMED_OUT

    if completed.returncode == 0:
        return ProbeStatus.SUCCESS
    output = f"{completed.stdout}\n{completed.stderr}".lower()
    if "unreachable" in output:
        return ProbeStatus.UNREACHABLE
    if completed.returncode == 1:
        return ProbeStatus.TIMED_OUT
    return ProbeStatus.FAILED


class Diagnostics:
    """Resolve-and-ping diagnostics for a URL's host."""

    def __init__(
        self,
        resolver: Resolver | None = None,
        pinger: Pinger | None = None,
        *,
        settings: HttpSettings | None = None,
    ):
        self.settings = settings or load_http_settings()
        self.resolver = resolver or resolve_host
        self.pinger = pinger or ping_address

    def diagnose(self, url: str) -> list[str]:
        messages: list[str] = []
        try:
            host = urlsplit(url).hostname
            if not host:
                messages.append(f"{DIAGNOSTICS_FAILED_PREFIX}: URL {url!r} has no host")
                return messages

            try:
                addresses = list(self.resolver(host))
            except Exception as exc:  # noqa: BLE001
                logger.info("DNS resolution for %s failed: %s", host, exc)
                messages.append(f"{DIAGNOSTICS_FAILED_PREFIX}: {exc}")
                return messages
            messages.append(f"DNS resolved {host} to: {', '.join(addresses)}")

            for address in addresses:
                messages.append(self.probe(address).message)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Diagnostics for %s failed", url)
            messages.append(f"{DIAGNOSTICS_FAILED_PREFIX}: {exc}")
        return messages

    def probe(self, address: str) -> ProbeResult:
        try:
            status = ProbeStatus(self.pinger(address, self.settings.ping_timeout))
        except Exception as exc:  # noqa: BLE001
            # Covers pingers that raise and pingers that return an unknown status.
            logger.debug("Ping to %s failed: %s", address, exc)
            status = ProbeStatus.FAILED
        logger.debug("Ping to %s: %s", address, status.value)
        return ProbeResult(address=address, status=status)


__all__ = [
    "DIAGNOSTICS_FAILED_PREFIX",
    "Diagnostics",
    "Pinger",
    "ProbeResult",
    "ProbeStatus",
    "Resolver",
    "ping_address",
    "resolve_host",
]
