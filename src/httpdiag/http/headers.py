# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header helpers.

HTTP header field names are case-insensitive (RFC 9110), while callers hand us plain
dicts. These helpers keep lookups and merges consistent regardless of key casing.
"""

from __future__ import annotations

from collections.abc import Mapping


def has_header(headers: Mapping[str, str] | None, name: str) -> bool:
    if not headers:
        return False
    lower = name.lower()
    return any(key is not None and str(key).lower() == lower for key in headers)


def parse_header_line(line: str) -> tuple[str, str]:
    """
    Split a `Name: value` header line.

    Raises ValueError when the line has no colon or an empty name.
    """
    name, sep, value = str(line).partition(":")
    name = name.strip()
    if not sep or not name:
        raise ValueError(f"Invalid header {line!r}; expected 'Name: value'")
    return name, value.strip()


__all__ = ["has_header", "parse_header_line"]
