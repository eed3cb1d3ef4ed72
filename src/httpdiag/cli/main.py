# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpdiag CLI."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from ..config import HttpSettings, load_http_settings
from ..diagnostics import Diagnostics
from ..executor import CallOutcome, CallRequest, HttpMethod, RequestExecutor
from ..http import create_default_http_client, parse_header_line
from ..log import setup_logging

CLI_TEXT_TRUNCATION_BYTES = 4096


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send an HTTP request with retries and network diagnostics")
    parser.add_argument("url", help="Target URL")
    parser.add_argument(
        "-X",
        "--method",
        default=HttpMethod.GET.value,
        type=str.upper,
        choices=[m.value for m in HttpMethod],
        help="HTTP method (default: GET)",
    )
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        metavar="'Name: value'",
        help="Request header; may be repeated",
    )
    parser.add_argument("-d", "--data", help="Request body")
    parser.add_argument("--content-type", help="Content type of the request body")
    parser.add_argument("--retries", type=int, help="Maximum number of attempts (default: HTTPDIAG_HTTP_RETRIES or 3)")
    parser.add_argument(
        "--no-diagnostics",
        action="store_true",
        help="Skip DNS/ping diagnostics on network failures",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of human-friendly summary",
    )
    parser.add_argument("--log-level", help="Logging level (default: HTTPDIAG_LOG_LEVEL or WARNING)")
    return parser


def _truncate_text_bytes(text: str, max_bytes: int) -> str:
    raw = text.encode("utf-8")
    if len(raw) <= max_bytes:
        return text
    suffix = "...[truncated]"
    keep = max_bytes - len(suffix.encode("utf-8"))
    if keep <= 0:
        return suffix.encode("utf-8")[:max_bytes].decode("utf-8", errors="ignore")
    return raw[:keep].decode("utf-8", errors="ignore") + suffix


def outcome_to_dict(outcome: CallOutcome) -> dict[str, Any]:
    response = outcome.response
    return {
        "success": outcome.success,
        "attempts": outcome.attempts,
        "status_code": response.status_code if response is not None else None,
        "url": response.url if response is not None else None,
        "body": _truncate_text_bytes(response.body_snippet, CLI_TEXT_TRUNCATION_BYTES) if response is not None else None,
        "messages": list(outcome.messages),
    }


def _print_json(outcome: CallOutcome) -> None:
    json.dump(outcome_to_dict(outcome), sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _pretty_print(outcome: CallOutcome) -> None:
    status = "OK" if outcome.success else "FAILED"
    print(f"[httpdiag] Status: {status} after {outcome.attempts} attempt(s)")
    if outcome.response is not None:
        print(f"HTTP {outcome.response.status_code}")
    if outcome.messages:
        print("Messages:")
        for message in outcome.messages:
            print(f"- {message}")
    if outcome.response is not None and outcome.response.body_snippet:
        print(_truncate_text_bytes(outcome.response.body_snippet, CLI_TEXT_TRUNCATION_BYTES))


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        headers = dict(parse_header_line(line) for line in args.header)
    except ValueError as exc:
        parser.error(str(exc))

    settings: HttpSettings = load_http_settings()
    if args.no_diagnostics:
        settings.diagnostics_enabled = False
    retries = args.retries if args.retries is not None else settings.retries

    try:
        request = CallRequest(
            url=args.url,
            method=HttpMethod(args.method),
            body=args.data,
            content_type=args.content_type,
            headers=headers or None,
            retries=retries,
        )
    except ValueError as exc:
        parser.error(str(exc))

    executor = RequestExecutor(
        lambda: create_default_http_client(settings),
        Diagnostics(settings=settings),
        settings=settings,
    )
    outcome = executor.execute(request)

    if args.json:
        _print_json(outcome)
    else:
        _pretty_print(outcome)

    return 0 if outcome.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
