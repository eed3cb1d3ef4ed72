# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import socket

import httpx
import pytest

from httpdiag.config import HttpSettings
from httpdiag.diagnostics import Diagnostics, ProbeStatus
from httpdiag.executor import (
    DIAGNOSTICS_MARKER,
    CallOutcome,
    CallRequest,
    HttpMethod,
    RequestExecutor,
    perform_http_call,
)
from httpdiag.http import HttpResponse, HttpxClient, StubHttpClient

SERVER_ERROR = HttpResponse(ok=True, status_code=500, text="Internal Server Error")
FAILED_ATTEMPT = ["HTTP call failed with status code: 500", "Response: Internal Server Error"]


def _refused() -> httpx.ConnectError:
    exc = httpx.ConnectError("[Errno 111] Connection refused")
    exc.__cause__ = ConnectionRefusedError(111, "Connection refused")
    return exc


class RecordingDiagnostics(Diagnostics):
    def __init__(self, addresses=("93.184.216.34",), status=ProbeStatus.SUCCESS):
        self.urls: list[str] = []
        self.pinged: list[str] = []

        def pinger(address: str, timeout: float) -> ProbeStatus:  # noqa: ARG001
            self.pinged.append(address)
            return status

        super().__init__(resolver=lambda host: list(addresses), pinger=pinger, settings=HttpSettings())

    def diagnose(self, url: str) -> list[str]:
        self.urls.append(url)
        return super().diagnose(url)


def _executor(client, diagnostics=None, settings=None):
    return RequestExecutor(lambda: client, diagnostics or RecordingDiagnostics(), settings=settings or HttpSettings())


def test_successful_call_returns_response_and_no_messages():
    ok = HttpResponse(ok=True, status_code=200, text="Success")
    client = StubHttpClient([ok])

    outcome = _executor(client).execute(CallRequest(url="https://example.com"))

    assert outcome.success is True
    assert outcome.response is ok
    assert outcome.messages == ()
    assert outcome.attempts == 1
    assert len(client.requests) == 1


@pytest.mark.parametrize("budget", [1, 2, 3, 5])
def test_always_failing_status_yields_two_messages_per_attempt(budget):
    client = StubHttpClient([SERVER_ERROR])

    outcome = _executor(client).execute(CallRequest(url="https://example.com", retries=budget))

    assert outcome.success is False
    assert outcome.response is None
    assert list(outcome.messages) == FAILED_ATTEMPT * budget
    assert outcome.attempts == budget
    assert len(client.requests) == budget


def test_default_budget_example():
    client = StubHttpClient([SERVER_ERROR])

    success, response, messages = _executor(client).execute(CallRequest(url="https://example.com"))

    assert (success, response) == (False, None)
    assert messages == FAILED_ATTEMPT * 3


@pytest.mark.parametrize("k", [1, 2, 3])
def test_success_on_attempt_k_keeps_prior_messages(k):
    ok = HttpResponse(ok=True, status_code=201, text="created")
    client = StubHttpClient([SERVER_ERROR] * (k - 1) + [ok])

    outcome = _executor(client).execute(CallRequest(url="https://example.com", method="POST", retries=3))

    assert outcome.success is True
    assert outcome.response is ok
    assert list(outcome.messages) == FAILED_ATTEMPT * (k - 1)
    assert outcome.attempts == k
    assert len(client.requests) == k


def test_zero_budget_makes_no_attempts():
    client = StubHttpClient([HttpResponse(ok=True, status_code=200)])

    outcome = _executor(client).execute(CallRequest(url="https://example.com", retries=0))

    assert outcome == CallOutcome(success=False, response=None, messages=(), attempts=0)
    assert client.requests == []


def test_zero_budget_does_not_build_a_client():
    def factory():
        raise RuntimeError("no client")

    outcome = RequestExecutor(factory, RecordingDiagnostics(), settings=HttpSettings()).execute(
        CallRequest(url="https://example.com", retries=0)
    )

    assert outcome == CallOutcome(success=False)


def test_connection_refused_runs_diagnostics_then_recovers():
    ok = HttpResponse(ok=True, status_code=200)
    client = StubHttpClient([_refused(), ok])
    diagnostics = RecordingDiagnostics()

    success, response, messages = _executor(client, diagnostics).execute(
        CallRequest(url="https://example.com/api", retries=3)
    )

    assert success is True
    assert response is ok
    assert messages == [
        "HTTP request exception: [Errno 111] Connection refused",
        DIAGNOSTICS_MARKER,
        "DNS resolved example.com to: 93.184.216.34",
        "Ping to 93.184.216.34 successful.",
    ]
    assert diagnostics.urls == ["https://example.com/api"]


def test_transport_reported_dns_failure_with_failing_resolution():
    failure = HttpResponse(ok=False, error_category="DNS_FAILURE", error_message="[Errno -2] Name or service not known")
    client = StubHttpClient([failure])

    def resolver(host: str):
        raise socket.gaierror(-2, "Name or service not known")

    diagnostics = Diagnostics(resolver=resolver, pinger=lambda a, t: ProbeStatus.SUCCESS, settings=HttpSettings())
    outcome = _executor(client, diagnostics).execute(CallRequest(url="https://nope.invalid", retries=2))

    per_attempt = [
        "HTTP request exception: [Errno -2] Name or service not known",
        DIAGNOSTICS_MARKER,
        "Network diagnostics failed: [Errno -2] Name or service not known",
    ]
    assert outcome.success is False
    assert list(outcome.messages) == per_attempt * 2


def test_diagnostics_report_one_line_per_address_in_order():
    client = StubHttpClient([_refused()])
    diagnostics = RecordingDiagnostics(addresses=("10.0.0.1", "10.0.0.2"), status=ProbeStatus.TIMED_OUT)

    outcome = _executor(client, diagnostics).execute(CallRequest(url="http://svc.internal:8080/", retries=1))

    assert list(outcome.messages) == [
        "HTTP request exception: [Errno 111] Connection refused",
        DIAGNOSTICS_MARKER,
        "DNS resolved svc.internal to: 10.0.0.1, 10.0.0.2",
        "Ping to 10.0.0.1 failed with status: TIMED_OUT",
        "Ping to 10.0.0.2 failed with status: TIMED_OUT",
    ]
    assert diagnostics.pinged == ["10.0.0.1", "10.0.0.2"]


@pytest.mark.parametrize(
    "error",
    [
        httpx.ReadTimeout("timed out"),
        httpx.RemoteProtocolError("Server disconnected without sending a response."),
        httpx.UnsupportedProtocol("Request URL has an unsupported protocol 'ftp://'."),
        RuntimeError("boom"),
    ],
)
def test_non_socket_transport_errors_skip_diagnostics(error):
    client = StubHttpClient([error])
    diagnostics = RecordingDiagnostics()

    outcome = _executor(client, diagnostics).execute(CallRequest(url="https://example.com", retries=2))

    assert outcome.success is False
    assert list(outcome.messages) == [f"HTTP request exception: {error}"] * 2
    assert diagnostics.urls == []


def test_mixed_failures_accumulate_in_attempt_order():
    client = StubHttpClient([SERVER_ERROR, httpx.ReadTimeout("timed out"), SERVER_ERROR])

    outcome = _executor(client).execute(CallRequest(url="https://example.com", retries=3))

    assert list(outcome.messages) == FAILED_ATTEMPT + ["HTTP request exception: timed out"] + FAILED_ATTEMPT


def test_diagnostics_can_be_disabled_by_settings():
    client = StubHttpClient([_refused()])
    diagnostics = RecordingDiagnostics()

    outcome = _executor(client, diagnostics, HttpSettings(diagnostics_enabled=False)).execute(
        CallRequest(url="https://example.com", retries=1)
    )

    assert list(outcome.messages) == ["HTTP request exception: [Errno 111] Connection refused"]
    assert diagnostics.urls == []


def test_headers_are_applied_to_every_attempt_without_mutation():
    headers = {"X-Api-Key": "secret"}
    client = StubHttpClient([SERVER_ERROR, HttpResponse(ok=True, status_code=200)])
    request = CallRequest(url="https://example.com", method=HttpMethod.PUT, body=b"{}", content_type="application/json", headers=headers)
    headers["X-Api-Key"] = "changed"

    _executor(client).execute(request)

    assert len(client.requests) == 2
    for sent in client.requests:
        assert dict(sent.headers) == {"X-Api-Key": "secret"}
        assert sent.method == "PUT"
        assert sent.body == b"{}"
        assert sent.content_type == "application/json"


def test_client_is_created_per_call_and_closed():
    created: list[StubHttpClient] = []

    def factory():
        client = StubHttpClient([HttpResponse(ok=True, status_code=200)])
        created.append(client)
        return client

    executor = RequestExecutor(factory, RecordingDiagnostics(), settings=HttpSettings())
    executor.execute(CallRequest(url="https://example.com"))
    executor.execute(CallRequest(url="https://example.com"))

    assert len(created) == 2
    assert all(client.closed for client in created)


def test_client_factory_failure_is_reported_not_raised():
    def factory():
        raise RuntimeError("no client")

    outcome = RequestExecutor(factory, RecordingDiagnostics(), settings=HttpSettings()).execute(
        CallRequest(url="https://example.com")
    )

    assert outcome.success is False
    assert list(outcome.messages) == ["HTTP request exception: no client"]
    assert outcome.attempts == 0


def test_call_request_validation_and_normalization():
    assert CallRequest(url="http://x", method="post").method is HttpMethod.POST
    with pytest.raises(ValueError):
        CallRequest(url="http://x", retries=-1)
    with pytest.raises(ValueError):
        CallRequest(url="http://x", method="BREW")
    with pytest.raises(ValueError):
        CallRequest(url="   ")

    request = CallRequest(url="http://x", headers={"A": "1"})
    with pytest.raises(TypeError):
        request.headers["A"] = "2"  # type: ignore[index]


def test_perform_http_call_end_to_end_with_httpx_transport():
    statuses = iter([503, 503, 200])
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        status = next(statuses)
        return httpx.Response(status, text="ok" if status == 200 else "Service Unavailable")

    def factory():
        return HttpxClient(HttpSettings(), client=httpx.Client(transport=httpx.MockTransport(handler)))

    success, response, messages = perform_http_call(
        "https://example.com/api",
        "GET",
        headers={"Accept": "application/json"},
        client_factory=factory,
        diagnostics=RecordingDiagnostics(),
    )

    assert success is True
    assert response.status_code == 200
    assert response.text == "ok"
    assert messages == ["HTTP call failed with status code: 503", "Response: Service Unavailable"] * 2
    assert [r.headers["Accept"] for r in seen] == ["application/json"] * 3
