"""Access Status Client — HTTP session validation against a mock transport.

Invariants:
    - one GET to <base>/payment/status with `Authorization: Bearer <token>`
    - 2xx JSON object -> Authorized with normalized snapshot
    - 4xx -> Denied; 5xx, transport errors, unreadable bodies -> Unknown
    - check() never raises, not even for a token that cannot be sent as a header
    - only JSON `true` counts for pendingEmail / emailVerified
"""

import httpx
import pytest

from gatekeeper.core.access_resolution import (
    AccessSnapshot, Authorized, Denied, Unknown, VisitorSession,
)
from gatekeeper.core.domain_types import AccessStatus
from gatekeeper.infrastructure.access_status_client import (
    AccessStatusClient, parse_snapshot,
)

SESSION = VisitorSession("tok-123")


def _client(handler) -> AccessStatusClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AccessStatusClient("http://authority.test/", http)


async def test_sends_single_bearer_get_to_status_endpoint():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"paidStatus": "paid"})

    outcome = await _client(handler).check(SESSION)

    assert len(requests) == 1
    assert requests[0].method == "GET"
    assert str(requests[0].url) == "http://authority.test/payment/status"
    assert requests[0].headers["Authorization"] == "Bearer tok-123"
    assert outcome == Authorized(AccessSnapshot(AccessStatus.PAID))


async def test_custom_status_path():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, json={})

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    await AccessStatusClient("http://authority.test", http, "access/status").check(SESSION)

    assert seen == ["/access/status"]


async def test_pending_email_fields_are_read():
    def handler(request):
        return httpx.Response(200, json={
            "paidStatus": "unpaid", "pendingEmail": True, "emailVerified": False,
        })

    outcome = await _client(handler).check(SESSION)

    assert outcome == Authorized(
        AccessSnapshot(AccessStatus.NONE, pending_email=True, email_verified=False),
    )


@pytest.mark.parametrize("code", [401, 403, 404])
async def test_client_errors_are_denied(code):
    outcome = await _client(lambda r: httpx.Response(code)).check(SESSION)
    assert outcome == Denied(code)


@pytest.mark.parametrize("code", [500, 502, 503])
async def test_server_errors_are_unknown(code):
    outcome = await _client(lambda r: httpx.Response(code)).check(SESSION)
    assert isinstance(outcome, Unknown)


async def test_transport_error_is_unknown():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    outcome = await _client(handler).check(SESSION)

    assert isinstance(outcome, Unknown)
    assert "ConnectError" in outcome.reason


async def test_non_json_body_is_unknown():
    outcome = await _client(
        lambda r: httpx.Response(200, text="<html>maintenance</html>"),
    ).check(SESSION)
    assert isinstance(outcome, Unknown)


async def test_non_object_json_is_unknown():
    outcome = await _client(lambda r: httpx.Response(200, json=["paid"])).check(SESSION)
    assert isinstance(outcome, Unknown)


async def test_non_ascii_token_is_unknown_without_a_request():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"paidStatus": "paid"})

    outcome = await _client(handler).check(VisitorSession("tok\u00e9n"))

    assert isinstance(outcome, Unknown)
    assert outcome.reason.startswith("request:")
    assert requests == []


def test_parse_snapshot_defaults_missing_fields():
    assert parse_snapshot({}) == AccessSnapshot(AccessStatus.NONE, False, False)


def test_parse_snapshot_requires_real_booleans():
    snapshot = parse_snapshot({"pendingEmail": "true", "emailVerified": 1})
    assert snapshot.pending_email is False
    assert snapshot.email_verified is False


def test_parse_snapshot_reads_true_booleans():
    snapshot = parse_snapshot({"pendingEmail": True, "emailVerified": True})
    assert snapshot.pending_email is True
    assert snapshot.email_verified is True
