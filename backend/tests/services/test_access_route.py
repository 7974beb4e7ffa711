"""Access Check Route — GET /api/v1/access/check.

Invariants:
    - always 200 with destination + redirect_to
    - valid inviteCode -> onboarding carrying the code, authority never asked
    - bearer header forwarded as the visitor session
    - malformed inviteCode or missing/odd Authorization header never errors
"""

from gatekeeper.core.access_resolution import (
    AccessSnapshot, Authorized, Unknown, VisitorSession,
)
from gatekeeper.core.domain_types import AccessStatus
from gatekeeper.api.routes.access import session_from_header

URL = "/api/v1/access/check"


async def test_valid_invite_code_routes_to_onboarding(client, authority):
    res = await client.get(URL, params={"inviteCode": "AB12CD34EF56GH78"})

    assert res.status_code == 200
    assert res.json() == {
        "destination": "onboarding",
        "invite_code": "AB12CD34EF56GH78",
        "redirect_to": "/onboarding?inviteCode=AB12CD34EF56GH78",
    }
    assert authority.calls == []


async def test_malformed_invite_code_without_session_goes_to_waitlist(client):
    res = await client.get(URL, params={"inviteCode": "short"})

    assert res.status_code == 200
    assert res.json()["destination"] == "waitlist"
    assert res.json()["invite_code"] is None


async def test_bearer_session_with_access_goes_to_main(client, authority):
    authority.outcome = Authorized(AccessSnapshot(AccessStatus.PAID))

    res = await client.get(URL, headers={"Authorization": "Bearer tok-123"})

    assert res.json()["destination"] == "main"
    assert res.json()["redirect_to"] == "/main"
    assert authority.calls == [VisitorSession("tok-123")]


async def test_pending_email_resumes_onboarding(client, authority):
    authority.outcome = Authorized(
        AccessSnapshot(AccessStatus.PAID, pending_email=True, email_verified=False),
    )

    res = await client.get(URL, headers={"Authorization": "Bearer tok-123"})

    assert res.json() == {
        "destination": "onboarding",
        "invite_code": None,
        "redirect_to": "/onboarding",
    }


async def test_failed_check_degrades_to_waitlist(client, authority):
    authority.outcome = Unknown("http 503")

    res = await client.get(URL, headers={"Authorization": "Bearer tok-123"})

    assert res.status_code == 200
    assert res.json()["destination"] == "waitlist"


async def test_non_bearer_authorization_is_ignored(client, authority):
    res = await client.get(URL, headers={"Authorization": "Basic dXNlcjpwYXNz"})

    assert res.json()["destination"] == "waitlist"
    assert authority.calls == []


def test_session_from_header():
    assert session_from_header("Bearer abc") == VisitorSession("abc")
    assert session_from_header("bearer abc ") == VisitorSession("abc")
    assert session_from_header("Bearer ") is None
    assert session_from_header("Token abc") is None
    assert session_from_header(None) is None
