"""Guest Expiry — tests for the pure reaper helpers.

Tests cover:
    - resource id masking keeps only the last four characters
    - the reap report accumulates failures per account
    - utc_now is timezone-aware
"""

from datetime import datetime, timezone

from gatekeeper.core.guest_expiry import ReapReport, mask_resource_id, utc_now

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def test_utc_now_is_aware():
    assert utc_now().tzinfo is timezone.utc


def test_mask_resource_id_keeps_last_four():
    assert mask_resource_id("1268306021") == "******6021"
    assert mask_resource_id("CARD123") == "******D123"


def test_mask_resource_id_none():
    assert mask_resource_id(None) is None


def test_reap_report_tracks_failures():
    report = ReapReport(cycle_start=NOW)
    assert report.clean
    report.record_failure("u1", "release", RuntimeError("boom"))
    report.record_failure("u1", "delete", RuntimeError("boom again"))
    assert not report.clean
    assert report.failed_accounts == {"u1"}
    assert report.failures[0].step == "release"
    assert report.failures[0].error == "boom"
