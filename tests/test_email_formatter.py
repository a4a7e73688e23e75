from __future__ import annotations

from datetime import datetime, timezone

from events_reporter.config import ReportSpec
from events_reporter.email_formatter import build_email_report, build_email_subject, format_event_line
from events_reporter.models import ClusterEvent


def _event() -> ClusterEvent:
    return ClusterEvent(
        name="foo",
        kind="Pod",
        type="Normal",
        reason="Started",
        message="some verbose message: 1",
        last_timestamp=datetime(2019, 1, 15, tzinfo=timezone.utc),
    )


def test_format_event_line():
    assert format_event_line(_event()) == (
        "Name:foo\nKind:Pod\nType:Normal\nReason:Started\n"
        "Message:some verbose message: 1\nLastTimestamp:2019-01-15 00:00:00 +0000 UTC\n"
    )


def test_build_email_subject():
    since = datetime(2019, 1, 14, tzinfo=timezone.utc)
    assert build_email_subject("test scheduler", since) == (
        "Event report: test scheduler since [2019-01-14 00:00:00 +0000 UTC]"
    )


def test_build_email_report_returns_none_without_events():
    report = ReportSpec(description="d", email_recipients=("a@example.com",))
    assert build_email_report(report, datetime(2019, 1, 14, tzinfo=timezone.utc), []) is None


def test_build_email_report_one_line_per_event():
    report = ReportSpec(description="d", email_recipients=("a@example.com", "b@example.com"))
    email = build_email_report(report, datetime(2019, 1, 14, tzinfo=timezone.utc), [_event(), _event()])
    assert email is not None
    assert email.recipients == ("a@example.com", "b@example.com")
    assert len(email.body) == 2
    assert not email.is_empty()
