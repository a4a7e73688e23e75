from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from .config import ReportSpec
from .models import ClusterEvent, EmailReport
from .utils import format_timestamp


def format_event_line(event: ClusterEvent) -> str:
    last_seen = format_timestamp(event.last_timestamp) if event.last_timestamp else ""
    return (
        f"Name:{event.name}\n"
        f"Kind:{event.kind}\n"
        f"Type:{event.type}\n"
        f"Reason:{event.reason}\n"
        f"Message:{event.message}\n"
        f"LastTimestamp:{last_seen}\n"
    )


def build_email_subject(description: str, since: datetime) -> str:
    return f"Event report: {description} since [{format_timestamp(since)}]"


def build_email_report(
    report: ReportSpec, since: datetime, events: Sequence[ClusterEvent]
) -> Optional[EmailReport]:
    """Compose the report for one cycle, or None when there is nothing to send."""
    if not events:
        return None
    body: List[str] = [format_event_line(event) for event in events]
    return EmailReport(
        recipients=tuple(report.email_recipients),
        subject=build_email_subject(report.description, since),
        body=tuple(body),
    )
