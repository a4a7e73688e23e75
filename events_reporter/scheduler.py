from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional

from .config import ReportSpec
from .email_formatter import build_email_report
from .event_client import EventQueryError, EventSource
from .mailbox import Mailbox
from .models import ClusterEvent, EmailReport
from .utils import build_field_sets, field_selector, filter_events_since, format_timestamp, utc_now

logger = logging.getLogger(__name__)


class Scheduler:
    """Polls the event source for one report and hands each cycle's result to the mailbox."""

    def __init__(
        self,
        name: str,
        report: ReportSpec,
        client: EventSource,
        mailbox: Mailbox,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.name = name
        self.report = report
        self.field_sets = build_field_sets(report.kind, report.reasons)
        self._client = client
        self._mailbox = mailbox
        self._clock = clock
        self.last_report_time = clock()

    def start(self, stop: threading.Event) -> None:
        """Run a cycle now and then once per interval until stop is set."""
        logger.info("Scheduler %s (%s) started, interval=%s", self.name, self.report.description, self.report.interval)
        interval = self.report.interval.total_seconds()
        while not stop.is_set():
            try:
                self.run_cycle()
            except Exception as exc:  # noqa: BLE001
                logger.exception("Scheduler %s cycle crashed: %s", self.name, exc)
            if stop.wait(interval):
                break
        logger.info("Scheduler %s stopped", self.name)

    def run_cycle(self) -> Optional[EmailReport]:
        """
        Query, filter, format and send one report.

        Returns the report handed to the mailbox (None for an empty cycle).
        A query failure skips the send and keeps the watermark; callers get
        None in that case too.
        """
        since = self.last_report_time
        events = self._collect_events()
        if events is None:
            return None

        in_range = filter_events_since(since, events)
        report = build_email_report(self.report, since, in_range)
        self._mailbox.send(report)
        if report is None:
            logger.info("Scheduler %s: no events were found since %s", self.name, format_timestamp(since))
        else:
            logger.info("Scheduler %s: reported %s events since %s", self.name, len(in_range), format_timestamp(since))

        self.last_report_time = self._clock()
        return report

    def _collect_events(self) -> Optional[List[ClusterEvent]]:
        events: List[ClusterEvent] = []
        for field_set in self.field_sets:
            selector = field_selector(field_set)
            try:
                events.extend(self._client.list_events(self.report.namespace, selector))
            except EventQueryError as exc:
                logger.error("Scheduler %s: could not get events for %r: %s", self.name, selector, exc)
                return None
        return events
