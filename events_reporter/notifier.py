from __future__ import annotations

import logging
import queue
import threading
from typing import Optional

from .mailbox import Mailbox
from .mailer import MailError, MailSender
from .models import EmailReport

logger = logging.getLogger(__name__)

# How often the receive loop wakes up to check for shutdown
POLL_SECONDS = 0.5


class Notifier:
    """Single consumer of the mailbox; delivers one report at a time."""

    def __init__(self, mailer: MailSender, mailbox: Mailbox, poll_seconds: float = POLL_SECONDS):
        self._mailer = mailer
        self._mailbox = mailbox
        self._poll_seconds = poll_seconds

    def start(self, stop: threading.Event) -> None:
        logger.info("Notifier started with mail provider=%s", self._mailer.provider)
        while not stop.is_set():
            try:
                item = self._mailbox.receive(timeout=self._poll_seconds)
            except queue.Empty:
                continue
            self.handle(item)
        self.drain()
        logger.info("Notifier stopped")

    def drain(self) -> int:
        """Handle every report still queued without waiting for more. Returns how many were taken."""
        pending = self._mailbox.pending()
        if pending:
            logger.info("Draining %s pending reports before exit", pending)
        taken = 0
        while True:
            try:
                item = self._mailbox.receive(timeout=0)
            except queue.Empty:
                return taken
            self.handle(item)
            taken += 1

    def handle(self, report: Optional[EmailReport]) -> bool:
        """Deliver a report. Returns True when a delivery was attempted and succeeded."""
        if report is None or report.is_empty():
            return False
        logger.info("Report received: %s", report.subject)
        try:
            self._mailer.send(report)
        except MailError as exc:
            logger.error("Could not send email %r: %s", report.subject, exc)
            return False
        return True
