from __future__ import annotations

import logging
import threading
from typing import List, Optional

from .config import Config
from .event_client import EventSource
from .mailbox import Mailbox
from .mailer import MailSender, build_mailer
from .notifier import Notifier
from .scheduler import Scheduler

logger = logging.getLogger(__name__)


def build_schedulers(config: Config, client: EventSource, mailbox: Mailbox) -> List[Scheduler]:
    return [Scheduler(name, report, client, mailbox) for name, report in config.reports.items()]


def run(
    config: Config,
    client: EventSource,
    stop: threading.Event,
    mailer: Optional[MailSender] = None,
) -> None:
    """Start the notifier and one scheduler per report; return once all have exited after stop."""
    mailbox = Mailbox()
    notifier = Notifier(mailer or build_mailer(config.email_settings), mailbox)
    schedulers = build_schedulers(config, client, mailbox)
    logger.info("Starting %s schedulers", len(schedulers))

    # Stopped after every scheduler has exited; it then drains the mailbox.
    notifier_stop = threading.Event()
    notifier_thread = threading.Thread(target=notifier.start, args=(notifier_stop,), name="notifier", daemon=True)
    scheduler_threads = [
        threading.Thread(target=scheduler.start, args=(stop,), name=f"scheduler-{scheduler.name}", daemon=True)
        for scheduler in schedulers
    ]
    notifier_thread.start()
    for thread in scheduler_threads:
        thread.start()

    stop.wait()
    logger.info("Waiting for %s schedulers to finish", len(scheduler_threads))
    for thread in scheduler_threads:
        thread.join()
    notifier_stop.set()
    notifier_thread.join()
