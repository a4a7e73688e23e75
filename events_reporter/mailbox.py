from __future__ import annotations

import queue
import threading
from typing import Optional

from .models import EmailReport


class Mailbox:
    """
    Channel between the schedulers and the notifier.

    Each item is a whole report, or None for a cycle that found nothing.
    The queue is unbounded, so senders never block and nothing is dropped.
    """

    def __init__(self) -> None:
        self._queue: "queue.Queue[Optional[EmailReport]]" = queue.Queue()
        self._lock = threading.Lock()

    def send(self, report: Optional[EmailReport]) -> None:
        with self._lock:
            self._queue.put(report)

    def receive(self, timeout: Optional[float] = None) -> Optional[EmailReport]:
        """Return the next item; raises queue.Empty when the timeout expires."""
        return self._queue.get(timeout=timeout)

    def pending(self) -> int:
        return self._queue.qsize()
