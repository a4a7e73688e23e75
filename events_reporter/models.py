from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class ClusterEvent:
    name: str
    kind: str
    type: str
    reason: str
    message: str
    last_timestamp: Optional[datetime]
    namespace: str = ""


@dataclass(frozen=True)
class EmailReport:
    recipients: Tuple[str, ...] = ()
    subject: str = ""
    body: Tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not self.recipients and not self.subject and not self.body
