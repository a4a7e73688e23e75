from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping

from .models import ClusterEvent


# Field selector key for the kind of the object an event is about
KIND_FIELD = "involvedObject.kind"
REASON_FIELD = "reason"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """
    Render a timestamp the way the cluster tooling prints times by default,
    e.g. "2019-01-15 00:00:00 +0000 UTC".

    Naive datetimes are taken as UTC. Fractional seconds are shown only when
    non-zero, with trailing zeros trimmed.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    text = dt.strftime("%Y-%m-%d %H:%M:%S")
    if dt.microsecond:
        text += f".{dt.microsecond:06d}".rstrip("0")
    return f"{text} +0000 UTC"


def build_field_sets(kind: str, reasons: Iterable[str]) -> List[Dict[str, str]]:
    field_sets: List[Dict[str, str]] = []
    for reason in reasons:
        field_set: Dict[str, str] = {}
        if kind:
            field_set[KIND_FIELD] = kind
        if reason:
            field_set[REASON_FIELD] = reason
        field_sets.append(field_set)
    return field_sets


def field_selector(field_set: Mapping[str, str]) -> str:
    """Render a field set as a selector string: sorted "key=value" pairs joined by commas."""
    return ",".join(f"{key}={_escape_selector_value(field_set[key])}" for key in sorted(field_set))


def _escape_selector_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace(",", "\\,").replace("=", "\\=")


def is_since(event: ClusterEvent, watermark: datetime) -> bool:
    if event.last_timestamp is None:
        return False
    return event.last_timestamp >= watermark


def filter_events_since(watermark: datetime, events: Iterable[ClusterEvent]) -> List[ClusterEvent]:
    """Keep the events last seen at or after the watermark, in input order."""
    filtered: List[ClusterEvent] = []
    for event in events:
        if not is_since(event, watermark):
            continue
        filtered.append(event)
    return filtered
