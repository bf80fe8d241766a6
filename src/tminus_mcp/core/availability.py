"""Free/busy computation over fixed-size time slots.

Everything here is pure: slots and events in, classified slots out. Events
from any number of accounts are merged into a single view, so a slot is busy
as soon as one account is busy in it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..domain import EventStatus, SlotStatus
from .timeutil import parse_iso_ms, to_iso_ms


@dataclass(frozen=True, slots=True)
class TimeSlot:
    """Half-open interval ``[start_ms, end_ms)``."""

    start_ms: int
    end_ms: int

    def overlaps(self, start_ms: int, end_ms: int) -> bool:
        return start_ms < self.end_ms and end_ms > self.start_ms


@dataclass(frozen=True, slots=True)
class AvailabilitySlot:
    start_ms: int
    end_ms: int
    status: SlotStatus
    conflicting_events: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "start": to_iso_ms(self.start_ms),
            "end": to_iso_ms(self.end_ms),
            "status": self.status.value,
        }
        if self.status is not SlotStatus.FREE:
            payload["conflicting_events"] = self.conflicting_events
        return payload


@dataclass(frozen=True, slots=True)
class CalendarEventForAvailability:
    start_ts: str
    end_ts: str
    status: EventStatus = EventStatus.CONFIRMED
    account_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class _Interval:
    start_ms: int
    end_ms: int
    status: EventStatus


def generate_time_slots(start_ms: int, end_ms: int, granularity_ms: int) -> List[TimeSlot]:
    """Partition ``[start_ms, end_ms)`` into contiguous slots.

    The last slot is truncated at ``end_ms`` when the range does not divide
    evenly. An empty or inverted range yields no slots.
    """

    if granularity_ms <= 0:
        raise ValueError("granularity_ms must be positive")
    slots: List[TimeSlot] = []
    cursor = start_ms
    while cursor < end_ms:
        slot_end = min(cursor + granularity_ms, end_ms)
        slots.append(TimeSlot(cursor, slot_end))
        cursor = slot_end
    return slots


def _active_intervals(events: Iterable[CalendarEventForAvailability]) -> List[_Interval]:
    intervals: List[_Interval] = []
    for event in events:
        status = EventStatus(event.status)
        if status is EventStatus.CANCELLED:
            continue
        start_ms = parse_iso_ms(event.start_ts)
        end_ms = parse_iso_ms(event.end_ts)
        if start_ms is None or end_ms is None or end_ms <= start_ms:
            continue
        intervals.append(_Interval(start_ms, end_ms, status))
    return intervals


def compute_availability_slots(
    slots: Sequence[TimeSlot],
    events: Iterable[CalendarEventForAvailability],
) -> List[AvailabilitySlot]:
    """Classify each slot as free, tentative or busy.

    Confirmed outranks tentative regardless of how much of the slot either
    covers. ``conflicting_events`` counts every overlapping non-cancelled
    event and is only set on non-free slots.
    """

    intervals = _active_intervals(events)
    result: List[AvailabilitySlot] = []
    for slot in slots:
        overlapping = [item for item in intervals if slot.overlaps(item.start_ms, item.end_ms)]
        if not overlapping:
            result.append(AvailabilitySlot(slot.start_ms, slot.end_ms, SlotStatus.FREE))
            continue
        if any(item.status is EventStatus.CONFIRMED for item in overlapping):
            status = SlotStatus.BUSY
        else:
            status = SlotStatus.TENTATIVE
        result.append(AvailabilitySlot(slot.start_ms, slot.end_ms, status, len(overlapping)))
    return result


__all__ = [
    "AvailabilitySlot",
    "CalendarEventForAvailability",
    "TimeSlot",
    "compute_availability_slots",
    "generate_time_slots",
]
