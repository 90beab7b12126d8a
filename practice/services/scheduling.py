"""
Appointment conflict detection and slot suggestion.

Appointments occupy fixed 60-minute slots.  Two appointments on the same
date conflict when their start times are less than ``SLOT_MINUTES``
apart.  The pure helpers work on plain minute offsets so they can be
exercised without a database; the ``*_on`` wrappers fetch the date's
appointments first.
"""
from __future__ import annotations

import datetime
from typing import Iterable, Optional

from practice.models import Appointment

SLOT_MINUTES = 60
DAY_START = 8 * 60
LAST_SLOT_START = 16 * 60
MAX_SUGGESTIONS = 3
NO_SLOTS_MESSAGE = 'No available slots on this date'


class SchedulingConflict(Exception):
    """Raised when a requested start collides with an existing appointment."""

    def __init__(self, conflicting: Appointment, suggested_times: list[str]):
        super().__init__(
            f"Time slot conflict with {conflicting.client_name} at {format_minutes(to_minutes(conflicting.time))}"
        )
        self.conflicting = conflicting
        self.suggested_times = suggested_times


def parse_time(value: str) -> datetime.time:
    """Parse ``"HH:MM"`` (seconds tolerated) into a :class:`datetime.time`."""
    parts = str(value).strip().split(':')
    if len(parts) not in (2, 3):
        raise ValueError(f"invalid time: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    return datetime.time(hour, minute)


def to_minutes(value: datetime.time | str) -> int:
    if isinstance(value, str):
        value = parse_time(value)
    return value.hour * 60 + value.minute


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def is_clash(a: int, b: int) -> bool:
    return abs(a - b) < SLOT_MINUTES


def find_conflict(requested: int, appointments: Iterable[Appointment]) -> Optional[Appointment]:
    """Return the first appointment starting less than a slot away from ``requested``.

    ``appointments`` must already be restricted to the requested date;
    scan order decides which appointment is reported when several clash.
    """
    for appt in appointments:
        if is_clash(requested, to_minutes(appt.time)):
            return appt
    return None


def blocks(candidate: int, booked: int) -> bool:
    """True if ``candidate`` starts in ``[booked - 60, booked + 60)``.

    A candidate outside that window never clashes with ``booked``.
    """
    return booked - SLOT_MINUTES <= candidate < booked + SLOT_MINUTES


def suggest_slots(occupied: Iterable[int], limit: int = MAX_SUGGESTIONS) -> list[str]:
    """Return up to ``limit`` free on-the-hour starts between 08:00 and 16:00.

    Each booked start blocks its own hour and the hour before it, so
    bookings at 09:00 and 11:00 leave 12:00 onwards.  Every suggestion
    also passes :func:`find_conflict`.
    """
    taken = set(occupied)
    free: list[str] = []
    for candidate in range(DAY_START, LAST_SLOT_START + 1, SLOT_MINUTES):
        if any(blocks(candidate, m) for m in taken):
            continue
        free.append(format_minutes(candidate))
        if len(free) >= limit:
            break
    return free


def appointments_on(date: datetime.date):
    return Appointment.objects.filter(date=date).order_by('id')


def suggest_slots_on(date: datetime.date, limit: int = MAX_SUGGESTIONS) -> list[str]:
    return suggest_slots((to_minutes(a.time) for a in appointments_on(date)), limit=limit)


def ensure_slot_free(date: datetime.date, time: datetime.time) -> None:
    """Raise :class:`SchedulingConflict` if ``date``/``time`` cannot be booked."""
    existing = list(appointments_on(date))
    conflict = find_conflict(to_minutes(time), existing)
    if conflict is not None:
        suggestions = suggest_slots(to_minutes(a.time) for a in existing)
        raise SchedulingConflict(conflict, suggestions)
