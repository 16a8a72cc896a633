"""Availability and booking conflict checks.

Both checks work at hour-of-day granularity: an appointment occupies the hour
its start time falls in, and a service blocks ``ceil(duration / 60)`` hours.
Callers fetch the appointments and pass them in; nothing here touches the
database.
"""
from __future__ import annotations

import math
from datetime import date, datetime
from typing import Iterable

# Daily start times offered on the booking page
CANDIDATE_SLOTS = ("09:00", "10:30", "12:00", "13:30", "15:00", "16:30")

# Only confirmed bookings take a slot off the booking page
BLOCKING_STATUSES = frozenset({"confirmed"})


def slot_hour(slot: str) -> int:
    return int(slot.split(":")[0])


def available_slots(target_date: date, appointments: Iterable) -> list[str]:
    """Return the candidate slots still open on ``target_date``, in fixed order."""
    booked_hours = {
        appt.appointment_date.hour
        for appt in appointments
        if appt.status in BLOCKING_STATUSES and appt.appointment_date.date() == target_date
    }
    return [slot for slot in CANDIDATE_SLOTS if slot_hour(slot) not in booked_hours]


def service_hours(duration_minutes: int) -> int:
    return math.ceil(duration_minutes / 60)


def find_conflicts(
    service,
    starts_at: datetime,
    appointments: Iterable,
    exclude_id: str | None = None,
) -> list:
    """List the existing appointments that collide with a booking of ``service`` at ``starts_at``.

    An appointment collides when it is on the same calendar day, is not
    cancelled, is not ``exclude_id`` and its start hour is fewer than
    ``ceil(service.duration / 60)`` hours away from ``starts_at``'s hour.
    Without a service there is no duration to check against, so nothing
    collides.
    """
    if service is None:
        return []

    window = service_hours(service.duration)
    target_day = starts_at.date()
    conflicts = []
    for appt in appointments:
        if appt.status == "cancelled":
            continue
        if exclude_id is not None and appt.id == exclude_id:
            continue
        if appt.appointment_date.date() != target_day:
            continue
        if abs(appt.appointment_date.hour - starts_at.hour) < window:
            conflicts.append(appt)
    return conflicts


def has_conflict(service, starts_at: datetime, appointments: Iterable, exclude_id: str | None = None) -> bool:
    return bool(find_conflicts(service, starts_at, appointments, exclude_id))
