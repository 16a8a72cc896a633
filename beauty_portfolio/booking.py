"""Appointment writes that must be checked against the schedule.

The conflict check and the write share one transaction. On PostgreSQL the
transaction first takes an advisory lock keyed on the calendar day, so schedule
writes for that day run one at a time even when the day has no rows yet
to lock. The day's rows are then read with ``FOR UPDATE`` before the new or
moved appointment is flushed. SQLite has neither lock and relies on its
single-writer file lock instead. The caller owns the commit and the rollback.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import text

from .extensions import db
from .models import Appointment, Service
from .periods import day_bounds
from .scheduling import find_conflicts

# High bits of the advisory lock key; keeps day locks apart from other lock users
DAY_LOCK_NAMESPACE = 0x5A1 << 32


class SchedulingConflict(Exception):
    """The requested time overlaps appointments already on the books."""

    def __init__(self, conflicts: list[Appointment]):
        super().__init__("Time slot conflicts with an existing appointment")
        self.conflicts = conflicts


def day_lock_key(day: date) -> int:
    return DAY_LOCK_NAMESPACE + day.toordinal()


def lock_day(day: date) -> None:
    """Serialise schedule writes for ``day`` until the transaction ends (PostgreSQL only)."""
    if db.session.get_bind().dialect.name != "postgresql":
        return
    db.session.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": day_lock_key(day)})


def appointments_on(day: date, lock: bool = False, statuses: tuple[str, ...] | None = None) -> list[Appointment]:
    start_of_day, end_of_day = day_bounds(day)
    query = Appointment.query.filter(
        Appointment.appointment_date >= start_of_day,
        Appointment.appointment_date <= end_of_day,
    )
    if statuses:
        query = query.filter(Appointment.status.in_(statuses))
    if lock:
        query = query.with_for_update()
    return query.order_by(Appointment.appointment_date.asc()).all()


def deposit_for(service: Service, rate: str | Decimal) -> Decimal:
    amount = Decimal(str(service.price)) * Decimal(str(rate))
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _ensure_free(service: Service, starts_at: datetime, exclude_id: str | None = None) -> None:
    lock_day(starts_at.date())
    existing = appointments_on(starts_at.date(), lock=True)
    conflicts = find_conflicts(service, starts_at, existing, exclude_id=exclude_id)
    if conflicts:
        raise SchedulingConflict(conflicts)


def book_appointment(service: Service, starts_at: datetime, deposit_rate: str | Decimal, **client_fields) -> Appointment:
    """Add a pending appointment to the session after checking the slot is free.

    Raises SchedulingConflict if it overlaps an existing booking.
    """
    _ensure_free(service, starts_at)

    appointment = Appointment(
        service=service,
        appointment_date=starts_at,
        status="pending",
        deposit_amount=deposit_for(service, deposit_rate),
        deposit_paid=False,
        payment_status="unpaid",
        **client_fields,
    )
    db.session.add(appointment)
    db.session.flush()
    return appointment


def reschedule_appointment(appointment: Appointment, service: Service, starts_at: datetime) -> Appointment:
    """Move ``appointment`` to ``service`` at ``starts_at``, ignoring its own current slot."""
    _ensure_free(service, starts_at, exclude_id=appointment.id)

    appointment.service = service
    appointment.appointment_date = starts_at
    db.session.flush()
    return appointment


def change_status(appointment: Appointment, status: str) -> Appointment:
    """Set ``appointment.status``; any status may follow any other.

    A cancelled appointment no longer holds its slot, so bringing it back to
    any other status re-checks the schedule first and raises
    SchedulingConflict if the slot has been taken meanwhile.
    """
    if appointment.status == "cancelled" and status != "cancelled":
        _ensure_free(appointment.service, appointment.appointment_date, exclude_id=appointment.id)

    appointment.status = status
    return appointment
