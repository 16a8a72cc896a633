"""Revenue and booking analytics for the admin dashboard.

Every function here is a pure computation over appointments and services the
caller has already loaded. Revenue only ever comes from billable appointments
(see ``BILLABLE_STATUSES``); an appointment whose service is missing from the
catalog contributes nothing. Sums are plain floats, rounding is left to the
caller.
"""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable, Sequence

from .periods import DAILY, MONTHLY, WEEKLY, DateRange, bucket_key, month_bounds

BILLABLE_STATUSES = ("confirmed", "completed")


def _catalog(services: Iterable) -> dict:
    return {service.id: service for service in services}


def is_billable(appointment, allowed_statuses: Sequence[str] = BILLABLE_STATUSES) -> bool:
    return appointment.status in allowed_statuses


def appointment_revenue(
    appointment,
    services: Iterable,
    allowed_statuses: Sequence[str] = BILLABLE_STATUSES,
) -> float:
    """Price of the booked service, or 0 when the appointment is not billable."""
    if not is_billable(appointment, allowed_statuses):
        return 0.0
    service = _catalog(services).get(appointment.service_id)
    return float(service.price) if service is not None else 0.0


def _revenue(appointment, catalog: dict, allowed_statuses: Sequence[str]) -> float:
    if not is_billable(appointment, allowed_statuses):
        return 0.0
    service = catalog.get(appointment.service_id)
    return float(service.price) if service is not None else 0.0


def filter_by_date_range(appointments: Iterable, date_range: DateRange) -> list:
    return [appt for appt in appointments if date_range.contains(appt.appointment_date)]


def revenue_trends(
    appointments: Iterable,
    services: Iterable,
    period: str = DAILY,
    days_back: int = 30,
    allowed_statuses: Sequence[str] = BILLABLE_STATUSES,
    now: datetime | None = None,
) -> list[dict[str, object]]:
    """Revenue and booking count per day, week or month.

    Looks back ``days_back`` days from ``now``. Buckets with no revenue are
    left out, so the series is sparse and sorted by bucket key.
    """
    now = now or datetime.now()
    cutoff = now - timedelta(days=days_back)
    catalog = _catalog(services)

    buckets: dict[str, dict[str, float]] = {}
    for appt in appointments:
        if appt.appointment_date < cutoff:
            continue
        revenue = _revenue(appt, catalog, allowed_statuses)
        if revenue <= 0:
            continue
        key = bucket_key(appt.appointment_date, period)
        bucket = buckets.setdefault(key, {"revenue": 0.0, "appointments": 0})
        bucket["revenue"] += revenue
        bucket["appointments"] += 1

    return [
        {"date": key, "revenue": data["revenue"], "appointments": data["appointments"]}
        for key, data in sorted(buckets.items())
    ]


def top_services(
    appointments: Iterable,
    services: Sequence,
    limit: int = 5,
    allowed_statuses: Sequence[str] = BILLABLE_STATUSES,
) -> list[dict[str, object]]:
    """Catalog services ranked by billable revenue, highest first."""
    catalog = _catalog(services)
    totals: dict[str, dict[str, float]] = {}
    for appt in appointments:
        if not is_billable(appt, allowed_statuses) or appt.service_id not in catalog:
            continue
        entry = totals.setdefault(appt.service_id, {"revenue": 0.0, "bookings": 0})
        entry["revenue"] += _revenue(appt, catalog, allowed_statuses)
        entry["bookings"] += 1

    ranked = []
    for service in services:
        entry = totals.get(service.id, {"revenue": 0.0, "bookings": 0})
        bookings = entry["bookings"]
        ranked.append({
            "service": service,
            "revenue": entry["revenue"],
            "bookings": bookings,
            "average_value": entry["revenue"] / bookings if bookings > 0 else 0.0,
        })
    ranked.sort(key=lambda item: item["revenue"], reverse=True)
    return ranked[:limit]


def status_label(status: str) -> str:
    return status[:1].upper() + status[1:]


def appointment_distribution(appointments: Sequence) -> list[dict[str, object]]:
    """Share of appointments in each status, in order of first appearance."""
    counts = Counter(appt.status for appt in appointments)
    total = len(appointments)
    return [
        {
            "status": status_label(status),
            "count": count,
            "percentage": (count / total) * 100 if total > 0 else 0.0,
        }
        for status, count in counts.items()
    ]


def peak_hours(appointments: Iterable) -> list[dict[str, object]]:
    counts = Counter(appt.appointment_date.hour for appt in appointments)
    return [
        {"hour": hour, "appointments": count, "display_hour": f"{hour:02d}:00"}
        for hour, count in sorted(counts.items())
    ]


def growth_rate(previous: float, current: float) -> float:
    """Percentage change from ``previous`` to ``current``; 0 when there is no baseline."""
    if previous <= 0:
        return 0.0
    return ((current - previous) / previous) * 100


def period_over_period_growth(
    appointments: Sequence,
    services: Iterable,
    date_range: DateRange,
    allowed_statuses: Sequence[str] = BILLABLE_STATUSES,
) -> dict[str, float]:
    """Compare billable revenue and bookings with the preceding period of equal length."""
    catalog = _catalog(services)
    previous_range = date_range.previous()

    current = [
        appt for appt in appointments
        if date_range.contains(appt.appointment_date) and is_billable(appt, allowed_statuses)
    ]
    previous = [
        appt for appt in appointments
        if previous_range.contains(appt.appointment_date) and is_billable(appt, allowed_statuses)
    ]

    current_revenue = sum(_revenue(appt, catalog, allowed_statuses) for appt in current)
    previous_revenue = sum(_revenue(appt, catalog, allowed_statuses) for appt in previous)

    return {
        "revenue_growth": growth_rate(previous_revenue, current_revenue),
        "appointment_growth": growth_rate(len(previous), len(current)),
    }


def month_over_month_growth(
    appointments: Sequence,
    services: Iterable,
    allowed_statuses: Sequence[str] = BILLABLE_STATUSES,
    now: datetime | None = None,
) -> dict[str, float]:
    start, end = month_bounds(now or datetime.now())
    return period_over_period_growth(appointments, services, DateRange(start, end), allowed_statuses)


def dashboard_metrics(
    appointments: Sequence,
    services: Sequence,
    date_range: DateRange | None = None,
    allowed_statuses: Sequence[str] = BILLABLE_STATUSES,
    now: datetime | None = None,
) -> dict[str, object]:
    """Everything the admin overview shows, computed from one filtered appointment set."""
    now = now or datetime.now()
    catalog = _catalog(services)

    in_range = filter_by_date_range(appointments, date_range) if date_range else list(appointments)
    billable = [appt for appt in in_range if is_billable(appt, allowed_statuses)]

    total_revenue = sum(_revenue(appt, catalog, allowed_statuses) for appt in billable)
    average_booking_value = total_revenue / len(billable) if billable else 0.0

    if date_range:
        growth = period_over_period_growth(appointments, services, date_range, allowed_statuses)
    else:
        growth = month_over_month_growth(appointments, services, allowed_statuses, now)

    revenue_by_status = []
    for entry in appointment_distribution(in_range):
        status = entry["status"].lower()
        revenue = 0.0
        if status in allowed_statuses:
            revenue = sum(
                _revenue(appt, catalog, allowed_statuses) for appt in in_range if appt.status == status
            )
        revenue_by_status.append({"status": entry["status"], "count": entry["count"], "revenue": revenue})

    return {
        "total_revenue": total_revenue,
        "total_appointments": len(billable),
        "average_booking_value": average_booking_value,
        "revenue_growth": growth["revenue_growth"],
        "appointment_growth": growth["appointment_growth"],
        "top_services": top_services(billable, services, 5, allowed_statuses),
        "revenue_by_status": revenue_by_status,
        "daily_revenue": revenue_trends(billable, services, DAILY, 30, allowed_statuses, now),
        "weekly_revenue": revenue_trends(billable, services, WEEKLY, 84, allowed_statuses, now),
        "monthly_revenue": revenue_trends(billable, services, MONTHLY, 365, allowed_statuses, now),
    }


def appointment_summary(
    appointments: Sequence,
    services: Iterable,
    allowed_statuses: Sequence[str] = BILLABLE_STATUSES,
) -> dict[str, object]:
    """Operational counts for the appointments page: statuses, popular services and hours, repeat clients."""
    catalog = _catalog(services)
    status_counts = Counter(appt.status for appt in appointments)

    service_counts = Counter(appt.service_id for appt in appointments if appt.service_id in catalog)
    popular_services = [
        {"service_id": service_id, "service_name": catalog[service_id].name, "count": count}
        for service_id, count in service_counts.most_common(10)
    ]

    hour_counts = Counter(appt.appointment_date.hour for appt in appointments)
    popular_time_slots = [{"hour": hour, "count": count} for hour, count in hour_counts.most_common(10)]

    bookings_per_client = Counter(appt.client_email.strip().lower() for appt in appointments)
    returning = sum(1 for count in bookings_per_client.values() if count > 1)

    return {
        "total_appointments": len(appointments),
        "pending": status_counts.get("pending", 0),
        "confirmed": status_counts.get("confirmed", 0),
        "completed": status_counts.get("completed", 0),
        "cancelled": status_counts.get("cancelled", 0),
        "no_shows": status_counts.get("no-show", 0),
        "total_revenue": sum(_revenue(appt, catalog, allowed_statuses) for appt in appointments),
        "popular_services": popular_services,
        "popular_time_slots": popular_time_slots,
        "client_retention": {"returning": returning, "new": len(bookings_per_client) - returning},
    }
