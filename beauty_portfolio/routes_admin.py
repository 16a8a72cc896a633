"""Admin back office routes: authentication, appointments, analytics and the service catalog."""
from __future__ import annotations

from decimal import Decimal, InvalidOperation

from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from . import analytics
from .auth import admin_required, build_token
from .booking import SchedulingConflict, appointments_on, change_status, reschedule_appointment
from .extensions import db
from .models import APPOINTMENT_STATUSES, PAYMENT_STATUSES, AdminUser, Appointment, Service
from .payloads import PayloadError, flag_value, json_body, text_value
from .periods import parse_date, parse_datetime, parse_range

bp_admin = Blueprint("admin", __name__, url_prefix="/admin")

MIN_PASSWORD_LENGTH = 6


def _round(value: float) -> float:
    return round(value, 2)


def _conflict_response():
    return (
        jsonify({
            "error": "conflict",
            "message": "Time slot conflicts with an existing appointment. Please choose a different time."
        }),
        409,
    )


# --- Authentication ---


@bp_admin.post("/login")
def login() -> tuple[dict[str, object], int]:
    """Authenticate an admin by username/password and return an access token.
    ---
    tags:
      - Admin
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            username:
              type: string
            password:
              type: string
    responses:
      200:
        description: Login successful, returns access token
      400:
        description: Missing username or password
      401:
        description: Invalid credentials
    """
    payload = json_body()

    username = payload.get("username")
    password = payload.get("password")
    if isinstance(username, str):
        username = username.strip()

    if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
        return jsonify({"error": "invalid_payload", "message": "username and password are required"}), 400

    try:
        admin = AdminUser.query.filter_by(username=username).first()
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to look up admin user", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    if not admin or not check_password_hash(admin.password_hash, password):
        return jsonify({"error": "unauthorized", "message": "Invalid credentials"}), 401

    return jsonify({"message": "Login successful", "token": build_token(admin), "admin": admin.to_dict()}), 200


@bp_admin.get("/check")
@admin_required
def check_session() -> tuple[dict[str, object], int]:
    return jsonify({"authenticated": True, "admin": g.admin.to_dict()}), 200


@bp_admin.post("/update-password")
@admin_required
def update_password() -> tuple[dict[str, object], int]:
    payload = json_body()
    current_password = payload.get("current_password")
    new_password = payload.get("new_password")

    if not isinstance(current_password, str) or not isinstance(new_password, str) or not current_password or not new_password:
        return jsonify({"error": "invalid_payload", "message": "Current and new passwords are required"}), 400

    if len(new_password) < MIN_PASSWORD_LENGTH:
        return (
            jsonify({
                "error": "invalid_payload",
                "message": f"New password must be at least {MIN_PASSWORD_LENGTH} characters"
            }),
            400,
        )

    if not check_password_hash(g.admin.password_hash, current_password):
        return jsonify({"error": "unauthorized", "message": "Current password is incorrect"}), 401

    try:
        g.admin.password_hash = generate_password_hash(new_password)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to update admin password", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify({"message": "Password updated successfully"}), 200


# --- Appointments ---


@bp_admin.get("/appointments")
@admin_required
def search_appointments() -> tuple[dict[str, object], int]:
    """List appointments, optionally filtered.
    ---
    tags:
      - Appointments
    parameters:
      - name: q
        in: query
        type: string
        description: Substring of the client name or email (case-insensitive)
      - name: status
        in: query
        type: string
      - name: service_id
        in: query
        type: string
      - name: start_date
        in: query
        type: string
      - name: end_date
        in: query
        type: string
    responses:
      200:
        description: Appointments ordered by appointment date
      400:
        description: Invalid filter
      500:
        description: Database error
    """
    term = request.args.get("q", "").strip()
    status = request.args.get("status", "").strip()
    service_id = request.args.get("service_id", "").strip()
    start_value = request.args.get("start_date")
    end_value = request.args.get("end_date")

    if status and status not in APPOINTMENT_STATUSES:
        return jsonify({"error": "invalid_payload", "message": f"Unknown status '{status}'"}), 400

    date_range = None
    if start_value or end_value:
        date_range = parse_range(start_value, end_value)
        if date_range is None:
            return (
                jsonify({
                    "error": "invalid_payload",
                    "message": "start_date and end_date must both be valid ISO dates"
                }),
                400,
            )

    try:
        query = Appointment.query

        if term:
            pattern = f"%{term}%"
            query = query.filter(
                or_(Appointment.client_name.ilike(pattern), Appointment.client_email.ilike(pattern))
            )
        if status:
            query = query.filter(Appointment.status == status)
        if service_id:
            query = query.filter(Appointment.service_id == service_id)
        if date_range:
            query = query.filter(
                Appointment.appointment_date >= date_range.start,
                Appointment.appointment_date <= date_range.end,
            )

        appointments = query.order_by(Appointment.appointment_date.asc()).all()
        return jsonify({"appointments": [appt.to_dict() for appt in appointments]}), 200

    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to search appointments", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp_admin.get("/appointments/by-date/<string:date_str>")
@admin_required
def appointments_by_date(date_str: str) -> tuple[dict[str, object], int]:
    target_date = parse_date(date_str)
    if target_date is None:
        return jsonify({"error": "invalid_payload", "message": "date must be in YYYY-MM-DD format"}), 400

    try:
        appointments = appointments_on(target_date)
        return jsonify({
            "date": target_date.isoformat(),
            "appointments": [appt.to_dict() for appt in appointments],
        }), 200
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch appointments by date", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp_admin.patch("/appointments/<string:appointment_id>")
@admin_required
def update_appointment(appointment_id: str) -> tuple[dict[str, object], int]:
    """Edit an appointment. Moves and reactivations from cancelled re-check the schedule."""
    payload = json_body()

    try:
        client_fields = {
            field: text_value(payload, field)
            for field in ("client_name", "client_email", "client_phone")
            if field in payload
        }
        notes = text_value(payload, "notes")
        cancellation_reason = text_value(payload, "cancellation_reason")
        appointment_date = text_value(payload, "appointment_date")
        service_id = text_value(payload, "service_id")
        deposit_paid = flag_value(payload, "deposit_paid") if "deposit_paid" in payload else None
    except PayloadError as exc:
        return jsonify({"error": "invalid_payload", "message": str(exc)}), 400

    for field, value in client_fields.items():
        if not value:
            return jsonify({"error": "invalid_payload", "message": f"{field} cannot be empty"}), 400

    status = payload.get("status")
    if "status" in payload and status not in APPOINTMENT_STATUSES:
        return (
            jsonify({
                "error": "invalid_payload",
                "message": f"status must be one of: {', '.join(APPOINTMENT_STATUSES)}"
            }),
            400,
        )

    if "payment_status" in payload and payload["payment_status"] not in PAYMENT_STATUSES:
        return (
            jsonify({
                "error": "invalid_payload",
                "message": f"payment_status must be one of: {', '.join(PAYMENT_STATUSES)}"
            }),
            400,
        )

    starts_at = None
    if "appointment_date" in payload:
        starts_at = parse_datetime(appointment_date)
        if starts_at is None:
            return (
                jsonify({
                    "error": "invalid_payload",
                    "message": "appointment_date must be a valid ISO format datetime"
                }),
                400,
            )

    try:
        appointment = Appointment.query.get(appointment_id)
        if not appointment:
            return jsonify({"error": "not_found", "message": "Appointment not found"}), 404

        for field, value in client_fields.items():
            setattr(appointment, field, value)
        if "notes" in payload:
            appointment.notes = notes
        if "cancellation_reason" in payload:
            appointment.cancellation_reason = cancellation_reason
        if "payment_status" in payload:
            appointment.payment_status = payload["payment_status"]
        if deposit_paid is not None:
            appointment.deposit_paid = deposit_paid

        if "appointment_date" in payload or "service_id" in payload:
            service = Service.query.get(service_id or appointment.service_id)
            if not service:
                db.session.rollback()
                return jsonify({"error": "invalid_payload", "message": "Invalid service selected"}), 400

            reschedule_appointment(appointment, service, starts_at or appointment.appointment_date)

        # After any move, so a reactivation is checked against the new slot
        if "status" in payload:
            change_status(appointment, status)

        db.session.commit()
        return jsonify({"message": "Appointment updated successfully", "appointment": appointment.to_dict()}), 200

    except SchedulingConflict:
        db.session.rollback()
        return _conflict_response()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to update appointment", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp_admin.patch("/appointments/<string:appointment_id>/status")
@admin_required
def update_appointment_status(appointment_id: str) -> tuple[dict[str, object], int]:
    """Set an appointment's status. Any status may follow any other."""
    payload = json_body()
    status = payload.get("status")
    try:
        cancellation_reason = text_value(payload, "cancellation_reason")
    except PayloadError as exc:
        return jsonify({"error": "invalid_payload", "message": str(exc)}), 400

    if not status:
        return jsonify({"error": "invalid_payload", "message": "Status is required"}), 400
    if status not in APPOINTMENT_STATUSES:
        return (
            jsonify({
                "error": "invalid_payload",
                "message": f"status must be one of: {', '.join(APPOINTMENT_STATUSES)}"
            }),
            400,
        )

    try:
        appointment = Appointment.query.get(appointment_id)
        if not appointment:
            return jsonify({"error": "not_found", "message": "Appointment not found"}), 404

        change_status(appointment, status)
        if status == "cancelled" and "cancellation_reason" in payload:
            appointment.cancellation_reason = cancellation_reason
        db.session.commit()

        return jsonify({"appointment": appointment.to_dict()}), 200

    except SchedulingConflict:
        db.session.rollback()
        return _conflict_response()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to update appointment status", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp_admin.patch("/appointments/bulk/status")
@admin_required
def bulk_update_appointment_status() -> tuple[dict[str, object], int]:
    """Set one status on many appointments; ids that do not exist are skipped.

    All or nothing: if reactivating any cancelled appointment would clash with
    the schedule, no appointment is changed and the response is 409.
    """
    payload = json_body()
    ids = payload.get("appointment_ids")
    status = payload.get("status")

    if not isinstance(ids, list) or not all(isinstance(appt_id, str) for appt_id in ids) or not status:
        return jsonify({"error": "invalid_payload", "message": "appointment_ids array and status are required"}), 400
    if status not in APPOINTMENT_STATUSES:
        return (
            jsonify({
                "error": "invalid_payload",
                "message": f"status must be one of: {', '.join(APPOINTMENT_STATUSES)}"
            }),
            400,
        )

    try:
        appointments = Appointment.query.filter(Appointment.id.in_(ids)).all() if ids else []
        for appointment in appointments:
            change_status(appointment, status)
        db.session.commit()

        by_id = {appt.id: appt for appt in appointments}
        updated = [by_id[appt_id].to_dict() for appt_id in ids if appt_id in by_id]
        return jsonify({"appointments": updated, "updated": len(updated), "requested": len(ids)}), 200

    except SchedulingConflict:
        db.session.rollback()
        return _conflict_response()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to bulk update appointment status", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp_admin.delete("/appointments/<string:appointment_id>")
@admin_required
def delete_appointment(appointment_id: str) -> tuple[dict[str, object], int]:
    """Permanently remove an appointment."""
    try:
        appointment = Appointment.query.get(appointment_id)
        if not appointment:
            return jsonify({"error": "not_found", "message": "Appointment not found"}), 404

        db.session.delete(appointment)
        db.session.commit()
        return jsonify({"message": "Appointment deleted successfully"}), 200

    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to delete appointment", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


# --- Analytics ---


def _allowed_statuses():
    """Parse the ``statuses`` query parameter; returns (statuses, error_message)."""
    raw = request.args.get("statuses", "").strip()
    if not raw:
        return analytics.BILLABLE_STATUSES, None
    statuses = tuple(s.strip() for s in raw.split(",") if s.strip())
    unknown = [s for s in statuses if s not in APPOINTMENT_STATUSES]
    if unknown:
        return None, f"Unknown status: {', '.join(unknown)}"
    return statuses, None


def _requested_range():
    """Parse ``start_date``/``end_date``; returns (range_or_None, error_message)."""
    start_value = request.args.get("start_date")
    end_value = request.args.get("end_date")
    if not start_value and not end_value:
        return None, None
    date_range = parse_range(start_value, end_value)
    if date_range is None:
        return None, "start_date and end_date must both be valid ISO dates"
    if date_range.end < date_range.start:
        return None, "end_date must not be before start_date"
    return date_range, None


def _serialize_trend(series: list[dict[str, object]]) -> list[dict[str, object]]:
    return [{**point, "revenue": _round(point["revenue"])} for point in series]


def _serialize_metrics(metrics: dict[str, object]) -> dict[str, object]:
    return {
        "total_revenue": _round(metrics["total_revenue"]),
        "total_appointments": metrics["total_appointments"],
        "average_booking_value": _round(metrics["average_booking_value"]),
        "revenue_growth": _round(metrics["revenue_growth"]),
        "appointment_growth": _round(metrics["appointment_growth"]),
        "top_services": [
            {
                "service": entry["service"].to_dict(),
                "revenue": _round(entry["revenue"]),
                "bookings": entry["bookings"],
                "average_value": _round(entry["average_value"]),
            }
            for entry in metrics["top_services"]
        ],
        "revenue_by_status": [
            {**entry, "revenue": _round(entry["revenue"])} for entry in metrics["revenue_by_status"]
        ],
        "daily_revenue": _serialize_trend(metrics["daily_revenue"]),
        "weekly_revenue": _serialize_trend(metrics["weekly_revenue"]),
        "monthly_revenue": _serialize_trend(metrics["monthly_revenue"]),
    }


@bp_admin.get("/dashboard")
@admin_required
def get_dashboard() -> tuple[dict[str, object], int]:
    """Revenue and booking metrics for the admin overview.
    ---
    tags:
      - Analytics
    parameters:
      - name: start_date
        in: query
        type: string
      - name: end_date
        in: query
        type: string
      - name: statuses
        in: query
        type: string
        description: Comma separated statuses counted as revenue (default confirmed,completed)
    responses:
      200:
        description: Dashboard metrics
      400:
        description: Invalid range or status filter
      500:
        description: Database error
    """
    statuses, error = _allowed_statuses()
    if error:
        return jsonify({"error": "invalid_payload", "message": error}), 400
    date_range, error = _requested_range()
    if error:
        return jsonify({"error": "invalid_payload", "message": error}), 400

    try:
        # Inactive services still carry the revenue of their past bookings
        services = Service.query.all()
        appointments = Appointment.query.all()
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to load dashboard data", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    metrics = analytics.dashboard_metrics(appointments, services, date_range, statuses)
    in_range = analytics.filter_by_date_range(appointments, date_range) if date_range else appointments

    return jsonify({
        "metrics": _serialize_metrics(metrics),
        "status_distribution": [
            {**entry, "percentage": _round(entry["percentage"])}
            for entry in analytics.appointment_distribution(in_range)
        ],
        "peak_hours": analytics.peak_hours(in_range),
        "range": {
            "start_date": date_range.start.isoformat(),
            "end_date": date_range.end.isoformat(),
        } if date_range else None,
    }), 200


@bp_admin.get("/appointments/analytics")
@admin_required
def get_appointment_analytics() -> tuple[dict[str, object], int]:
    """Status counts, popular services and hours, and client retention."""
    date_range, error = _requested_range()
    if error:
        return jsonify({"error": "invalid_payload", "message": error}), 400

    try:
        services = Service.query.all()
        query = Appointment.query
        if date_range:
            query = query.filter(
                Appointment.appointment_date >= date_range.start,
                Appointment.appointment_date <= date_range.end,
            )
        appointments = query.all()
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch appointment analytics", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    summary = analytics.appointment_summary(appointments, services)
    summary["total_revenue"] = _round(summary["total_revenue"])
    return jsonify({"analytics": summary}), 200


# --- Service catalog ---


def _parse_service_fields(payload: dict, partial: bool = False):
    """Validate service fields; returns (fields, error_message)."""
    fields: dict[str, object] = {}

    try:
        for name in ("name", "description", "category"):
            if name in payload:
                fields[name] = text_value(payload, name) or ""
        if "active" in payload:
            fields["active"] = flag_value(payload, "active")
    except PayloadError as exc:
        return None, str(exc)

    if not partial and not fields.get("name"):
        return None, "name is required"
    if "name" in fields and not fields["name"]:
        return None, "name cannot be empty"

    if "duration" in payload or not partial:
        try:
            duration = int(payload.get("duration"))
        except (TypeError, ValueError):
            return None, "duration must be a positive integer (minutes)"
        if duration <= 0:
            return None, "duration must be a positive integer (minutes)"
        fields["duration"] = duration

    if "price" in payload or not partial:
        try:
            price = Decimal(str(payload.get("price")))
        except (InvalidOperation, ValueError):
            return None, "price must be a non-negative number"
        if not price.is_finite() or price < 0:
            return None, "price must be a non-negative number"
        fields["price"] = price

    return fields, None


@bp_admin.get("/services")
@admin_required
def list_all_services() -> tuple[dict[str, object], int]:
    """Every service, including deactivated ones."""
    try:
        services = Service.query.order_by(Service.created_at.asc()).all()
        return jsonify({"services": [service.to_dict() for service in services]}), 200
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch services", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp_admin.post("/services")
@admin_required
def create_service() -> tuple[dict[str, object], int]:
    payload = json_body()
    fields, error = _parse_service_fields(payload)
    if error:
        return jsonify({"error": "invalid_payload", "message": error}), 400

    try:
        service = Service(**fields)
        db.session.add(service)
        db.session.commit()
        return jsonify({"service": service.to_dict()}), 201
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to create service", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp_admin.patch("/services/<string:service_id>")
@admin_required
def update_service(service_id: str) -> tuple[dict[str, object], int]:
    payload = json_body()
    fields, error = _parse_service_fields(payload, partial=True)
    if error:
        return jsonify({"error": "invalid_payload", "message": error}), 400

    try:
        service = Service.query.get(service_id)
        if not service:
            return jsonify({"error": "not_found", "message": "Service not found"}), 404

        for name, value in fields.items():
            setattr(service, name, value)
        db.session.commit()
        return jsonify({"service": service.to_dict()}), 200

    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to update service", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp_admin.delete("/services/<string:service_id>")
@admin_required
def delete_service(service_id: str) -> tuple[dict[str, object], int]:
    """Delete a service, or deactivate it when appointments still reference it."""
    try:
        service = Service.query.get(service_id)
        if not service:
            return jsonify({"error": "not_found", "message": "Service not found"}), 404

        if service.appointments.count() > 0:
            service.active = False
            db.session.commit()
            return jsonify({"message": "Service deactivated", "service": service.to_dict()}), 200

        db.session.delete(service)
        db.session.commit()
        return jsonify({"message": "Service deleted successfully"}), 200

    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to delete service", exc_info=exc)
        return jsonify({"error": "database_error"}), 500
