"""Public HTTP routes for the Beauty Portfolio backend."""
from __future__ import annotations

from datetime import datetime

import stripe
from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .booking import SchedulingConflict, appointments_on, book_appointment
from .extensions import db
from .models import (Appointment, ContactFAQ, ContactInfo, ContactMessage,
                     PortfolioItem, PromotionalBanner, Service, SocialMediaLink,
                     Testimonial)
from .payloads import PayloadError, json_body, text_value
from .periods import parse_date, parse_datetime
from .scheduling import BLOCKING_STATUSES, available_slots

bp = Blueprint("api", __name__)

BOOKING_FIELDS = ("client_name", "client_email", "client_phone")
CONTACT_FIELDS = ("first_name", "last_name", "email", "subject", "message")


def register_routes(app) -> None:
    from .routes_admin import bp_admin
    from .routes_content import bp_content

    app.register_blueprint(bp)
    app.register_blueprint(bp_admin)
    app.register_blueprint(bp_content)


@bp.get("/health")
def health_check() -> tuple[dict[str, str], int]:
    """
    Expose a simple uptime check endpoint.
    ---
    tags:
      - Health
    responses:
      200:
        description: Service is healthy and running.
    """
    return jsonify({"status": "ok"}), 200


@bp.get("/db-health")
def database_health() -> tuple[dict[str, str], int]:
    """Check connectivity to the configured database."""
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        current_app.logger.exception("Database connectivity check failed", exc_info=exc)
        return jsonify({"database": "unavailable"}), 500

    return jsonify({"database": "ok"}), 200


@bp.get("/services")
def list_services() -> tuple[dict[str, list[dict[str, object]]], int]:
    """Return the active service catalog.
    ---
    tags:
      - Services
    parameters:
      - name: category
        in: query
        type: string
    responses:
      200:
        description: List of active services
      500:
        description: Database error
    """
    try:
        query = Service.query.filter(Service.active.is_(True))

        category = request.args.get("category", "").strip()
        if category:
            query = query.filter(Service.category.ilike(category))

        services = query.order_by(Service.price.asc()).all()
        return jsonify({"services": [service.to_dict() for service in services]}), 200

    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch services", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp.get("/services/<string:service_id>")
def get_service(service_id: str) -> tuple[dict[str, object], int]:
    try:
        service = Service.query.get(service_id)
        if not service:
            return jsonify({"error": "not_found", "message": "Service not found"}), 404
        return jsonify({"service": service.to_dict()}), 200

    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch service", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp.get("/availability/<string:date_str>")
def get_availability(date_str: str) -> tuple[dict[str, object], int]:
    """List the bookable start times for a day.
    ---
    tags:
      - Booking
    parameters:
      - in: path
        name: date_str
        required: true
        type: string
        description: Calendar day, YYYY-MM-DD
    responses:
      200:
        description: Ordered list of HH:MM slots still open
      400:
        description: Invalid date
      500:
        description: Database error
    """
    target_date = parse_date(date_str)
    if target_date is None:
        return (
            jsonify({
                "error": "invalid_payload",
                "message": "date must be in YYYY-MM-DD format"
            }),
            400,
        )

    try:
        existing = appointments_on(target_date, statuses=tuple(BLOCKING_STATUSES))
        slots = available_slots(target_date, existing)
        return jsonify({"date": target_date.isoformat(), "available_slots": slots}), 200

    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to check availability", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp.post("/appointments")
def create_appointment() -> tuple[dict[str, object], int]:
    """Book an appointment from the public booking page.
    ---
    tags:
      - Booking
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            service_id:
              type: string
            client_name:
              type: string
            client_email:
              type: string
            client_phone:
              type: string
            appointment_date:
              type: string
              format: date-time
            notes:
              type: string
          required:
            - service_id
            - client_name
            - client_email
            - client_phone
            - appointment_date
    responses:
      201:
        description: Appointment created with status pending
      400:
        description: Invalid payload or unknown service
      409:
        description: Time slot conflicts with an existing appointment
      500:
        description: Server error
    """
    payload = json_body()

    try:
        service_id = text_value(payload, "service_id")
        client_fields = {field: text_value(payload, field) for field in BOOKING_FIELDS}
        notes = text_value(payload, "notes")
        appointment_date = text_value(payload, "appointment_date")
    except PayloadError as exc:
        return jsonify({"error": "invalid_payload", "message": str(exc)}), 400

    if not service_id or not all(client_fields.values()) or not appointment_date:
        return (
            jsonify({
                "error": "invalid_payload",
                "message": "service_id, client_name, client_email, client_phone, and appointment_date are required"
            }),
            400,
        )

    if "@" not in client_fields["client_email"]:
        return jsonify({"error": "invalid_payload", "message": "client_email must be a valid email address"}), 400

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
        service = Service.query.get(service_id)
        if not service or not service.active:
            return jsonify({"error": "invalid_payload", "message": "Invalid service selected"}), 400

        appointment = book_appointment(
            service,
            starts_at,
            current_app.config["DEPOSIT_RATE"],
            notes=notes,
            **client_fields,
        )
        db.session.commit()

    except SchedulingConflict as exc:
        db.session.rollback()
        current_app.logger.info(
            "Booking at %s rejected, %d conflicting appointment(s)", starts_at.isoformat(), len(exc.conflicts)
        )
        return (
            jsonify({
                "error": "conflict",
                "message": "Time slot conflicts with an existing appointment. Please choose a different time."
            }),
            409,
        )
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to create appointment", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    # Email is best effort: a delivery failure never undoes the booking
    mailer = current_app.extensions["booking_mailer"]
    try:
        mailer.send_booking_confirmation(appointment, service)
    except Exception as exc:
        current_app.logger.exception("Failed to send booking confirmation email", exc_info=exc)

    return jsonify({"message": "Appointment created successfully", "appointment": appointment.to_dict()}), 201


# --- Deposit payments (Stripe) ---


def _deposit_cents(appointment: Appointment) -> int:
    return int(round(float(appointment.deposit_amount or 0) * 100))


@bp.post("/appointments/<string:appointment_id>/deposit-intent")
def create_deposit_intent(appointment_id: str) -> tuple[dict[str, object], int]:
    """Create a Stripe PaymentIntent for an appointment's booking deposit.
    ---
    tags:
      - Payments
    responses:
      200:
        description: Payment intent created
      400:
        description: Deposit already paid or nothing to pay
      404:
        description: Appointment not found
      500:
        description: Payments unavailable or Stripe error
    """
    try:
        appointment = Appointment.query.get(appointment_id)
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to load appointment for deposit", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    if not appointment:
        return jsonify({"error": "not_found", "message": "Appointment not found"}), 404

    if appointment.deposit_paid:
        return jsonify({"error": "invalid_payload", "message": "Deposit has already been paid"}), 400

    amount_cents = _deposit_cents(appointment)
    if amount_cents <= 0:
        return jsonify({"error": "invalid_payload", "message": "Appointment has no deposit to pay"}), 400

    stripe_key = current_app.config.get("STRIPE_SECRET_KEY")
    if not stripe_key:
        current_app.logger.warning("Stripe secret key not configured")
        return jsonify({"error": "server_error", "message": "Payments are not currently available. Please contact us."}), 500

    try:
        intent = stripe.PaymentIntent.create(
            amount=amount_cents,
            currency=current_app.config["STRIPE_CURRENCY"],
            receipt_email=appointment.client_email,
            metadata={"appointment_id": appointment.id, "kind": "deposit"},
            api_key=stripe_key,
        )
    except stripe.StripeError as exc:
        current_app.logger.exception("Stripe API error while creating deposit intent", exc_info=exc)
        return jsonify({"error": "payment_error", "message": "An error occurred while processing the payment."}), 500

    return jsonify({
        "client_secret": intent.client_secret,
        "payment_intent_id": intent.id,
        "amount_cents": amount_cents,
    }), 200


@bp.post("/appointments/<string:appointment_id>/deposit/confirm")
def confirm_deposit(appointment_id: str) -> tuple[dict[str, object], int]:
    """Mark the deposit as paid once Stripe reports the intent succeeded."""
    payload = json_body()
    try:
        payment_intent_id = text_value(payload, "payment_intent_id")
    except PayloadError as exc:
        return jsonify({"error": "invalid_payload", "message": str(exc)}), 400

    if not payment_intent_id:
        return jsonify({"error": "invalid_payload", "message": "payment_intent_id is required"}), 400

    stripe_key = current_app.config.get("STRIPE_SECRET_KEY")
    if not stripe_key:
        return jsonify({"error": "server_error", "message": "Payments are not currently available. Please contact us."}), 500

    try:
        intent = stripe.PaymentIntent.retrieve(payment_intent_id, api_key=stripe_key)
    except stripe.StripeError as exc:
        current_app.logger.exception("Stripe API error while retrieving deposit intent", exc_info=exc)
        return jsonify({"error": "payment_error", "message": "Failed to retrieve payment intent"}), 500

    if intent.status != "succeeded":
        return jsonify({"status": intent.status}), 200

    metadata = intent.metadata or {}
    if metadata.get("appointment_id") != appointment_id:
        return jsonify({"error": "invalid_payload", "message": "Payment intent does not belong to this appointment"}), 400

    try:
        appointment = Appointment.query.get(appointment_id)
        if not appointment:
            return jsonify({"error": "not_found", "message": "Appointment not found"}), 404

        appointment.deposit_paid = True
        if appointment.payment_status == "unpaid":
            appointment.payment_status = "deposit_paid"
        db.session.commit()

    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to record deposit payment", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify({"status": "ok", "appointment": appointment.to_dict()}), 200


# --- Public site content ---


@bp.get("/portfolio")
def list_portfolio() -> tuple[dict[str, object], int]:
    """Portfolio items, newest first, optionally filtered by category or featured flag."""
    try:
        query = PortfolioItem.query

        category = request.args.get("category", "").strip()
        if category:
            query = query.filter(PortfolioItem.category.ilike(category))
        if request.args.get("featured", "false").lower() == "true":
            query = query.filter(PortfolioItem.featured.is_(True))

        items = query.order_by(PortfolioItem.created_at.desc()).all()
        return jsonify({"items": [item.to_dict() for item in items]}), 200

    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch portfolio", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp.get("/testimonials")
def list_testimonials() -> tuple[dict[str, object], int]:
    try:
        testimonials = (
            Testimonial.query.filter(Testimonial.active.is_(True))
            .order_by(Testimonial.featured.desc(), Testimonial.created_at.desc())
            .all()
        )
        return jsonify({"testimonials": [t.to_dict() for t in testimonials]}), 200

    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch testimonials", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp.get("/banners")
def list_banners() -> tuple[dict[str, object], int]:
    """Banners that are active and inside their visibility window right now."""
    try:
        now = datetime.now()
        banners = (
            PromotionalBanner.query.filter(PromotionalBanner.active.is_(True))
            .order_by(PromotionalBanner.priority.desc(), PromotionalBanner.created_at.desc())
            .all()
        )
        return jsonify({"banners": [b.to_dict() for b in banners if b.is_visible(now)]}), 200

    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch banners", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp.post("/contact")
def create_contact_message() -> tuple[dict[str, object], int]:
    """Store a message sent through the contact form.
    ---
    tags:
      - Contact
    responses:
      201:
        description: Message stored
      400:
        description: Missing fields
      500:
        description: Database error
    """
    payload = json_body()
    try:
        fields = {field: text_value(payload, field) for field in CONTACT_FIELDS}
        phone = text_value(payload, "phone")
    except PayloadError as exc:
        return jsonify({"error": "invalid_payload", "message": str(exc)}), 400

    if not all(fields.values()):
        return (
            jsonify({
                "error": "invalid_payload",
                "message": "first_name, last_name, email, subject, and message are required"
            }),
            400,
        )

    try:
        message = ContactMessage(phone=phone, **fields)
        db.session.add(message)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to store contact message", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    current_app.logger.info("New contact message from %s %s", message.first_name, message.last_name)
    return jsonify({"message": "Message sent successfully", "id": message.id}), 201


@bp.get("/contact/faqs")
def list_active_faqs() -> tuple[dict[str, object], int]:
    try:
        faqs = (
            ContactFAQ.query.filter(ContactFAQ.active.is_(True))
            .order_by(ContactFAQ.display_order.asc())
            .all()
        )
        return jsonify({"faqs": [faq.to_dict() for faq in faqs]}), 200
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch contact FAQs", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp.get("/contact/info")
def get_active_contact_info() -> tuple[dict[str, object], int]:
    try:
        info = (
            ContactInfo.query.filter(ContactInfo.active.is_(True))
            .order_by(ContactInfo.created_at.desc())
            .first()
        )
        return jsonify({"info": info.to_dict() if info else None}), 200
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch contact info", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


@bp.get("/contact/social-media")
def list_active_social_links() -> tuple[dict[str, object], int]:
    try:
        links = (
            SocialMediaLink.query.filter(SocialMediaLink.active.is_(True))
            .order_by(SocialMediaLink.display_order.asc())
            .all()
        )
        return jsonify({"links": [link.to_dict() for link in links]}), 200
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch social media links", exc_info=exc)
        return jsonify({"error": "database_error"}), 500
