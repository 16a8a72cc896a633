"""Database models for the Beauty Portfolio backend."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from .extensions import db

APPOINTMENT_STATUSES = ("pending", "confirmed", "completed", "cancelled", "no-show")
PAYMENT_STATUSES = ("unpaid", "deposit_paid", "paid")
MESSAGE_STATUSES = ("unread", "read", "replied")


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _money(value: Decimal | None) -> str | None:
    if value is None:
        return None
    return f"{Decimal(value):.2f}"


class Service(db.Model):
    """Bookable offerings in the salon catalog."""

    __tablename__ = "services"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    duration = db.Column(db.Integer, nullable=False)  # minutes
    price = db.Column(db.Numeric(10, 2), nullable=False)
    category = db.Column(db.String(100), nullable=False, default="")
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    appointments = db.relationship("Appointment", back_populates="service", lazy="dynamic")

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "duration": self.duration,
            "price": _money(self.price),
            "category": self.category,
            "active": self.active,
            "created_at": _iso(self.created_at),
        }


class Appointment(db.Model):
    """Client bookings against a service."""

    __tablename__ = "appointments"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    service_id = db.Column(db.String(36), db.ForeignKey("services.id"), nullable=False, index=True)
    client_name = db.Column(db.String(150), nullable=False)
    client_email = db.Column(db.String(255), nullable=False)
    client_phone = db.Column(db.String(30), nullable=False)
    # Salon-local wall clock time, stored naive
    appointment_date = db.Column(db.DateTime, nullable=False, index=True)
    notes = db.Column(db.Text)
    status = db.Column(
        db.Enum(
            *APPOINTMENT_STATUSES,
            name="appointment_status",
            native_enum=False,
            validate_strings=True,
        ),
        nullable=False,
        default="pending",
        server_default="pending",
    )
    deposit_amount = db.Column(db.Numeric(10, 2))
    deposit_paid = db.Column(db.Boolean, nullable=False, default=False)
    payment_status = db.Column(
        db.Enum(
            *PAYMENT_STATUSES,
            name="payment_status",
            native_enum=False,
            validate_strings=True,
        ),
        nullable=False,
        default="unpaid",
        server_default="unpaid",
    )
    cancellation_reason = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    service = db.relationship("Service", back_populates="appointments")

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "service_id": self.service_id,
            "service": {
                "id": self.service.id,
                "name": self.service.name,
                "price": _money(self.service.price),
                "duration": self.service.duration,
            } if self.service else None,
            "client_name": self.client_name,
            "client_email": self.client_email,
            "client_phone": self.client_phone,
            "appointment_date": _iso(self.appointment_date),
            "notes": self.notes,
            "status": self.status,
            "deposit_amount": _money(self.deposit_amount),
            "deposit_paid": self.deposit_paid,
            "payment_status": self.payment_status,
            "cancellation_reason": self.cancellation_reason,
            "created_at": _iso(self.created_at),
        }


class PortfolioItem(db.Model):
    """Showcase work displayed in the public gallery."""

    __tablename__ = "portfolio_items"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    category = db.Column(db.String(100), nullable=False)
    image_url = db.Column(db.String(500), nullable=False)
    before_image_url = db.Column(db.String(500))
    after_image_url = db.Column(db.String(500))
    video_url = db.Column(db.String(500))
    tags = db.Column(db.JSON, nullable=False, default=list)
    featured = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    @property
    def display_mode(self) -> str:
        if self.video_url:
            return "video"
        if self.before_image_url and self.after_image_url:
            return "before_after"
        return "image"

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "image_url": self.image_url,
            "before_image_url": self.before_image_url,
            "after_image_url": self.after_image_url,
            "video_url": self.video_url,
            "tags": list(self.tags or []),
            "featured": self.featured,
            "display_mode": self.display_mode,
            "created_at": _iso(self.created_at),
        }


class ContactMessage(db.Model):
    __tablename__ = "contact_messages"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(30))
    subject = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    status = db.Column(
        db.Enum(
            *MESSAGE_STATUSES,
            name="message_status",
            native_enum=False,
            validate_strings=True,
        ),
        nullable=False,
        default="unread",
        server_default="unread",
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "subject": self.subject,
            "message": self.message,
            "status": self.status,
            "created_at": _iso(self.created_at),
        }


class Testimonial(db.Model):
    """Client reviews curated by the admin."""

    __tablename__ = "testimonials"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    client_name = db.Column(db.String(150), nullable=False)
    service = db.Column(db.String(150), nullable=False)
    rating = db.Column(db.Integer, nullable=False, default=5)
    testimonial = db.Column(db.Text, nullable=False)
    avatar_initials = db.Column(db.String(5), nullable=False)
    avatar_url = db.Column(db.String(500))
    featured = db.Column(db.Boolean, nullable=False, default=False)
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "client_name": self.client_name,
            "service": self.service,
            "rating": self.rating,
            "testimonial": self.testimonial,
            "avatar_initials": self.avatar_initials,
            "avatar_url": self.avatar_url,
            "featured": self.featured,
            "active": self.active,
            "created_at": _iso(self.created_at),
        }


class AdminUser(db.Model):
    __tablename__ = "admin_users"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    username = db.Column(db.String(100), unique=True, nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
        }


class PromotionalBanner(db.Model):
    """Site-wide promotions, optionally bounded to a date window."""

    __tablename__ = "promotional_banners"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    cta_text = db.Column(db.String(100))
    cta_link = db.Column(db.String(500))
    priority = db.Column(db.Integer, nullable=False, default=0)
    active = db.Column(db.Boolean, nullable=False, default=True)
    start_date = db.Column(db.DateTime)
    end_date = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    def is_visible(self, moment: datetime) -> bool:
        if not self.active:
            return False
        if self.start_date and moment < self.start_date:
            return False
        if self.end_date and moment > self.end_date:
            return False
        return True

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "cta_text": self.cta_text,
            "cta_link": self.cta_link,
            "priority": self.priority,
            "active": self.active,
            "start_date": _iso(self.start_date),
            "end_date": _iso(self.end_date),
            "created_at": _iso(self.created_at),
        }


class ContactFAQ(db.Model):
    __tablename__ = "contact_faqs"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    question = db.Column(db.Text, nullable=False)
    answer = db.Column(db.Text, nullable=False)
    display_order = db.Column(db.Integer, nullable=False, default=0)
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "question": self.question,
            "answer": self.answer,
            "display_order": self.display_order,
            "active": self.active,
            "created_at": _iso(self.created_at),
        }


class ContactInfo(db.Model):
    __tablename__ = "contact_info"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    title = db.Column(db.String(200), nullable=False)
    subtitle = db.Column(db.String(200))
    description = db.Column(db.Text)
    phone = db.Column(db.String(30))
    email = db.Column(db.String(255))
    address = db.Column(db.String(300))
    hours = db.Column(db.String(200))
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "subtitle": self.subtitle,
            "description": self.description,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "hours": self.hours,
            "active": self.active,
            "created_at": _iso(self.created_at),
        }


class SocialMediaLink(db.Model):
    """Social accounts shown on the contact page."""

    __tablename__ = "social_media_links"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    platform = db.Column(db.String(50), nullable=False)  # instagram, facebook, tiktok, etc.
    url = db.Column(db.String(500), nullable=False)
    icon = db.Column(db.String(50))
    display_order = db.Column(db.Integer, nullable=False, default=0)
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "platform": self.platform,
            "url": self.url,
            "icon": self.icon,
            "display_order": self.display_order,
            "active": self.active,
            "created_at": _iso(self.created_at),
        }
