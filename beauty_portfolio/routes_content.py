"""Admin routes for site content: portfolio, testimonials, banners, contact page and inbox."""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from .auth import admin_required
from .extensions import db
from .models import (MESSAGE_STATUSES, ContactFAQ, ContactInfo, ContactMessage,
                     PortfolioItem, PromotionalBanner, SocialMediaLink,
                     Testimonial)
from .payloads import json_body
from .periods import parse_datetime

bp_content = Blueprint("content", __name__, url_prefix="/admin")

TEXT, OPTIONAL_TEXT, FLAG, NUMBER, TIMESTAMP, TAGS = "text", "optional_text", "flag", "number", "timestamp", "tags"

# field name -> kind, per content type
PORTFOLIO_FIELDS = {
    "title": TEXT, "description": OPTIONAL_TEXT, "category": TEXT, "image_url": TEXT,
    "before_image_url": OPTIONAL_TEXT, "after_image_url": OPTIONAL_TEXT, "video_url": OPTIONAL_TEXT,
    "tags": TAGS, "featured": FLAG,
}
TESTIMONIAL_FIELDS = {
    "client_name": TEXT, "service": TEXT, "rating": NUMBER, "testimonial": TEXT,
    "avatar_initials": TEXT, "avatar_url": OPTIONAL_TEXT, "featured": FLAG, "active": FLAG,
}
BANNER_FIELDS = {
    "title": TEXT, "description": TEXT, "cta_text": OPTIONAL_TEXT, "cta_link": OPTIONAL_TEXT,
    "priority": NUMBER, "active": FLAG, "start_date": TIMESTAMP, "end_date": TIMESTAMP,
}
FAQ_FIELDS = {"question": TEXT, "answer": TEXT, "display_order": NUMBER, "active": FLAG}
INFO_FIELDS = {
    "title": TEXT, "subtitle": OPTIONAL_TEXT, "description": OPTIONAL_TEXT, "phone": OPTIONAL_TEXT,
    "email": OPTIONAL_TEXT, "address": OPTIONAL_TEXT, "hours": OPTIONAL_TEXT, "active": FLAG,
}
SOCIAL_FIELDS = {"platform": TEXT, "url": TEXT, "icon": OPTIONAL_TEXT, "display_order": NUMBER, "active": FLAG}


class ContentValidationError(ValueError):
    pass


def parse_fields(payload: dict, field_kinds: dict[str, str], partial: bool = False) -> dict[str, object]:
    """Coerce and validate ``payload`` against a mapping of field name to kind.

    Required text fields must be present unless ``partial``; unknown keys are
    ignored. Raises ContentValidationError with a message for the client.
    """
    fields: dict[str, object] = {}
    for name, kind in field_kinds.items():
        if name not in payload:
            if kind == TEXT and not partial:
                raise ContentValidationError(f"{name} is required")
            continue

        value = payload[name]
        if kind in (TEXT, OPTIONAL_TEXT):
            if value is not None and not isinstance(value, str):
                raise ContentValidationError(f"{name} must be a string")
            value = (value or "").strip() or None
            if kind == TEXT and not value:
                raise ContentValidationError(f"{name} must be a non-empty string")
        elif kind == FLAG:
            if not isinstance(value, bool):
                raise ContentValidationError(f"{name} must be a boolean")
        elif kind == NUMBER:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ContentValidationError(f"{name} must be an integer")
        elif kind == TIMESTAMP:
            if value is not None:
                parsed = parse_datetime(value) if isinstance(value, str) else None
                if parsed is None:
                    raise ContentValidationError(f"{name} must be an ISO datetime")
                value = parsed
        elif kind == TAGS:
            if not isinstance(value, list) or not all(isinstance(tag, str) for tag in value):
                raise ContentValidationError(f"{name} must be a list of strings")
            value = [tag.strip() for tag in value if tag.strip()]
        fields[name] = value
    return fields


def _check_testimonial(fields: dict) -> None:
    rating = fields.get("rating")
    if rating is not None and not 1 <= rating <= 5:
        raise ContentValidationError("rating must be between 1 and 5")


def _check_banner(banner: PromotionalBanner) -> None:
    if banner.start_date and banner.end_date and banner.end_date < banner.start_date:
        raise ContentValidationError("end_date must not be before start_date")


def _create(model, field_kinds, label: str, check=None):
    payload = json_body()
    try:
        fields = parse_fields(payload, field_kinds)
        if check:
            check(fields)
        record = model(**fields)
        if model is PromotionalBanner:
            _check_banner(record)
        db.session.add(record)
        db.session.commit()
        return jsonify({label: record.to_dict()}), 201
    except ContentValidationError as exc:
        return jsonify({"error": "invalid_payload", "message": str(exc)}), 400
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to create %s", label, exc_info=exc)
        return jsonify({"error": "database_error"}), 500


def _update(model, record_id: str, field_kinds, label: str, check=None):
    payload = json_body()
    try:
        fields = parse_fields(payload, field_kinds, partial=True)
        if check:
            check(fields)
        record = model.query.get(record_id)
        if not record:
            return jsonify({"error": "not_found", "message": f"{label.replace('_', ' ').capitalize()} not found"}), 404
        for name, value in fields.items():
            setattr(record, name, value)
        if model is PromotionalBanner:
            _check_banner(record)
        db.session.commit()
        return jsonify({label: record.to_dict()}), 200
    except ContentValidationError as exc:
        db.session.rollback()
        return jsonify({"error": "invalid_payload", "message": str(exc)}), 400
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to update %s", label, exc_info=exc)
        return jsonify({"error": "database_error"}), 500


def _delete(model, record_id: str, label: str):
    try:
        record = model.query.get(record_id)
        if not record:
            return jsonify({"error": "not_found", "message": f"{label.replace('_', ' ').capitalize()} not found"}), 404
        db.session.delete(record)
        db.session.commit()
        return jsonify({"message": f"{label.replace('_', ' ').capitalize()} deleted successfully"}), 200
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to delete %s", label, exc_info=exc)
        return jsonify({"error": "database_error"}), 500


def _list(query, key: str):
    try:
        return jsonify({key: [record.to_dict() for record in query.all()]}), 200
    except SQLAlchemyError as exc:
        current_app.logger.exception("Failed to fetch %s", key, exc_info=exc)
        return jsonify({"error": "database_error"}), 500


# --- Portfolio ---


@bp_content.post("/portfolio")
@admin_required
def create_portfolio_item():
    return _create(PortfolioItem, PORTFOLIO_FIELDS, "item")


@bp_content.patch("/portfolio/<string:item_id>")
@admin_required
def update_portfolio_item(item_id: str):
    return _update(PortfolioItem, item_id, PORTFOLIO_FIELDS, "item")


@bp_content.delete("/portfolio/<string:item_id>")
@admin_required
def delete_portfolio_item(item_id: str):
    return _delete(PortfolioItem, item_id, "portfolio_item")


def _bulk_ids(payload: dict):
    ids = payload.get("ids")
    if not isinstance(ids, list):
        return None
    return ids


@bp_content.post("/portfolio/bulk/delete")
@admin_required
def bulk_delete_portfolio_items() -> tuple[dict[str, object], int]:
    """Delete several portfolio items; reports how many ids matched.
    ---
    tags:
      - Portfolio
    responses:
      200:
        description: Counts of deleted and missing items
      400:
        description: ids array missing
    """
    ids = _bulk_ids(json_body())
    if ids is None:
        return jsonify({"error": "invalid_payload", "message": "ids array is required"}), 400

    try:
        items = PortfolioItem.query.filter(PortfolioItem.id.in_(ids)).all() if ids else []
        for item in items:
            db.session.delete(item)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to bulk delete portfolio items", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify({
        "message": f"{len(items)} items deleted successfully",
        "successful": len(items),
        "failed": len(ids) - len(items),
        "total": len(ids),
    }), 200


@bp_content.post("/portfolio/bulk/feature")
@admin_required
def bulk_feature_portfolio_items() -> tuple[dict[str, object], int]:
    payload = json_body()
    ids = _bulk_ids(payload)
    featured = payload.get("featured")
    if ids is None or not isinstance(featured, bool):
        return jsonify({"error": "invalid_payload", "message": "ids array and featured boolean are required"}), 400

    try:
        items = PortfolioItem.query.filter(PortfolioItem.id.in_(ids)).all() if ids else []
        for item in items:
            item.featured = featured
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to bulk update portfolio items", exc_info=exc)
        return jsonify({"error": "database_error"}), 500

    return jsonify({
        "message": f"{len(items)} items {'featured' if featured else 'unfeatured'} successfully",
        "successful": len(items),
        "failed": len(ids) - len(items),
        "total": len(ids),
    }), 200


# --- Contact inbox ---


@bp_content.get("/contact-messages")
@admin_required
def list_contact_messages():
    query = ContactMessage.query
    status = request.args.get("status", "").strip()
    if status:
        if status not in MESSAGE_STATUSES:
            return jsonify({"error": "invalid_payload", "message": f"Unknown status '{status}'"}), 400
        query = query.filter(ContactMessage.status == status)
    return _list(query.order_by(ContactMessage.created_at.desc()), "messages")


@bp_content.patch("/contact-messages/<string:message_id>")
@admin_required
def update_contact_message(message_id: str):
    payload = json_body()
    status = payload.get("status")
    if status not in MESSAGE_STATUSES:
        return (
            jsonify({
                "error": "invalid_payload",
                "message": f"status must be one of: {', '.join(MESSAGE_STATUSES)}"
            }),
            400,
        )

    try:
        message = ContactMessage.query.get(message_id)
        if not message:
            return jsonify({"error": "not_found", "message": "Message not found"}), 404
        message.status = status
        db.session.commit()
        return jsonify({"message": message.to_dict()}), 200
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to update message status", exc_info=exc)
        return jsonify({"error": "database_error"}), 500


# --- Testimonials ---


@bp_content.get("/testimonials")
@admin_required
def list_all_testimonials():
    return _list(Testimonial.query.order_by(Testimonial.created_at.desc()), "testimonials")


@bp_content.post("/testimonials")
@admin_required
def create_testimonial():
    return _create(Testimonial, TESTIMONIAL_FIELDS, "testimonial", check=_check_testimonial)


@bp_content.patch("/testimonials/<string:testimonial_id>")
@admin_required
def update_testimonial(testimonial_id: str):
    return _update(Testimonial, testimonial_id, TESTIMONIAL_FIELDS, "testimonial", check=_check_testimonial)


@bp_content.delete("/testimonials/<string:testimonial_id>")
@admin_required
def delete_testimonial(testimonial_id: str):
    return _delete(Testimonial, testimonial_id, "testimonial")


# --- Promotional banners ---


@bp_content.get("/banners")
@admin_required
def list_all_banners():
    return _list(PromotionalBanner.query.order_by(PromotionalBanner.priority.desc()), "banners")


@bp_content.post("/banners")
@admin_required
def create_banner():
    return _create(PromotionalBanner, BANNER_FIELDS, "banner")


@bp_content.patch("/banners/<string:banner_id>")
@admin_required
def update_banner(banner_id: str):
    return _update(PromotionalBanner, banner_id, BANNER_FIELDS, "banner")


@bp_content.delete("/banners/<string:banner_id>")
@admin_required
def delete_banner(banner_id: str):
    return _delete(PromotionalBanner, banner_id, "banner")


# --- Contact page content ---


@bp_content.get("/contact/faqs")
@admin_required
def list_all_faqs():
    return _list(ContactFAQ.query.order_by(ContactFAQ.display_order.asc()), "faqs")


@bp_content.post("/contact/faqs")
@admin_required
def create_faq():
    return _create(ContactFAQ, FAQ_FIELDS, "faq")


@bp_content.put("/contact/faqs/<string:faq_id>")
@admin_required
def update_faq(faq_id: str):
    return _update(ContactFAQ, faq_id, FAQ_FIELDS, "faq")


@bp_content.delete("/contact/faqs/<string:faq_id>")
@admin_required
def delete_faq(faq_id: str):
    return _delete(ContactFAQ, faq_id, "faq")


@bp_content.get("/contact/info")
@admin_required
def list_contact_info():
    return _list(ContactInfo.query.order_by(ContactInfo.created_at.desc()), "info")


@bp_content.post("/contact/info")
@admin_required
def create_contact_info():
    return _create(ContactInfo, INFO_FIELDS, "info")


@bp_content.put("/contact/info/<string:info_id>")
@admin_required
def update_contact_info(info_id: str):
    return _update(ContactInfo, info_id, INFO_FIELDS, "info")


@bp_content.delete("/contact/info/<string:info_id>")
@admin_required
def delete_contact_info(info_id: str):
    return _delete(ContactInfo, info_id, "contact_info")


@bp_content.get("/contact/social-media")
@admin_required
def list_all_social_links():
    return _list(SocialMediaLink.query.order_by(SocialMediaLink.display_order.asc()), "links")


@bp_content.post("/contact/social-media")
@admin_required
def create_social_link():
    return _create(SocialMediaLink, SOCIAL_FIELDS, "link")


@bp_content.put("/contact/social-media/<string:link_id>")
@admin_required
def update_social_link(link_id: str):
    return _update(SocialMediaLink, link_id, SOCIAL_FIELDS, "link")


@bp_content.delete("/contact/social-media/<string:link_id>")
@admin_required
def delete_social_link(link_id: str):
    return _delete(SocialMediaLink, link_id, "social_media_link")
