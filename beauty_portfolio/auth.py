"""Bearer tokens for the admin back office."""
from __future__ import annotations

from functools import wraps

from flask import current_app, g, jsonify, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .models import AdminUser

TOKEN_SALT = "admin-auth-token"


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)


def build_token(admin: AdminUser) -> str:
    return _serializer().dumps({"admin_id": admin.id})


def get_admin_identity() -> str | None:
    """Extract the admin id from the Authorization header.

    Returns None when the header is missing, malformed, tampered with or expired.
    """
    auth_header = request.headers.get("Authorization", "")

    if not auth_header.startswith("Bearer "):
        return None

    token = auth_header[7:]  # Remove "Bearer " prefix

    try:
        payload = _serializer().loads(token, max_age=current_app.config["TOKEN_MAX_AGE"])
    except (BadSignature, SignatureExpired):
        return None
    return payload.get("admin_id")


def admin_required(view):
    """Reject the request with 401 unless it carries a valid admin token."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        admin_id = get_admin_identity()
        admin = AdminUser.query.get(admin_id) if admin_id else None
        if admin is None:
            return jsonify({"error": "unauthorized", "message": "Authentication required"}), 401
        g.admin = admin
        return view(*args, **kwargs)

    return wrapper
