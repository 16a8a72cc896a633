"""Helpers for reading JSON request bodies."""
from __future__ import annotations

from flask import request


class PayloadError(ValueError):
    """A request body field has the wrong type; the message is safe to return to the client."""


def json_body() -> dict:
    """The request's JSON object, or an empty dict when the body is missing or not an object."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def text_value(payload: dict, name: str) -> str | None:
    """Stripped string value of ``name``; None when absent, null or blank.

    Raises PayloadError when the field holds anything other than a string.
    """
    value = payload.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise PayloadError(f"{name} must be a string")
    return value.strip() or None


def flag_value(payload: dict, name: str) -> bool:
    value = payload.get(name)
    if not isinstance(value, bool):
        raise PayloadError(f"{name} must be a boolean")
    return value
