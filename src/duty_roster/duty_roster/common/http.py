from __future__ import annotations

from datetime import date
from functools import wraps
from typing import Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    FatigueViolationError,
    NotFoundError,
    PeriodGenerationError,
    StaffingError,
    StateConflictError,
    ValidationError,
)
from .datetime_utils import parse_iso_date


def status_for(exc: DomainError) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, AuthorizationError):
        return 403
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, (StateConflictError, StaffingError, FatigueViolationError, PeriodGenerationError)):
        return 409
    return 422


def error_response(exc: DomainError):
    body = {"error": exc.kind, "message": str(exc)}
    body.update(exc.details())
    return jsonify(body), status_for(exc)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"error": "unauthenticated", "message": "Login required"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> str:
    return str(session["user_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role") or Role.MEMBER.value)
    except ValueError:
        return Role.MEMBER


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def date_field(data: dict, name: str) -> date:
    return parse_iso_date(str(data.get(name) or ""))


def optional_str(data: dict, name: str) -> Optional[str]:
    value = data.get(name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None
