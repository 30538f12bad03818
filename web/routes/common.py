"""Request helpers shared by the blueprints."""

from __future__ import annotations

from typing import Any, Dict, Optional

from flask import current_app, request
from flask_login import current_user

from core.exceptions import ValidationError
from database.admin_queries import AdminDatabase
from services.audit_service import ActorContext
from utils.pagination import Pagination


def get_admin_db() -> AdminDatabase:
    return AdminDatabase(db_path=current_app.config["DATABASE_PATH"])


def actor_context() -> ActorContext:
    return ActorContext(
        admin_username=current_user.username,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )


def json_body() -> Dict[str, Any]:
    """The request body as a JSON object."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def optional_text(body: Dict[str, Any], key: str) -> Optional[str]:
    value = body.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"'{key}' must be a string")
    return value.strip()


def optional_flag(body: Dict[str, Any], key: str) -> Optional[bool]:
    value = body.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValidationError(f"'{key}' must be true or false")
    return value


def pagination_args(default_per_page: int) -> Pagination:
    """``page`` and ``limit`` (or ``per_page``) query arguments."""
    page = request.args.get("page", 1, type=int)
    per_page = request.args.get("limit", type=int) or request.args.get("per_page", default_per_page, type=int)
    return Pagination(page=page, per_page=per_page)
