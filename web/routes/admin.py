"""Admin JSON API consumed by the back-office dashboard."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf

from core import get_logger
from core.constants import PaginationDefaults, SessionDefaults, SessionStatus
from core.exceptions import AuthenticationError, InvalidTimestampError, NotFoundError, ValidationError
from database.queries import OrderQuery, RequestQuery, UserQuery, UserUpdate
from services.audit_service import AuditService
from services.moderation import ModerationService
from services.sessions import build_trading_sessions, classify, current_window, window_from_bounds
from utils.timeutils import parse_optional_instant, start_of_today, to_iso, utcnow
from web.auth import AdminCredentials, AdminUser, validate_credentials
from web.config_middleware import cache, csrf
from web.routes.common import (
    actor_context,
    get_admin_db,
    json_body,
    optional_flag,
    optional_text,
    pagination_args,
)

logger = get_logger(__name__)

admin_bp = Blueprint("admin", __name__, url_prefix="/admin/api")

STATS_CACHE_KEY = "admin_stats"


@admin_bp.before_request
def check_csrf():
    """State-changing calls must carry the token from ``/csrf-token``."""
    if current_app.config.get("WTF_CSRF_ENABLED", True) and not current_app.testing:
        csrf.protect()


# ------------------------------------------------------------------ session

@admin_bp.route("/csrf-token")
def csrf_token():
    return jsonify({"csrfToken": generate_csrf()})


@admin_bp.route("/login", methods=["POST"])
def login():
    body = json_body()
    username = optional_text(body, "username") or ""
    password = body.get("password")
    if not isinstance(password, str):
        password = ""
    credentials: AdminCredentials = current_app.config["ADMIN_CREDENTIALS"]

    if not validate_credentials(credentials, username, password):
        raise AuthenticationError("Invalid admin credentials")

    login_user(AdminUser(username=credentials.username))
    logger.info("Admin '%s' logged in from %s", credentials.username, request.remote_addr)
    return jsonify({"message": "Logged in", "user": {"username": credentials.username}})


@admin_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    username = current_user.username
    logout_user()
    logger.info("Admin '%s' logged out", username)
    return jsonify({"message": "Logged out"})


@admin_bp.route("/me")
@login_required
def me():
    return jsonify({"username": current_user.username})


# ------------------------------------------------------------------ users

@admin_bp.route("/users")
@login_required
def list_users():
    query = UserQuery(
        search=request.args.get("search", "").strip(),
        status=request.args.get("status", "all"),
        limit=request.args.get("limit", current_app.config["USERS_PAGE_LIMIT"], type=int),
    )
    users = get_admin_db().list_users(query)
    return jsonify({"users": [user.to_dict() for user in users]})


@admin_bp.route("/users/<user_id>", methods=["PUT"])
@login_required
def update_user(user_id: str):
    body = json_body()
    status = body.get("status") or {}
    if not isinstance(status, dict):
        raise ValidationError("'status' must be an object")

    changes = UserUpdate(
        full_name=optional_text(body, "fullName"),
        email=optional_text(body, "email"),
        phone=optional_text(body, "phone"),
        active=optional_flag(status, "active"),
        bet_locked=optional_flag(status, "betLocked"),
        withdraw_locked=optional_flag(status, "withdrawLocked"),
    )
    if changes.is_empty():
        raise ValidationError("Nothing to update")

    db = get_admin_db()
    before = db.get_user(user_id)
    if before is None:
        raise NotFoundError("User not found")
    user = db.update_user(user_id, changes)
    if user is None:
        raise NotFoundError("User not found")

    AuditService(db).log_action(
        actor_context(),
        action_type="UPDATE_USER",
        entity_type="user",
        entity_id=user_id,
        old_value={"status": before.to_dict()["status"]},
        new_value={column: value for column, value in changes.assignments()},
    )
    logger.info("User %s updated by %s: %s", user_id, current_user.username, changes.assignments())
    return jsonify({"message": "User updated", "user": user.to_dict()})


@admin_bp.route("/users/<user_id>", methods=["DELETE"])
@login_required
def delete_user(user_id: str):
    db = get_admin_db()
    user = db.delete_user(user_id)
    if user is None:
        raise NotFoundError("User not found")

    AuditService(db).log_action(
        actor_context(),
        action_type="DELETE_USER",
        entity_type="user",
        entity_id=user_id,
        old_value={"username": user.username},
    )
    logger.warning("User %s (%s) deleted by %s", user_id, user.username, current_user.username)
    return jsonify({"message": "User deleted", "user": user.to_dict()})


@admin_bp.route("/recent-users")
@login_required
def recent_users():
    users = get_admin_db().recent_users(limit=PaginationDefaults.RECENT_LIMIT)
    return jsonify({"users": [user.to_dict() for user in users]})


# ------------------------------------------------------------------ orders

@admin_bp.route("/orders")
@login_required
def list_orders():
    page = pagination_args(current_app.config["ORDERS_PAGE_SIZE"])
    query = OrderQuery(
        username=request.args.get("username", "").strip(),
        start_date=parse_optional_instant(request.args.get("startDate")),
        end_date=parse_optional_instant(request.args.get("endDate")),
        pagination=page,
    )
    orders, total = get_admin_db().list_orders(query)
    return jsonify({
        "orders": [order.to_dict() for order in orders],
        "total": total,
        "page": page.page,
        "totalPages": page.total_pages(total),
    })


# ------------------------------------------------------------------ deposits / withdrawals

def _request_query() -> RequestQuery:
    return RequestQuery(
        status=request.args.get("status") or None,
        search=request.args.get("search", "").strip(),
        pagination=pagination_args(current_app.config["REQUESTS_PAGE_SIZE"]),
    )


@admin_bp.route("/deposits")
@login_required
def list_deposits():
    query = _request_query()
    deposits, total = get_admin_db().list_deposits(query)
    page = query.pagination
    return jsonify({
        "deposits": [deposit.to_dict() for deposit in deposits],
        "total": total,
        "page": page.page,
        "limit": page.per_page,
        "totalPages": page.total_pages(total),
    })


@admin_bp.route("/deposits/<deposit_id>", methods=["PATCH"])
@login_required
def decide_deposit(deposit_id: str):
    body = json_body()
    service = ModerationService(get_admin_db())
    deposit = service.decide_deposit(
        deposit_id,
        body.get("status"),
        actor_context(),
        notes=optional_text(body, "notes") or optional_text(body, "note"),
    )
    cache.delete(STATS_CACHE_KEY)
    verb = "approved" if deposit.status == "approved" else "rejected"
    return jsonify({"message": f"Deposit request {verb}", "deposit": deposit.to_dict()})


@admin_bp.route("/withdrawals")
@login_required
def list_withdrawals():
    query = _request_query()
    withdrawals, total = get_admin_db().list_withdrawals(query)
    page = query.pagination
    return jsonify({
        "withdrawals": [withdrawal.to_dict() for withdrawal in withdrawals],
        "total": total,
        "currentPage": page.page,
        "limit": page.per_page,
        "totalPages": page.total_pages(total),
    })


@admin_bp.route("/withdrawals/<withdrawal_id>", methods=["PATCH"])
@login_required
def decide_withdrawal(withdrawal_id: str):
    body = json_body()
    service = ModerationService(get_admin_db())
    withdrawal = service.decide_withdrawal(
        withdrawal_id,
        body.get("status"),
        actor_context(),
        note=optional_text(body, "note") or optional_text(body, "notes"),
    )
    cache.delete(STATS_CACHE_KEY)
    verb = "approved" if withdrawal.status == "approved" else "rejected"
    return jsonify({"message": f"Withdrawal request {verb}", "withdrawal": withdrawal.to_dict()})


# ------------------------------------------------------------------ trading sessions

@admin_bp.route("/recent-sessions")
@login_required
def recent_sessions():
    """Stored sessions, newest first, classified against the current instant."""
    active_only = request.args.get("active_only", "0").lower() in {"1", "true", "yes"}
    tz = current_app.config["SESSION_TIMEZONE"]
    now = utcnow()
    sessions = []
    for stored in get_admin_db().recent_sessions(limit=PaginationDefaults.RECENT_LIMIT):
        item = {
            "_id": stored.id,
            "sessionId": stored.session_id,
            "startTime": stored.start_time,
            "endTime": stored.end_time,
            "status": stored.status,
            "result": stored.result,
            "progress": None,
        }
        try:
            window = window_from_bounds(stored.session_id or stored.id, stored.start_time, stored.end_time, tz)
        except InvalidTimestampError as exc:
            logger.warning("Stored session %s has unusable bounds: %s", stored.id, exc)
        else:
            state = classify(window, now)
            item.update(
                startTime=to_iso(window.start_time),
                endTime=to_iso(window.end_time),
                status=state.status.value,
                progress=state.progress,
            )
        if active_only and item["status"] == SessionStatus.COMPLETED.value:
            continue
        sessions.append(item)
    return jsonify({"sessions": sessions, "serverTime": to_iso(now)})


@admin_bp.route("/trading-sessions")
@login_required
def trading_sessions():
    """Upcoming windows from the next minute on, with a placeholder outcome."""
    tz = current_app.config["SESSION_TIMEZONE"]
    now = utcnow()
    page = pagination_args(SessionDefaults.PER_PAGE)
    sessions = build_trading_sessions(now, current_app.config["SESSION_COUNT"], tz)

    current = current_window(now, tz)
    current_state = classify(current, now)
    return jsonify({
        "currentSession": {
            **current.to_dict(),
            "status": current_state.status.value,
            "progress": current_state.progress,
        },
        "sessions": [session.to_dict() for session in page.slice(sessions)],
        "total": len(sessions),
        "page": page.page,
        "totalPages": page.total_pages(len(sessions)),
        "serverTime": to_iso(now),
    })


# ------------------------------------------------------------------ dashboard / settings / audit

@admin_bp.route("/stats")
@login_required
def stats():
    data = cache.get(STATS_CACHE_KEY)
    if data is None:
        tz = current_app.config["SESSION_TIMEZONE"]
        data = get_admin_db().get_statistics(since=start_of_today(tz))
        cache.set(STATS_CACHE_KEY, data, timeout=current_app.config["STATS_CACHE_TTL"])
    return jsonify(data)


@admin_bp.route("/settings")
@login_required
def get_settings():
    return jsonify({"settings": get_admin_db().get_settings()})


@admin_bp.route("/settings", methods=["PUT"])
@login_required
def update_settings():
    body = json_body()
    db = get_admin_db()
    before = db.get_settings()
    settings = db.update_settings(body)

    AuditService(db).log_action(
        actor_context(),
        action_type="UPDATE_SETTINGS",
        entity_type="settings",
        old_value={key: before.get(key) for key in body},
        new_value=body,
    )
    logger.info("Settings updated by %s: %s", current_user.username, sorted(body))
    return jsonify({"message": "Settings saved", "settings": settings})


@admin_bp.route("/audit-log")
@login_required
def audit_log():
    page = pagination_args(PaginationDefaults.AUDIT_LIMIT)
    entries = AuditService(get_admin_db()).get_audit_logs(
        limit=page.per_page,
        offset=page.offset,
        admin_username=request.args.get("admin") or None,
        action_type=request.args.get("action") or None,
        entity_type=request.args.get("entity") or None,
    )
    return jsonify({"entries": [entry.to_dict() for entry in entries], "page": page.page})
