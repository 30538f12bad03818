"""Public view of the current and upcoming trading sessions."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from services.sessions import current_window, is_active, next_windows
from utils.timeutils import to_iso, utcnow

sessions_bp = Blueprint("sessions", __name__, url_prefix="/api")


@sessions_bp.route("/sessions")
def sessions():
    tz = current_app.config["SESSION_TIMEZONE"]
    now = utcnow()
    current = current_window(now, tz)
    upcoming = next_windows(now, current_app.config["SESSION_COUNT"], tz)
    return jsonify({
        "currentSession": {
            **current.to_dict(),
            "status": "active" if is_active(current, now) else "inactive",
        },
        "nextSessions": [{**window.to_dict(), "status": "scheduled"} for window in upcoming],
        "serverTime": to_iso(now),
    })
