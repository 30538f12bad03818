"""Health check blueprint."""

from __future__ import annotations

from flask import Blueprint, jsonify

from utils.performance import PerformanceMonitor
from utils.timeutils import to_iso, utcnow
from web.routes.common import get_admin_db


health_bp = Blueprint("health", __name__)
monitor = PerformanceMonitor()


@health_bp.route("/health")
def health_check():
    database_ok = get_admin_db().ping()
    data = {
        "status": "ok" if database_ok else "degraded",
        "database": "ok" if database_ok else "unavailable",
        "host": monitor.gather_host_metrics(),
        "serverTime": to_iso(utcnow()),
    }
    return jsonify(data), 200 if database_ok else 503
