"""Flask settings, shared extensions and per-request hooks."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Dict

from flask import Flask, g, request
from flask_caching import Cache
from flask_wtf.csrf import CSRFProtect
from prometheus_client import Counter, Histogram

from utils.timeutils import resolve_timezone

if TYPE_CHECKING:
    from config import Config

logger = logging.getLogger(__name__)

cache = Cache()
csrf = CSRFProtect()

SLOW_REQUEST_SECONDS = 1.0
MULTIPART_OVERHEAD = 64 * 1024

RESPONSE_TIME = Histogram(
    "backoffice_http_response_seconds",
    "Time spent handling back-office HTTP requests",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5),
)
SERVER_ERRORS = Counter(
    "backoffice_http_server_errors_total",
    "Back-office responses with a 5xx status",
    ["method", "endpoint"],
)

SECURITY_HEADERS = {
    "Content-Security-Policy": "default-src 'self'; img-src 'self' data: blob:",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "same-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}


def flask_settings(config: Config, testing: bool = False) -> Dict[str, Any]:
    """Translate the back-office ``Config`` into ``app.config`` keys."""
    return {
        "SECRET_KEY": config.secret_key,
        "TESTING": testing,
        # Multipart framing comes on top of the document itself
        "MAX_CONTENT_LENGTH": config.max_upload_size + MULTIPART_OVERHEAD,
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": config.is_production and not testing,
        "WTF_CSRF_ENABLED": not testing,
        "WTF_CSRF_CHECK_DEFAULT": False,
        "WTF_CSRF_TIME_LIMIT": None,
        "DATABASE_PATH": config.database_path,
        "UPLOAD_FOLDER": config.upload_folder,
        "MAX_UPLOAD_SIZE": config.max_upload_size,
        "SESSION_COUNT": config.session_count,
        "SESSION_TIMEZONE": resolve_timezone(config.session_timezone),
        "USERS_PAGE_LIMIT": config.users_page_limit,
        "ORDERS_PAGE_SIZE": config.orders_page_size,
        "REQUESTS_PAGE_SIZE": config.requests_page_size,
        "STATS_CACHE_TTL": config.stats_cache_ttl,
    }


def configure_app(app: Flask, config: Config, testing: bool = False) -> None:
    """Load settings into ``app.config``.

    Raises:
        ConfigurationError: If the session timezone is unknown
    """
    app.config.update(flask_settings(config, testing))
    # Keep the insertion order of response dicts
    app.json.sort_keys = False

    if config.is_production:
        for name in config.insecure_settings():
            logger.warning("%s still has its development default in production", name)


def setup_extensions(app: Flask, testing: bool = False) -> None:
    cache.init_app(app, config={"CACHE_TYPE": "NullCache" if testing else "SimpleCache"})
    # Checked per blueprint; see web.routes.admin
    if not testing:
        csrf.init_app(app)


def setup_security_headers(app: Flask) -> None:
    @app.after_request
    def add_security_headers(response):
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


def setup_request_timing(app: Flask) -> None:
    """Time every request for Prometheus and flag the slow ones.

    The handling time is also returned in the ``X-Response-Time`` header.
    """
    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def record_timing(response):
        started = g.pop("request_started", None)
        endpoint = request.endpoint or "unmatched"
        if started is not None:
            elapsed = time.perf_counter() - started
            RESPONSE_TIME.labels(method=request.method, endpoint=endpoint).observe(elapsed)
            response.headers["X-Response-Time"] = f"{elapsed:.3f}s"
            if elapsed > SLOW_REQUEST_SECONDS:
                logger.warning("Slow request: %s %s took %.2fs", request.method, request.path, elapsed)

        if response.status_code >= 500:
            SERVER_ERRORS.labels(method=request.method, endpoint=endpoint).inc()
        return response
