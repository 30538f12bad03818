"""Back-office application factory."""

from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request
from flask_wtf.csrf import CSRFError
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from werkzeug.exceptions import HTTPException

from config import Config, load_config
from core import get_logger
from core.exceptions import (
    ApplicationError,
    AuthenticationError,
    NotFoundError,
    RequestStateError,
    ValidationError,
)
from database.migrations import apply_migrations
from web.auth import AdminCredentials, init_login_manager
from web.config_middleware import (
    configure_app,
    setup_extensions,
    setup_request_timing,
    setup_security_headers,
)
from web.routes import register_routes

logger = get_logger(__name__)

# First match wins, so subclasses go before their bases
ERROR_STATUS = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (NotFoundError, 404),
    (RequestStateError, 409),
)


def create_app(config: Optional[Config] = None, testing: bool = False) -> Flask:
    """Build the back-office API.

    The sqlite schema is created on the way, so a fresh ``DATABASE_PATH``
    is usable immediately.

    Args:
        config: Settings, read from the environment when omitted
        testing: Disable CSRF checks and caching

    Raises:
        ConfigurationError: If the settings cannot be applied
    """
    config = config or load_config()
    app = Flask(__name__)

    configure_app(app, config, testing)
    setup_extensions(app, testing)
    setup_security_headers(app)
    setup_request_timing(app)
    init_login_manager(
        app,
        AdminCredentials(username=config.admin_username, password_hash=config.admin_password),
    )

    apply_migrations(config.database_path)

    register_routes(app)
    app.add_url_rule("/metrics", "metrics", prometheus_metrics)
    register_error_handlers(app)
    return app


def prometheus_metrics():
    return generate_latest(), 200, {"Content-Type": CONTENT_TYPE_LATEST}


def error_status(error: ApplicationError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


def _message(text: str, status: int):
    return jsonify({"message": text}), status


def register_error_handlers(app: Flask) -> None:
    """Every failure leaves the API as ``{"message": ...}``."""

    @app.errorhandler(ApplicationError)
    def application_error(error: ApplicationError):
        status = error_status(error)
        if status == 500:
            logger.error("%s on %s %s: %s", type(error).__name__, request.method, request.path, error)
            return _message("Internal server error", 500)
        return _message(str(error), status)

    @app.errorhandler(CSRFError)
    def csrf_error(error: CSRFError):
        return _message(error.description, 400)

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        return _message(error.description, error.code)

    @app.errorhandler(Exception)
    def unexpected_error(error: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return _message("Internal server error", 500)
