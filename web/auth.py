"""Admin sign-in.

There is exactly one back-office account, configured through
``ADMIN_USERNAME``/``ADMIN_PASSWORD``. Flask-Login keeps the signed-in
identity in the session cookie; API callers without it get a JSON 401.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from flask import Flask, current_app, jsonify
from flask_login import LoginManager, UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

logger = logging.getLogger(__name__)

# Prefixes of werkzeug hash strings; anything else is a plain-text secret
WERKZEUG_METHODS = ("pbkdf2:", "scrypt:")

login_manager = LoginManager()


@dataclass(frozen=True)
class AdminCredentials:
    username: str
    password_hash: str

    @property
    def is_hashed(self) -> bool:
        return self.password_hash.startswith(WERKZEUG_METHODS)

    def hashed(self) -> "AdminCredentials":
        """Same account with the secret run through werkzeug's hasher."""
        if self.is_hashed:
            return self
        return AdminCredentials(self.username, generate_password_hash(self.password_hash))

    def same_account(self, username: str) -> bool:
        return username.casefold() == self.username.casefold()


class AdminUser(UserMixin):
    def __init__(self, username: str) -> None:
        self.id = username
        self.username = username


def configured_credentials() -> AdminCredentials:
    return current_app.config["ADMIN_CREDENTIALS"]


def init_login_manager(app: Flask, credentials: AdminCredentials) -> AdminCredentials:
    """Attach Flask-Login to ``app`` and store the (hashed) admin credentials.

    Returns:
        The credentials as stored on the app
    """
    login_manager.init_app(app)
    login_manager.user_loader(_load_admin)
    login_manager.unauthorized_handler(_not_logged_in)

    stored = credentials.hashed()
    if stored is not credentials:
        logger.info("Hashed the configured password of admin '%s'", stored.username)
    app.config["ADMIN_CREDENTIALS"] = stored
    return stored


def _load_admin(user_id: str) -> Optional[AdminUser]:
    if user_id != configured_credentials().username:
        return None
    return AdminUser(user_id)


def _not_logged_in():
    return jsonify({"message": "Not logged in"}), 401


def validate_credentials(credentials: AdminCredentials, username: str, password: str) -> bool:
    """Whether ``username``/``password`` sign in as the configured admin.

    Usernames compare case-insensitively; passwords exactly.
    """
    if not (username and password):
        return False
    if not credentials.same_account(username):
        logger.info("Sign-in attempt for unknown admin '%s'", username)
        return False
    if not check_password_hash(credentials.password_hash, password):
        logger.info("Wrong password for admin '%s'", username)
        return False
    return True
