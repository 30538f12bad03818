"""Back-office settings.

Every value comes from the process environment, optionally seeded from a
``.env`` file in the working directory. Unset keys fall back to development
defaults; malformed numbers fall back too, while values that parse but make
no sense (a negative page size, say) stop the process at start-up.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List

from dotenv import load_dotenv

from core.constants import CacheDefaults, DatabaseDefaults, FileUploadLimits, PaginationDefaults, SessionDefaults
from core.exceptions import ConfigurationError

load_dotenv()

DEFAULT_ADMIN = ("admin", "123456")
PLACEHOLDER_SECRET = "change-me-backoffice-secret"
TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _env_flag(key: str, fallback: bool = False) -> bool:
    raw = os.getenv(key)
    return fallback if raw is None else raw.strip().lower() in TRUE_VALUES


def _env_number(key: str, fallback: int, minimum: int = 0) -> int:
    """Integer setting; unparseable text means ``fallback``."""
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return fallback
    try:
        number = int(raw)
    except ValueError:
        return fallback
    if number < minimum:
        raise ConfigurationError(f"{key} must be >= {minimum}, got {number}")
    return number


def _env_text(key: str, fallback: str = "") -> str:
    return os.getenv(key, fallback)


@dataclass(frozen=True)
class Config:
    admin_username: str
    admin_password: str
    environment: str
    debug: bool
    web_host: str
    web_port: int
    secret_key: str
    database_path: str
    upload_folder: str
    log_folder: str
    max_upload_size: int
    session_count: int
    session_timezone: str
    users_page_limit: int
    orders_page_size: int
    requests_page_size: int
    stats_cache_ttl: int

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def insecure_settings(self) -> List[str]:
        """Names of settings still at their shipped development values."""
        found = []
        if (self.admin_username, self.admin_password) == DEFAULT_ADMIN:
            found.append("ADMIN_USERNAME/ADMIN_PASSWORD")
        if self.secret_key == PLACEHOLDER_SECRET:
            found.append("SECRET_KEY")
        return found


def load_config() -> Config:
    """Read the back-office settings from the environment.

    Raises:
        ConfigurationError: If a numeric setting is out of range
    """
    return Config(
        admin_username=_env_text("ADMIN_USERNAME", DEFAULT_ADMIN[0]),
        admin_password=_env_text("ADMIN_PASSWORD", DEFAULT_ADMIN[1]),
        environment=_env_text("ENVIRONMENT", "development"),
        debug=_env_flag("DEBUG"),
        web_host=_env_text("WEB_HOST", "0.0.0.0"),
        web_port=_env_number("WEB_PORT", 5000, minimum=1),
        secret_key=_env_text("SECRET_KEY", PLACEHOLDER_SECRET),
        database_path=_env_text("DATABASE_PATH", DatabaseDefaults.PATH),
        upload_folder=_env_text("UPLOAD_FOLDER", "uploads"),
        log_folder=_env_text("LOG_FOLDER", "logs"),
        max_upload_size=_env_number("MAX_UPLOAD_SIZE", FileUploadLimits.MAX_DOCUMENT_SIZE, minimum=1),
        session_count=_env_number("SESSION_COUNT", SessionDefaults.UPCOMING_COUNT),
        session_timezone=_env_text("SESSION_TIMEZONE", SessionDefaults.DISPLAY_TIMEZONE),
        users_page_limit=_env_number("USERS_PAGE_LIMIT", PaginationDefaults.USERS_LIMIT, minimum=1),
        orders_page_size=_env_number("ORDERS_PAGE_SIZE", PaginationDefaults.ORDERS_PAGE_SIZE, minimum=1),
        requests_page_size=_env_number("REQUESTS_PAGE_SIZE", PaginationDefaults.REQUESTS_PAGE_SIZE, minimum=1),
        stats_cache_ttl=_env_number("STATS_CACHE_TTL", CacheDefaults.STATS_TTL),
    )
