"""Application-wide constants and configuration values."""

from __future__ import annotations

from enum import Enum


# Session windows
class SessionDefaults:
    """Trading session window layout."""
    START_SECOND = 1
    END_SECOND = 59
    END_MICROSECOND = 999000  # :59.999
    UPCOMING_COUNT = 30
    PER_PAGE = 10
    DISPLAY_TIMEZONE = "Asia/Ho_Chi_Minh"
    LABEL_FORMAT = "%H:%M"


# Pagination
class PaginationDefaults:
    """Default page sizes for admin listings."""
    USERS_LIMIT = 100
    ORDERS_PAGE_SIZE = 10
    REQUESTS_PAGE_SIZE = 10
    RECENT_LIMIT = 10
    AUDIT_LIMIT = 100
    MAX_PAGE_SIZE = 500


# Cache constants
class CacheDefaults:
    """Default cache configuration."""
    STATS_TTL = 30  # seconds


# Database constants
class DatabaseDefaults:
    """Default database configuration."""
    PATH = "data/backoffice.sqlite"
    BUSY_TIMEOUT = 30.0  # seconds


# Status enums
class SessionStatus(str, Enum):
    """Position of a session window relative to the current instant."""
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


class SessionOutcome(str, Enum):
    """Placeholder up/down result attached to a session window."""
    UP = "up"
    DOWN = "down"


class RequestStatus(str, Enum):
    """Deposit / withdrawal request status."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class BetResult(str, Enum):
    """Outcome of a historical bet."""
    PENDING = "pending"
    WIN = "win"
    LOSE = "lose"


class DocumentType(str, Enum):
    """Identity document side uploaded for verification."""
    FRONT = "front"
    BACK = "back"


# Decisions an admin can take on a pending request
DECISION_STATUSES = frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED})


# File upload limits
class FileUploadLimits:
    """Verification document upload limits."""
    MAX_DOCUMENT_SIZE = 5 * 1024 * 1024  # 5 MB
    ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
    RANDOM_SUFFIX_LENGTH = 7


# Platform settings defaults (deposit bank account and limits)
class SettingsDefaults:
    """Initial values of the editable platform settings."""
    VALUES = {
        "bankName": "",
        "accountNumber": "",
        "accountHolder": "",
        "minDeposit": "100000",
        "minWithdrawal": "100000",
        "maxWithdrawal": "100000",
        "supportLink": "",
    }
