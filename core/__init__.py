"""Core application components."""

from core.logger import setup_logger, get_logger
from core.constants import (
    SessionDefaults,
    PaginationDefaults,
    CacheDefaults,
    DatabaseDefaults,
    SessionStatus,
    SessionOutcome,
    RequestStatus,
    BetResult,
    DocumentType,
    FileUploadLimits,
    SettingsDefaults,
)
from core.exceptions import (
    ApplicationError,
    ConfigurationError,
    DatabaseError,
    RepositoryError,
    ValidationError,
    InvalidArgumentError,
    InvalidTimestampError,
    FileValidationError,
    NotFoundError,
    RequestStateError,
    AuthenticationError,
)

__all__ = [
    # Logging
    'setup_logger',
    'get_logger',
    # Constants
    'SessionDefaults',
    'PaginationDefaults',
    'CacheDefaults',
    'DatabaseDefaults',
    'SessionStatus',
    'SessionOutcome',
    'RequestStatus',
    'BetResult',
    'DocumentType',
    'FileUploadLimits',
    'SettingsDefaults',
    # Exceptions
    'ApplicationError',
    'ConfigurationError',
    'DatabaseError',
    'RepositoryError',
    'ValidationError',
    'InvalidArgumentError',
    'InvalidTimestampError',
    'FileValidationError',
    'NotFoundError',
    'RequestStateError',
    'AuthenticationError',
]
