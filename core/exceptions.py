"""Exceptions raised by the back-office.

The web layer turns them into HTTP statuses (see ``web.app.ERROR_STATUS``);
everything below ``ValidationError`` is the caller's fault.
"""

from __future__ import annotations


class ApplicationError(Exception):
    """Root of every back-office error."""


class ConfigurationError(ApplicationError):
    """A setting is missing, malformed or out of range."""


class DatabaseError(ApplicationError):
    """The sqlite store could not be used."""


class RepositoryError(DatabaseError):
    """Opening the store or running a statement failed."""


class ValidationError(ApplicationError):
    """Input rejected before anything was changed."""


class InvalidArgumentError(ValidationError):
    """A count, page or limit outside its allowed range."""


class InvalidTimestampError(ValidationError):
    """A value that cannot be read as an instant."""


class FileValidationError(ValidationError):
    """An uploaded document is missing, too large or not an image."""


class NotFoundError(ApplicationError):
    """No record with the requested id."""


class RequestStateError(ApplicationError):
    """A deposit or withdrawal request was already decided."""


class AuthenticationError(ApplicationError):
    """Wrong admin username or password."""
