"""
Domain errors raised by the service layer.

Services signal expected failures by raising subclasses of
``RegistrationError``.  It derives from ``ValueError`` so callers that
only care about "the request was rejected" can keep catching
``ValueError``; endpoints map each subclass to its HTTP status.
Store and file-system failures are not wrapped and reach the
application's internal-error handler unchanged.
"""


class RegistrationError(ValueError):
    """Base class for rejected registration and enrollment requests."""

    status_code = 400


class ValidationError(RegistrationError):
    """Missing or invalid input."""


class NotFoundError(RegistrationError):
    """A referenced registration, session, activity or join-row is absent."""

    status_code = 404


class ConflictError(RegistrationError):
    """Duplicate email, duplicate enrollment or exhausted capacity."""
