"""Service-layer exceptions.

Each carries the HTTP status an API layer should map it to.
"""


class ServiceError(Exception):
    """Base class for errors surfaced by the service layer."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ServiceError):
    """Raised for a malformed identifier or an unusable query argument."""

    status_code = 400


class NotFoundError(ServiceError):
    """Raised when the requested record does not exist."""

    status_code = 404


class CreationError(ServiceError):
    """Raised when the store rejects a write."""

    status_code = 500


class ExternalJobError(ServiceError):
    """Raised when the external sync job fails."""

    status_code = 502
