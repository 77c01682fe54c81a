"""
Domain errors

Services raise these; the API layer maps each one to an HTTP status
(see ``shared.api.exception_handler``).
"""


class DomainError(Exception):
    """Base class for all expected business failures."""

    status_code = 400
    default_message = "Request could not be processed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DomainValidationError(DomainError):
    """Invalid input or a state transition that is not allowed."""

    status_code = 400


class InvalidIntervalError(DomainValidationError):
    """Interval bounds are out of order or of mixed kinds."""

    default_message = "End must be after start."


class BookingConflictError(DomainValidationError):
    """Raised when a resource is busy for the requested interval."""

    default_message = "Resource is not available for the requested time."


class InsufficientCreditsError(DomainValidationError):
    default_message = "Insufficient credits."


class PermissionDeniedError(DomainError):
    status_code = 403
    default_message = "You are not allowed to perform this action."


class NotFoundError(DomainError):
    status_code = 404
    default_message = "Not found."
