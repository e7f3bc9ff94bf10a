"""Custom application exceptions.

Every kind is recoverable by the user: the rejected operation leaves stored
state untouched and the message says what to correct.
"""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class ValidationError(AppException):
    """Missing or invalid referenced data (patient, consultation type, input)."""

    def __init__(self, message: str = "Validation error"):
        """Initialize with 422 status code."""
        super().__init__(message, status_code=422)


class TemporalError(AppException):
    """Date or time lies in the past."""

    def __init__(self, message: str = "Date or time is in the past"):
        """Initialize with 422 status code."""
        super().__init__(message, status_code=422)


class ConflictError(AppException):
    """Slot already held by a scheduled appointment."""

    def __init__(self, message: str = "Time slot already taken"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


class StateError(AppException):
    """Illegal state transition."""

    def __init__(self, message: str = "Illegal state transition"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


class GateError(AppException):
    """Finalize attempted before the clinical record is complete."""

    def __init__(self, missing: list[str]):
        """Initialize with the list of missing requirements."""
        self.missing = list(missing)
        message = "Cannot finalize consultation, missing: " + ", ".join(self.missing)
        super().__init__(message, status_code=409)
