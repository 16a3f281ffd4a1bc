"""Custom application exceptions."""


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


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class TransitionConflictException(BadRequestException):
    """Appointment action not allowed from the record's current status."""

    def __init__(self, message: str = "Transition not allowed"):
        """Initialize with 400 status code."""
        super().__init__(message)


class RateLimitException(AppException):
    """Rate limit exceeded exception."""

    def __init__(self, message: str = "Rate limit exceeded"):
        """Initialize with 429 status code."""
        super().__init__(message, status_code=429)


# Integration failures below are never turned into HTTP responses. They are
# logged, or recorded on the appointment's email status.


class EmailDeliveryError(Exception):
    """The email provider rejected a message or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        """Keep the provider's message and HTTP status when available."""
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DocumentRenderError(Exception):
    """HTML to PDF rendering failed or timed out."""
