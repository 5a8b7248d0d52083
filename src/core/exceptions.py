"""Custom exception classes for the LitPlatform API.

Every failure of the identity and access layer maps to exactly one of these
kinds. The HTTP layer turns them into status codes; the layer itself has no
notion of HTTP.
"""


class LitPlatformError(Exception):
    """Base exception for all LitPlatform errors."""

    pass


class DuplicateEmailError(LitPlatformError):
    """Raised when an account with the given email already exists."""

    def __init__(self, email: str):
        """Initialize the exception.

        Args:
            email: The email that is already registered.
        """
        self.email = email
        super().__init__("An account with this email already exists")


class NotFoundError(LitPlatformError):
    """Raised when an id, email or code does not resolve to a record."""

    pass


class UnauthenticatedError(LitPlatformError):
    """Raised when no valid session is present."""

    def __init__(self):
        super().__init__("Unauthorized")


class ForbiddenError(LitPlatformError):
    """Raised when the acting account's role is not allowed."""

    pass


class InvalidOrExpiredTokenError(LitPlatformError):
    """Raised when a password reset token is unknown, used or expired."""

    def __init__(self):
        super().__init__("Invalid or expired reset token")


class WeakPasswordError(LitPlatformError):
    """Raised when a password does not meet the minimum length."""

    def __init__(self, min_length: int):
        """Initialize the exception.

        Args:
            min_length: The minimum accepted password length.
        """
        self.min_length = min_length
        super().__init__(f"Password must be at least {min_length} characters long")


class StoreUnavailableError(LitPlatformError):
    """Raised when the persistent store cannot be reached."""

    pass


class ValidationError(LitPlatformError):
    """Raised when data validation fails."""

    pass


class AlreadyEnrolledError(LitPlatformError):
    """Raised when a student joins a class they are already enrolled in."""

    pass


class AlreadySubmittedError(LitPlatformError):
    """Raised when a student submits the same assignment twice."""

    pass
