"""Custom exception classes for the pickup request tracker.

Every exception carries the HTTP status it maps to, so the API layer can
render any of them as an ``{"error": message}`` body.
"""


class PickupTrackerError(Exception):
    """Base exception for all pickup tracker errors."""

    status_code: int = 500


class ValidationError(PickupTrackerError):
    """Raised when input is malformed, missing or violates a closed set."""

    status_code = 400


class UserAlreadyExistsError(ValidationError):
    """Raised when registering or renaming to an email that is taken."""

    def __init__(self, email: str):
        """Initialize the exception.

        Args:
            email: The email address that is already registered.
        """
        self.email = email
        super().__init__("Email already registered")


class AuthError(PickupTrackerError):
    """Raised when a token is missing or invalid."""

    status_code = 401


class InvalidCredentialsError(AuthError):
    """Raised on a failed login.

    Unknown email and wrong password share this message.
    """

    status_code = 400

    def __init__(self):
        super().__init__("Invalid credentials")


class AuthzError(PickupTrackerError):
    """Raised when the caller's role does not permit the operation."""

    status_code = 403


class NotFoundError(PickupTrackerError):
    """Raised when an id does not resolve to a stored record."""

    status_code = 404


class RequestNotFoundError(NotFoundError):
    """Raised when a requested pickup request cannot be found."""

    def __init__(self, request_id: str):
        """Initialize the exception.

        Args:
            request_id: The ID of the pickup request that was not found.
        """
        self.request_id = request_id
        super().__init__("Request not found")


class UserNotFoundError(NotFoundError):
    """Raised when a requested user cannot be found."""

    def __init__(self, user_id: str):
        """Initialize the exception.

        Args:
            user_id: The ID of the user that was not found.
        """
        self.user_id = user_id
        super().__init__("User not found")


class InternalError(PickupTrackerError):
    """Raised when the store fails to complete an operation.

    The message is generic; the store error is chained as the cause and
    logged where it is caught.
    """

    status_code = 500

    def __init__(self, message: str = "Internal error"):
        super().__init__(message)


class ConfigurationError(PickupTrackerError):
    """Raised when an environment setting cannot be parsed or is out of range."""
