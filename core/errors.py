"""
Error types raised by the client services.

Services log and re-raise; views decide how to show them (toast for writes,
inline retry for full-page reads).
"""

NO_ROLE_MESSAGE = "User has not been assigned a role"

STATUS_MESSAGES = {
    400: "Validation error",
    401: "Authentication required",
    403: "Permission denied",
    404: "Resource not found",
    409: "Conflict",
    500: "Internal server error",
}


class RestaurantClientError(Exception):
    """Base class for every error raised by this client."""


class ApiError(RestaurantClientError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str = None, payload=None):
        self.status_code = status_code
        self.payload = payload
        self.message = message or STATUS_MESSAGES.get(status_code, f"Request failed with status {status_code}")
        super().__init__(self.message)


class AuthenticationError(ApiError):
    """Session is missing, invalid or expired. The session has been logged out."""


class RoleNotAssignedError(AuthenticationError):
    """Signed up but no role assigned yet. The session is kept."""


class NotFoundError(ApiError):
    pass


class ConflictError(ApiError):
    pass


class NetworkError(RestaurantClientError):
    """The request never got an HTTP answer (connection refused, timeout...)."""

    def __init__(self, message: str, original: Exception = None):
        self.original = original
        super().__init__(message)


class ResponseFormatError(RestaurantClientError):
    """The backend answered 2xx but the body does not decode into the expected record."""

    def __init__(self, message: str, payload=None):
        self.payload = payload
        self.message = message
        super().__init__(message)


class ValidationError(RestaurantClientError):
    """Client-side check failed; nothing was sent to the server."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        self.message = message
        super().__init__(message)


class CategoryInUseError(ValidationError):
    def __init__(self, category_name: str, item_count: int):
        self.item_count = item_count
        noun = "item" if item_count == 1 else "items"
        super().__init__(
            f"{category_name} contains {item_count} {noun}. "
            "Move or delete the items before deleting the category.",
            field="category",
        )


class IllegalTransitionError(ValidationError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move an order from {current} to {target}", field="status")


def error_from_response(status_code: int, payload) -> ApiError:
    """Build the typed ApiError for a failed response body."""
    message = None
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
    elif isinstance(payload, str) and payload.strip():
        message = payload.strip()

    if status_code == 401:
        if message == NO_ROLE_MESSAGE:
            return RoleNotAssignedError(status_code, message, payload)
        return AuthenticationError(status_code, message, payload)
    if status_code == 404:
        return NotFoundError(status_code, message, payload)
    if status_code == 409:
        return ConflictError(status_code, message, payload)
    return ApiError(status_code, message, payload)


def describe_error(exc: Exception, action: str) -> str:
    """User-facing text for a failed action, e.g. 'Failed to update order status: ...'."""
    if isinstance(exc, NetworkError):
        detail = "Network error. Please check your connection."
    elif isinstance(exc, (ApiError, ValidationError, ResponseFormatError)):
        detail = exc.message
    else:
        detail = str(exc) or exc.__class__.__name__
    return f"Failed to {action}: {detail}"
