"""Typed errors for order item actions.

Each error carries a ``category`` that callers branch on and the HTTP status
code the API answers with.
"""


class StorefrontError(Exception):
    """Base exception for all storefront order errors."""

    category = "server"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(StorefrontError):
    """Raised when request fields are missing or malformed."""

    category = "validation"
    status_code = 400


class AuthorizationError(StorefrontError):
    """Raised when the caller lacks the role or ownership an action needs."""

    category = "authorization"
    status_code = 403

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFoundError(StorefrontError):
    """Raised when a referenced item or order does not exist."""

    category = "not_found"
    status_code = 404


class ConflictError(StorefrontError):
    """Raised when the item's current state doesn't satisfy an action's precondition."""

    category = "conflict"
    status_code = 400

    def __init__(self, message: str, expected=None, actual=None):
        self.expected = expected
        self.actual = actual
        super().__init__(message)


class ServerError(StorefrontError):
    """Raised when the data store or a downstream call fails unexpectedly."""

    category = "server"
    status_code = 500
