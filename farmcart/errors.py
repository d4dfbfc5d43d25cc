"""
Cart Errors and User-Facing Messages

Message constants are shared by the engine notices and the exceptions so
that the same text reaches logs and the storefront.
"""

from typing import Any

# Error messages
ERROR_LOGIN_REQUIRED = "Please login to add items to cart"
ERROR_INVALID_QUANTITY = "Quantity must be a positive integer"
ERROR_LINE_NOT_FOUND = "Cart item not found"
ERROR_LINE_CONFLICT = "Item is already in cart"
ERROR_LOAD_FAILED = "Failed to load cart"
ERROR_ADD_FAILED = "Failed to add to cart"
ERROR_UPDATE_FAILED = "Failed to update quantity"
ERROR_REMOVE_FAILED = "Failed to remove item"
ERROR_CLEAR_FAILED = "Failed to clear cart"
ERROR_STORE_UNAVAILABLE = "Cart service unavailable"
ERROR_SESSION_CHANGED = "Session changed before the cart was updated"

# Success notices
NOTICE_ADDED = "Added to cart"
NOTICE_REMOVED = "Removed from cart"
NOTICE_CLEARED = "Cart cleared"


class CartError(Exception):
    """Base error for cart intents."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        retryable: bool = False,
        raw_error: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable
        self.raw_error = raw_error


class UnauthenticatedError(CartError):
    """Intent requires a signed-in principal and there is none."""

    def __init__(self, message: str = ERROR_LOGIN_REQUIRED) -> None:
        super().__init__(message, code="UNAUTHENTICATED")


class InvalidQuantityError(CartError):
    """Non-positive or non-integer quantity on add."""

    def __init__(self, quantity: Any, message: str = ERROR_INVALID_QUANTITY) -> None:
        super().__init__(message, code="INVALID_QUANTITY")
        self.quantity = quantity


class LineNotFoundError(CartError):
    """Intent targets a cart line that is not there."""

    def __init__(self, line_id: str, message: str = ERROR_LINE_NOT_FOUND) -> None:
        super().__init__(message, code="NOT_FOUND")
        self.line_id = line_id


class LineConflictError(CartError):
    """Store already holds a line for this (principal, product) pair.

    Callers should retry as a quantity update rather than an add.
    """

    def __init__(self, message: str = ERROR_LINE_CONFLICT, raw_error: Any = None) -> None:
        super().__init__(message, code="CONFLICT", retryable=True, raw_error=raw_error)


class PersistenceError(CartError):
    """Store call failed (network, server error, malformed row)."""

    def __init__(self, message: str = ERROR_STORE_UNAVAILABLE, raw_error: Any = None) -> None:
        super().__init__(message, code="PERSISTENCE_FAILURE", retryable=True, raw_error=raw_error)


class SessionChangedError(CartError):
    """The principal changed while the intent was in flight; its result was discarded."""

    def __init__(self, message: str = ERROR_SESSION_CHANGED) -> None:
        super().__init__(message, code="SESSION_CHANGED")


def is_duplicate_key_error(exception: Exception) -> bool:
    """Check if exception is a unique constraint violation from PostgREST."""
    error_str = str(exception)

    code = getattr(exception, "code", None)
    if code is not None and (code == 409 or "23505" in str(code)):
        return True
    if getattr(exception, "status_code", None) == 409:
        return True

    duplicate_keywords = [
        "23505",
        "duplicate key",
        "unique constraint",
        "already exists",
    ]
    return any(keyword in error_str.lower() for keyword in duplicate_keywords)
