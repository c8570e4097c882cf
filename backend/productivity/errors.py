"""
Error taxonomy shared by the repository layer.

Repository methods raise these with their specific kind so callers can branch.
Store errors never cross this boundary directly; they are logged and replaced
by StoreFailure.
"""


class ProductivityError(Exception):
    """Base class for repository-level errors."""


class UnauthenticatedError(ProductivityError):
    """No active session when an owner-scoped operation was attempted."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class NotFoundError(ProductivityError, LookupError):
    """The target id does not resolve to a record visible to the caller."""


class ValidationFailure(ProductivityError, ValueError):
    """A required field is missing or a record invariant would be violated."""


class StoreFailure(ProductivityError):
    """Any other failure of the underlying store, reported by operation name."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Failed to {operation}")
