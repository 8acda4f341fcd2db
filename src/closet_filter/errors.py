"""Exception types raised by the filter engine."""


class ClosetFilterError(Exception):
    """Base class for all closet-filter errors."""


class ValidationError(ClosetFilterError, ValueError):
    """Raised when a value object is constructed with values that break its invariants."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class StorageFailure(ClosetFilterError):
    """Raised when the item store fails to execute a query or mutation."""

    def __init__(self, message: str, query: str | None = None):
        super().__init__(message)
        self.query = query
