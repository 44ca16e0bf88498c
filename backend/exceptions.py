"""Domain errors raised by the storage layer.

Each error carries the HTTP status code it maps to; ``main.py`` registers a
single handler that turns them into ``{"detail": message}`` responses.
"""


class InventoryError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(InventoryError):
    status_code = 400


class NotFoundError(InventoryError):
    status_code = 404


class ConflictError(InventoryError):
    status_code = 409


class InsufficientStockError(ConflictError):
    """An outbound movement would take an item's stock below zero."""

    def __init__(self, item_code: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for item {item_code}: available {available}, requested {requested}"
        )
        self.available = available
        self.requested = requested


class InvalidStatusTransitionError(ConflictError):
    def __init__(self, current, target):
        super().__init__(
            f"Cannot change purchase order status from '{current.value}' to '{target.value}'"
        )
        self.current = current
        self.target = target
