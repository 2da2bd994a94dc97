"""Error types for the café POS core."""

from typing import Optional


class PosError(Exception):
    """Base class for POS errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


class ValidationError(PosError):
    """Malformed input or a business rule rejected the request."""


class ReferentialIntegrityError(PosError):
    """A referenced product, customer or category is missing or still in use."""

    def __init__(self, kind: str, entity_id: str, message: Optional[str] = None):
        super().__init__(message or f"{kind} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class InsufficientPointsError(PosError):
    """Applying an order would drive a customer's balance below zero."""

    def __init__(self, customer_id: str, balance: int, delta: int):
        super().__init__(
            f"insufficient points for {customer_id}: have {balance}, change {delta}"
        )
        self.customer_id = customer_id
        self.balance = balance
        self.delta = delta


class PersistenceError(PosError):
    """The underlying store failed to read or write."""

    def __init__(self, operation: str, cause: Optional[Exception] = None):
        super().__init__(f"persistence {operation} failed", cause)
        self.operation = operation
