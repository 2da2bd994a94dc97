"""Validation helpers for precondition checks.

Keeps the repeated guard clauses of the services and the order engine short.
"""

from collections.abc import Sequence
from typing import Any

from .errors import ValidationError


def require_not_blank(value: str, error_msg: str) -> None:
    """Require that a string has non-whitespace content."""
    if not value or not value.strip():
        raise ValidationError(error_msg)


def require_positive(value: int, error_msg: str) -> None:
    """Require that a value is greater than zero."""
    if value <= 0:
        raise ValidationError(error_msg)


def require_non_negative(value: int, error_msg: str) -> None:
    """Require that a value is zero or greater."""
    if value < 0:
        raise ValidationError(error_msg)


def require_int(value: Any, error_msg: str) -> None:
    """Require an integer, rejecting bools and floats."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(error_msg)


def require_not_empty(items: Sequence[Any], error_msg: str) -> None:
    """Require that a sequence has at least one element."""
    if not items:
        raise ValidationError(error_msg)


def require_access_code(code: str) -> None:
    """Require a 4 to 6 digit PIN."""
    if not code or not code.isdigit() or not 4 <= len(code) <= 6:
        raise ValidationError("Access code must be 4 to 6 digits")


def require_equal(actual: int, expected: int, error_msg: str) -> None:
    """Require that a submitted value matches the recomputed one."""
    if actual != expected:
        raise ValidationError(f"{error_msg}: expected {expected}, got {actual}")
