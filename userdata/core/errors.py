"""
core/errors.py
--------------
Exception types raised by the formatting and hashing layer.

Arguments to the formatting functions are user data, so messages carry the
*name* of the field and the rule that failed, never the offending value.
"""

from __future__ import annotations


class UserDataError(ValueError):
    """
    Base class for every validation failure raised by :mod:`userdata`.

    Args:
        field:  Human-readable name of the field being processed
                (e.g. ``"email address"``).
        reason: Which rule failed.  Must not contain the raw value.
    """

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"{reason} ({field})")


class NullInputError(UserDataError):
    """Raised when a value is ``None`` / absent."""

    def __init__(self, field: str) -> None:
        super().__init__(field, f"Null {field}")


class InvalidFormatError(UserDataError):
    """Raised when a value is present but fails a type-specific rule."""
