"""
Validation error type for hoodorm.
"""

from __future__ import annotations

import enum
from typing import Optional


class ValidationCode(enum.IntEnum):
    VALUE_NOT_SET = 1 << 16
    VALUE_TOO_SMALL = (1 << 16) + 1
    VALUE_TOO_BIG = (1 << 16) + 2
    VALUE_TOO_SHORT = (1 << 16) + 3
    VALUE_TOO_LONG = (1 << 16) + 4


class ValidationError(Exception):
    """
    A field value violated a declared constraint.

    ``code`` is stable across releases so callers can tell "too short" from
    "too long" without parsing ``message``.
    """

    def __init__(self, code: int, message: str, field: Optional[str] = None) -> None:
        self.code = code
        self.message = message
        self.field = field
        super().__init__(message)

    def __repr__(self) -> str:
        return f"ValidationError(code={int(self.code)}, message={self.message!r}, field={self.field!r})"
