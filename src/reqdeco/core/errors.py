# reqdeco/core/errors.py
"""
Error taxonomy for declared requests.
"""
from __future__ import annotations

from typing import Any


class ReqdecoError(Exception):
    """Base class for all errors raised by reqdeco itself."""


class ConfigurationError(ReqdecoError):
    """Raised when a declaration or registration cannot be used for a call.

    Always fatal to the call and raised before any transport activity.
    """


class ValidationError(ReqdecoError, ValueError):
    """Raised when a response fails a declared validator."""

    def __init__(self, message: str, errors: list[str] | None = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "validation_error",
            "message": self.message,
            "errors": self.errors,
        }

    def __str__(self) -> str:
        return self.message
