"""Shared domain components.

This module exports shared value objects and exceptions used across
domain boundaries.
"""

from scholar.domain.shared.exceptions import (
    DomainException,
    ErrorCode,
    ValidationError,
)

__all__ = [
    # Error codes
    "ErrorCode",
    # Base exception
    "DomainException",
    # Exception categories
    "ValidationError",
]
