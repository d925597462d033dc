"""Core types and utilities for polyfence.

This module provides type definitions, enums, exceptions, and core utilities
used throughout the library.
"""

from .types import (
    ShapeKind,
    OutcomeKind,
    KernelStatus,
    RejectionReason,
)

from .errors import (
    PolyfenceError,
    ValidationError,
    ConfigurationError,
    ShapeRejectedError,
    KernelWarning,
)

__all__ = [
    # Enums
    'ShapeKind',
    'OutcomeKind',
    'KernelStatus',
    'RejectionReason',

    # Exceptions
    'PolyfenceError',
    'ValidationError',
    'ConfigurationError',
    'ShapeRejectedError',
    'KernelWarning',
]
