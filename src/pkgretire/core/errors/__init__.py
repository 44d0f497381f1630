"""
Registry error taxonomy.
"""

from .errors import (
    ErrorSeverity,
    RegistryError,
    NotFoundError,
    ForbiddenError,
    UnauthenticatedError,
    UnprocessableEntityError,
    TransientStoreError,
    Result,
    crate_not_found,
)

__all__ = [
    "ErrorSeverity",
    "RegistryError",
    "NotFoundError",
    "ForbiddenError",
    "UnauthenticatedError",
    "UnprocessableEntityError",
    "TransientStoreError",
    "Result",
    "crate_not_found",
]
