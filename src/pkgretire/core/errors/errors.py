"""
Error taxonomy and Result wrapper for the retirement workflow.

Every business denial maps to exactly one error kind with a single
user-readable sentence; infrastructure failures collapse into
TransientStoreError so callers know a retry is safe.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, TypeVar, Union, cast


class ErrorSeverity(Enum):
    WARNING = "warning"      # caller-correctable denial
    ERROR = "error"          # request failed
    CRITICAL = "critical"    # infrastructure failure


@dataclass(eq=False)
class RegistryError(Exception):
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    code: str = "UNKNOWN"
    status_code: int = 500
    context: Dict[str, Any] | None = None

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    @property
    def retryable(self) -> bool:
        return False


@dataclass(eq=False)
class NotFoundError(RegistryError):
    code: str = "NOT_FOUND"
    status_code: int = 404
    severity: ErrorSeverity = ErrorSeverity.WARNING


@dataclass(eq=False)
class ForbiddenError(RegistryError):
    code: str = "FORBIDDEN"
    status_code: int = 403
    severity: ErrorSeverity = ErrorSeverity.WARNING


@dataclass(eq=False)
class UnauthenticatedError(RegistryError):
    code: str = "UNAUTHENTICATED"
    # The registry reports missing credentials as 403, not 401.
    status_code: int = 403
    severity: ErrorSeverity = ErrorSeverity.WARNING


@dataclass(eq=False)
class UnprocessableEntityError(RegistryError):
    code: str = "UNPROCESSABLE_ENTITY"
    status_code: int = 422
    severity: ErrorSeverity = ErrorSeverity.WARNING


@dataclass(eq=False)
class TransientStoreError(RegistryError):
    code: str = "TRANSIENT_STORE_FAILURE"
    status_code: int = 503
    severity: ErrorSeverity = ErrorSeverity.CRITICAL

    @property
    def retryable(self) -> bool:
        return True


def crate_not_found(name: str) -> NotFoundError:
    return NotFoundError(message=f"crate `{name}` does not exist", context={"name": name})


T = TypeVar("T")
E = TypeVar("E", bound=RegistryError)


@dataclass
class Result(Generic[T, E]):
    """Ok/Err wrapper so workflows can return denials without raising."""

    _value: Union[T, E]
    _is_ok: bool

    @classmethod
    def ok(cls, value: T) -> "Result[T, E]":
        return cls(_value=value, _is_ok=True)

    @classmethod
    def err(cls, error: E) -> "Result[T, E]":
        return cls(_value=error, _is_ok=False)

    def is_ok(self) -> bool:
        return self._is_ok

    @property
    def error(self) -> E | None:
        return None if self._is_ok else cast(E, self._value)

    def unwrap(self) -> T:
        if not self._is_ok:
            raise cast(E, self._value)
        return cast(T, self._value)
