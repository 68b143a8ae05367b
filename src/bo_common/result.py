"""Explicit success/failure values for availability and exchange helpers.

Helpers that check external state (ban gate, exchange connection) return
``Ok(value)`` or ``Err(kind, message)`` instead of raising. Service code turns
an ``Err`` into the matching ``AppError`` with ``unwrap_or_raise`` at the
point where the failure must abort the operation, and simply logs it where
failures are tolerated (settlement).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from src.bo_common.errors import (
    AppError,
    ExternalServiceError,
    InternalError,
    ServiceUnavailableError,
)

T = TypeVar("T")


class ErrorKind(str, Enum):
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    EXTERNAL_SERVICE = "EXTERNAL_SERVICE"
    INTERNAL = "INTERNAL"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str

    @property
    def is_ok(self) -> bool:
        return False

    def to_error(self) -> AppError:
        if self.kind is ErrorKind.SERVICE_UNAVAILABLE:
            return ServiceUnavailableError(self.message)
        if self.kind is ErrorKind.EXTERNAL_SERVICE:
            return ExternalServiceError(self.message)
        return InternalError(self.message)


def unwrap_or_raise(result: "Ok[T] | Err") -> T:
    if isinstance(result, Err):
        raise result.to_error()
    return result.value
