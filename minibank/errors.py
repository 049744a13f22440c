"""
Error Taxonomy Module

Error kinds reported by ledger and persistence operations, the exception
hierarchy used internally, and the OperationResult returned to callers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar


T = TypeVar("T")


class ErrorKind(Enum):
    """Kinds of failure an operation can report"""
    INVALID_INPUT = "invalid_input"                      # Malformed name/PIN/account number
    INVALID_AMOUNT = "invalid_amount"                    # Non-positive or unparsable amount
    ACCOUNT_NOT_FOUND = "account_not_found"
    AUTHORIZATION_FAILED = "authorization_failed"        # Wrong PIN or unknown account
    INSUFFICIENT_FUNDS = "insufficient_funds"
    PERSISTENCE_READ_ERROR = "persistence_read_error"
    PERSISTENCE_WRITE_ERROR = "persistence_write_error"


class LedgerError(Exception):
    """
    Base exception for all MiniBank errors.

    Each subclass is bound to one ErrorKind so that callers can either catch
    the exception type or branch on ``error.kind``.
    """

    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidInputError(LedgerError):
    kind = ErrorKind.INVALID_INPUT


class InvalidAmountError(LedgerError):
    kind = ErrorKind.INVALID_AMOUNT


class AccountNotFoundError(LedgerError):
    kind = ErrorKind.ACCOUNT_NOT_FOUND


class AuthorizationFailedError(LedgerError):
    kind = ErrorKind.AUTHORIZATION_FAILED


class InsufficientFundsError(LedgerError):
    kind = ErrorKind.INSUFFICIENT_FUNDS


class PersistenceReadError(LedgerError):
    kind = ErrorKind.PERSISTENCE_READ_ERROR


class PersistenceWriteError(LedgerError):
    kind = ErrorKind.PERSISTENCE_WRITE_ERROR


_ERRORS_BY_KIND = {
    cls.kind: cls for cls in (
        InvalidInputError, InvalidAmountError, AccountNotFoundError,
        AuthorizationFailedError, InsufficientFundsError,
        PersistenceReadError, PersistenceWriteError,
    )
}


def error_for(kind: ErrorKind, message: str, details: Optional[Dict[str, Any]] = None) -> LedgerError:
    """Build the exception matching an error kind"""
    return _ERRORS_BY_KIND[kind](message, details)


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of a single ledger or persistence operation"""
    ok: bool
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def success(cls, value: Optional[T] = None) -> "OperationResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: LedgerError) -> "OperationResult[T]":
        return cls(ok=False, error=error.kind, message=error.message)

    def unwrap(self) -> T:
        """Return the value, or raise the LedgerError matching the failure"""
        if not self.ok:
            raise error_for(self.error, self.message)
        return self.value

    def __bool__(self) -> bool:
        return self.ok
