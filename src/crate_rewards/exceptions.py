"""
Custom exceptions for the crate reward economy.

This module defines a hierarchy of exceptions that provide clear error
handling throughout the package. Each exception includes:
- A descriptive message
- An error code for the UI layer
- A retryable flag telling the caller whether trying again can succeed
- Optional details for debugging
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent error results."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"

    # Economy errors
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    NOT_UNLOCKED = "NOT_UNLOCKED"

    # Storage errors
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"


class CrateRewardsError(Exception):
    """
    Base exception for all crate reward errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        retryable: Whether the same call may succeed if repeated
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        retryable: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.retryable = retryable
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for the UI layer."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "retryable": self.retryable,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# ============================================================================
# Validation Errors
# ============================================================================

class ValidationError(CrateRewardsError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            details=error_details,
        )


class NotAuthenticatedError(CrateRewardsError):
    """Raised when the identity provider has no signed-in user."""

    def __init__(self, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message="Please sign in to earn and open crates.",
            code=ErrorCode.NOT_AUTHENTICATED,
            details=details,
        )


# ============================================================================
# Economy Errors
# ============================================================================

class InsufficientFundsError(CrateRewardsError):
    """Raised when a crate is opened with an empty balance."""

    def __init__(
        self,
        balance: int = 0,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["balance"] = balance
        super().__init__(
            message="You have no crates to open. Finish a workout to earn more.",
            code=ErrorCode.INSUFFICIENT_FUNDS,
            details=error_details,
        )


class NotUnlockedError(CrateRewardsError):
    """Raised when equipping a reward the user has never unlocked."""

    def __init__(self, reward_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        error_details = details or {}
        error_details["reward_id"] = reward_id
        super().__init__(
            message=f"Reward '{reward_id}' has not been unlocked",
            code=ErrorCode.NOT_UNLOCKED,
            details=error_details,
        )


# ============================================================================
# Storage Errors
# ============================================================================

class AccountNotFoundError(CrateRewardsError):
    """Raised by a store when no account exists for the user."""

    def __init__(self, user_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        error_details = details or {}
        error_details["user_id"] = user_id
        super().__init__(
            message=f"Account for user '{user_id}' not found",
            code=ErrorCode.ACCOUNT_NOT_FOUND,
            details=error_details,
        )


class StorageUnavailableError(CrateRewardsError):
    """Raised when a read, write or transaction against the store fails."""

    def __init__(
        self,
        message: str = "Storage is unavailable. Please try again.",
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        super().__init__(
            message=message,
            code=ErrorCode.STORAGE_UNAVAILABLE,
            retryable=True,
            details=error_details,
        )
