"""SteamVault Error Handling Module

Every failure the fetcher, the store or the CLI can raise is a
SteamVaultError carrying an ErrorCode, a human-readable message, an
ErrorContext with primitive-only diagnostics, and the original exception
when one exists.

DomainError covers rejected input, InfrastructureError covers the
upstream and SQLite, SecurityError covers credentials, and
ApplicationError covers flow control such as cancellation.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]

# Default keys to mask in safe_dict for PII protection
SAFE_DICT_MASK_KEYS: tuple[str, ...] = ("user_id",)


class ErrorCode(str, Enum):
    """Error codes for SteamVault.

    This enum serves as the single source of truth for all error codes
    used throughout the application.
    """

    # Input validation
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_IDENTIFIER = "INVALID_IDENTIFIER"
    INVALID_DOCUMENT = "INVALID_DOCUMENT"

    # Upstream inventory service
    UPSTREAM_TRANSIENT = "UPSTREAM_TRANSIENT"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    UPSTREAM_CONNECTION_ERROR = "UPSTREAM_CONNECTION_ERROR"
    UPSTREAM_STRATEGY_EXHAUSTED = "UPSTREAM_STRATEGY_EXHAUSTED"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    INVENTORY_NOT_FOUND = "INVENTORY_NOT_FOUND"

    # Persistence
    STORE_ERROR = "STORE_ERROR"
    CACHE_READ_FAILED = "CACHE_READ_FAILED"
    CACHE_WRITE_FAILED = "CACHE_WRITE_FAILED"

    # Security
    UNAUTHORIZED = "UNAUTHORIZED"
    MISSING_CONFIG = "MISSING_CONFIG"

    # Configuration
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INVALID_CONFIG = "INVALID_CONFIG"
    FILE_READ_ERROR = "FILE_READ_ERROR"
    FILE_PERMISSION_DENIED = "FILE_PERMISSION_DENIED"

    # Application flow
    APPLICATION_ERROR = "APPLICATION_ERROR"
    OPERATION_CANCELLED = "OPERATION_CANCELLED"
    CLI_UNEXPECTED_ERROR = "CLI_UNEXPECTED_ERROR"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path, Enum, Decimal to primitive types.

    Args:
        value: Input dictionary or None

    Returns:
        Dictionary with primitive values only, or None

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        elif isinstance(val, Decimal):
            coerced[key] = float(val)
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum, Decimal are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContextModel:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are allowed in
    additional_data to ensure safe serialization and prevent sensitive
    data leakage.

    Attributes:
        operation: Optional operation name that caused the error
        user_id: Optional user ID (masked in logs)
        additional_data: Optional dict with primitive values only
    """

    operation: str | None = None
    user_id: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        """Post-initialization validation and coercion."""
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self, *, mask_keys: tuple[str, ...] | None = None) -> dict[str, Any]:
        """Export context as dict with PII masking.

        Args:
            mask_keys: Fields to exclude from output. Defaults to SAFE_DICT_MASK_KEYS.

        Returns:
            Dictionary with masked sensitive fields and guaranteed additional_data key.

        Example:
            >>> context = ErrorContextModel(user_id="12345", operation="fetch")
            >>> context.safe_dict()
            {'operation': 'fetch', 'additional_data': {}}
        """
        if mask_keys is None:
            mask_keys = SAFE_DICT_MASK_KEYS

        data: dict[str, Any] = {}
        if self.operation is not None and "operation" not in mask_keys:
            data["operation"] = self.operation
        if self.user_id is not None and "user_id" not in mask_keys:
            data["user_id"] = self.user_id

        if self.additional_data is not None and "additional_data" not in mask_keys:
            data["additional_data"] = self.additional_data
        else:
            data["additional_data"] = {}

        return data


ErrorContext = ErrorContextModel


class SteamVaultError(Exception):
    """Base exception class for all SteamVault errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize SteamVaultError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error

        formatted_message = f"{code.value}: {message}"
        super().__init__(formatted_message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging with PII masking.

        Returns:
            Dictionary representation of the error with code, message,
            masked context, and original_error (if present)
        """
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(SteamVaultError):
    """Domain-specific errors.

    These errors occur when input or business rules are violated,
    before any I/O takes place.
    """


class InfrastructureError(SteamVaultError):
    """Infrastructure-related errors.

    These errors occur when interacting with external systems
    like the upstream inventory service or the database.
    """


class SteamVaultNetworkError(InfrastructureError):
    """Network-related errors raised while talking to the upstream."""


class ApplicationError(SteamVaultError):
    """Application-level errors (configuration, flow control)."""


class SecurityError(SteamVaultError):
    """Security-related errors (missing secrets, failed authorization)."""


class InvalidInputError(DomainError):
    """Malformed identifier or request body, rejected before any I/O."""


class InvalidIdentifierError(InvalidInputError):
    """Account identifier does not match the required numeric format."""

    def __init__(self, account_id: str, operation: str = "validate_account_id") -> None:
        super().__init__(
            code=ErrorCode.INVALID_IDENTIFIER,
            message=f"Invalid account identifier: {account_id!r}",
            context=ErrorContext(
                operation=operation,
                additional_data={"account_id": str(account_id)[:32]},
            ),
        )
        self.account_id = account_id


class TransientUpstreamError(SteamVaultNetworkError):
    """Timeout, connection error, or retryable status.

    Retried inside the fetcher and never surfaced to callers.

    Attributes:
        status: HTTP status when the failure was a retryable response
        body: Response body for retryable responses
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        status: int | None = None,
        body: str = "",
    ) -> None:
        super().__init__(code, message, context, original_error)
        self.status = status
        self.body = body


class StrategyExhaustedError(SteamVaultNetworkError):
    """One transport path definitively failed; the fetcher advances."""

    def __init__(
        self,
        label: str,
        reason: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.UPSTREAM_STRATEGY_EXHAUSTED,
            f"Strategy '{label}' failed: {reason}",
            context,
            original_error,
        )
        self.label = label
        self.reason = reason


class AllStrategiesExhaustedError(SteamVaultNetworkError):
    """Every transport strategy failed; terminal for the fetch.

    Attributes:
        failures: Constituent (label, reason) pairs in attempt order
    """

    def __init__(
        self,
        failures: list[StrategyExhaustedError],
        context: ErrorContext | None = None,
        code: ErrorCode = ErrorCode.UPSTREAM_UNAVAILABLE,
    ) -> None:
        self.failures = list(failures)
        if self.failures:
            last = self.failures[-1]
            message = (
                f"All {len(self.failures)} strategies exhausted; "
                f"last failure from '{last.label}': {last.reason}"
            )
        else:
            message = "No transport strategies configured"
        super().__init__(code, message, context)

    @property
    def reasons(self) -> list[str]:
        """Constituent failure reasons formatted as ``label: reason``."""
        return [f"{failure.label}: {failure.reason}" for failure in self.failures]


class InventoryNotFoundError(AllStrategiesExhaustedError):
    """Every strategy returned a parsed document without an asset collection."""

    def __init__(
        self,
        failures: list[StrategyExhaustedError],
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(failures, context, code=ErrorCode.INVENTORY_NOT_FOUND)


class UnauthorizedError(SecurityError):
    """Credential mismatch on a privileged operation."""


class StoreError(InfrastructureError):
    """Underlying persistence failure, surfaced as-is."""


class FetchCancelledError(ApplicationError):
    """The caller cancelled an in-flight fetch."""


def create_validation_error(
    message: str,
    field: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> InvalidInputError:
    """Create a validation error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"field": field} if field else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return InvalidInputError(
        ErrorCode.VALIDATION_ERROR,
        message,
        context,
        original_error,
    )


def create_store_error(
    message: str,
    operation: str | None = None,
    original_error: Exception | None = None,
    code: ErrorCode = ErrorCode.STORE_ERROR,
) -> StoreError:
    """Create a persistence error with context."""
    return StoreError(
        code,
        message,
        ErrorContext(operation=operation),
        original_error,
    )


def create_config_error(
    message: str,
    config_key: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> ApplicationError:
    """Create a configuration error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"config_key": config_key} if config_key else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return ApplicationError(
        ErrorCode.CONFIGURATION_ERROR,
        message,
        context,
        original_error,
    )
