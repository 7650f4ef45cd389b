"""Shared error handling utilities for SteamVault.

This module maps errors raised anywhere in the package to the status code
and body an outer HTTP or CLI layer returns, and converts stray exceptions
into the structured error hierarchy.

Design Principles:
- One Source of Truth for the error-to-status mapping
- Callers never see per-strategy upstream diagnostics; those stay in logs
"""

from __future__ import annotations

import logging
from typing import Any

from steamvault.shared.constants import HTTPStatusCodes
from steamvault.shared.errors import (
    AllStrategiesExhaustedError,
    ApplicationError,
    ErrorCode,
    ErrorContextModel,
    FetchCancelledError,
    InfrastructureError,
    InvalidInputError,
    InventoryNotFoundError,
    SteamVaultError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

UPSTREAM_UNAVAILABLE_MESSAGE = "Failed to fetch inventory from every upstream route"
NOT_FOUND_MESSAGE = "Inventory not found or not public"
UNAUTHORIZED_MESSAGE = "Unauthorized"
CANCELLED_MESSAGE = "Request cancelled"
INTERNAL_MESSAGE = "Internal server error"


def map_exception_to_steamvault_error(
    error: BaseException,
    operation: str,
    default_code: ErrorCode = ErrorCode.APPLICATION_ERROR,
) -> SteamVaultError:
    """Map a generic exception to a SteamVaultError.

    Args:
        error: The exception to map
        operation: Operation name where error occurred
        default_code: Error code for exceptions with no specific mapping

    Returns:
        The error itself if it already is a SteamVaultError, otherwise a
        wrapping ApplicationError or InfrastructureError
    """
    if isinstance(error, SteamVaultError):
        return error

    context = ErrorContextModel(
        operation=operation,
        additional_data={"original_error_type": type(error).__name__},
    )
    original = error if isinstance(error, Exception) else None

    if isinstance(error, PermissionError):
        return InfrastructureError(
            code=ErrorCode.FILE_PERMISSION_DENIED,
            message=f"File system error: {error}",
            context=context,
            original_error=original,
        )

    if isinstance(error, OSError):
        return InfrastructureError(
            code=ErrorCode.FILE_READ_ERROR,
            message=f"File system error: {error}",
            context=context,
            original_error=original,
        )

    if isinstance(error, KeyboardInterrupt):
        return ApplicationError(
            code=ErrorCode.OPERATION_CANCELLED,
            message="Operation interrupted by user",
            context=context,
        )

    return ApplicationError(
        code=default_code,
        message=f"Unexpected error: {error}",
        context=context,
        original_error=original,
    )


def error_status(error: BaseException) -> int:
    """HTTP status for ``error``.

    InventoryNotFoundError is checked before its AllStrategiesExhaustedError
    base class.
    """
    if isinstance(error, InvalidInputError):
        return HTTPStatusCodes.BAD_REQUEST
    if isinstance(error, UnauthorizedError):
        return HTTPStatusCodes.FORBIDDEN
    if isinstance(error, InventoryNotFoundError):
        return HTTPStatusCodes.NOT_FOUND
    if isinstance(error, AllStrategiesExhaustedError):
        return HTTPStatusCodes.BAD_GATEWAY
    if isinstance(error, FetchCancelledError):
        return HTTPStatusCodes.CLIENT_CLOSED_REQUEST
    return HTTPStatusCodes.INTERNAL_SERVER_ERROR


def error_response(error: BaseException) -> tuple[int, dict[str, Any]]:
    """Map an error to ``(status, body)`` for the boundary layer.

    Only validation errors echo their message; every other kind returns a
    fixed message. An exhausted fetch also carries the last failure reason
    under ``reason``, without the strategy that produced it.

    Example:
        >>> error_response(InvalidIdentifierError("123"))
        (400, {'error': "Invalid account identifier: '123'", 'code': 'INVALID_IDENTIFIER'})
    """
    status = error_status(error)
    mapped = map_exception_to_steamvault_error(error, "error_response")

    if status == HTTPStatusCodes.BAD_REQUEST:
        message = mapped.message
    elif status == HTTPStatusCodes.FORBIDDEN:
        message = UNAUTHORIZED_MESSAGE
    elif status == HTTPStatusCodes.NOT_FOUND:
        message = NOT_FOUND_MESSAGE
    elif status == HTTPStatusCodes.BAD_GATEWAY:
        message = UPSTREAM_UNAVAILABLE_MESSAGE
    elif status == HTTPStatusCodes.CLIENT_CLOSED_REQUEST:
        message = CANCELLED_MESSAGE
    else:
        message = INTERNAL_MESSAGE

    body: dict[str, Any] = {"error": message, "code": mapped.code.value}
    if isinstance(mapped, AllStrategiesExhaustedError) and mapped.failures:
        # Last failure reason only; strategy labels stay in the logs
        body["reason"] = mapped.failures[-1].reason

    if HTTPStatusCodes.is_server_error(status):
        log_error_with_context(mapped, "error_response")

    return status, body


def log_error_with_context(
    error: SteamVaultError,
    operation: str,
    additional_context: dict[str, Any] | None = None,
) -> None:
    """Log a SteamVaultError with structured context.

    Application errors are logged as warnings, everything else as errors.
    """
    log_context: dict[str, Any] = {
        "operation": operation,
        "error_code": error.code.value,
        "error_type": type(error).__name__,
    }
    if additional_context:
        log_context.update(additional_context)

    if isinstance(error, ApplicationError):
        logger.warning(
            "Application error in %s: %s",
            operation,
            error.message,
            extra={"context": log_context},
        )
    else:
        logger.error(
            "%s in %s: %s",
            type(error).__name__,
            operation,
            error.message,
            extra={"context": log_context},
        )


__all__ = [
    "error_response",
    "error_status",
    "log_error_with_context",
    "map_exception_to_steamvault_error",
]
