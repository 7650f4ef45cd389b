"""Tests for boundary error mapping."""

from __future__ import annotations

import pytest

from steamvault.shared.error_handling import (
    UPSTREAM_UNAVAILABLE_MESSAGE,
    error_response,
    error_status,
    map_exception_to_steamvault_error,
)
from steamvault.shared.errors import (
    AllStrategiesExhaustedError,
    ApplicationError,
    ErrorCode,
    FetchCancelledError,
    InfrastructureError,
    InvalidIdentifierError,
    InventoryNotFoundError,
    StrategyExhaustedError,
    UnauthorizedError,
    create_store_error,
    create_validation_error,
)


def _failures() -> list[StrategyExhaustedError]:
    return [
        StrategyExhaustedError("direct", "HTTP 403"),
        StrategyExhaustedError("relay-a", "blocked or empty"),
    ]


class TestErrorStatus:
    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (InvalidIdentifierError("123"), 400),
            (create_validation_error("bad price", field="price"), 400),
            (UnauthorizedError(ErrorCode.UNAUTHORIZED, "no"), 403),
            (InventoryNotFoundError(_failures()), 404),
            (AllStrategiesExhaustedError(_failures()), 502),
            (FetchCancelledError(ErrorCode.OPERATION_CANCELLED, "gone"), 499),
            (create_store_error("disk"), 500),
            (RuntimeError("surprise"), 500),
        ],
    )
    def test_status_mapping(self, error: BaseException, status: int) -> None:
        assert error_status(error) == status


class TestErrorResponse:
    def test_exhausted_body_carries_last_reason_without_labels(self) -> None:
        # Given
        error = AllStrategiesExhaustedError(_failures())

        # When
        status, body = error_response(error)

        # Then
        assert status == 502
        assert body == {
            "error": UPSTREAM_UNAVAILABLE_MESSAGE,
            "code": "UPSTREAM_UNAVAILABLE",
            "reason": "blocked or empty",
        }
        assert "relay-a" not in str(body)
        assert "direct" not in str(body)

    def test_not_found_body_carries_reason(self) -> None:
        failures = [StrategyExhaustedError("direct", "unexpected shape")]

        status, body = error_response(InventoryNotFoundError(failures))

        assert status == 404
        assert body["reason"] == "unexpected shape"

    def test_no_strategies_configured_has_no_reason(self) -> None:
        status, body = error_response(AllStrategiesExhaustedError([]))

        assert status == 502
        assert "reason" not in body

    def test_validation_message_is_echoed(self) -> None:
        status, body = error_response(InvalidIdentifierError("12345"))

        assert status == 400
        assert "12345" in body["error"]
        assert body["code"] == "INVALID_IDENTIFIER"

    def test_store_error_hides_driver_message(self) -> None:
        status, body = error_response(create_store_error("SQLite cache_get failed: disk I/O error"))

        assert status == 500
        assert "disk" not in body["error"]


class TestMapException:
    def test_steamvault_error_passes_through(self) -> None:
        error = create_store_error("x")

        assert map_exception_to_steamvault_error(error, "op") is error

    def test_os_error_becomes_infrastructure_error(self) -> None:
        mapped = map_exception_to_steamvault_error(FileNotFoundError("config.toml"), "load")

        assert isinstance(mapped, InfrastructureError)
        assert mapped.code is ErrorCode.FILE_READ_ERROR

    def test_unknown_error_becomes_application_error(self) -> None:
        mapped = map_exception_to_steamvault_error(KeyError("k"), "op", ErrorCode.CLI_UNEXPECTED_ERROR)

        assert isinstance(mapped, ApplicationError)
        assert mapped.code is ErrorCode.CLI_UNEXPECTED_ERROR
        assert mapped.context.additional_data == {"original_error_type": "KeyError"}
