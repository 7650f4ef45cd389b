"""Tests for the SteamVault error hierarchy."""

from __future__ import annotations

from pathlib import Path

import pytest

from steamvault.shared.errors import (
    AllStrategiesExhaustedError,
    DomainError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
    InvalidIdentifierError,
    InvalidInputError,
    InventoryNotFoundError,
    SteamVaultError,
    StrategyExhaustedError,
    create_config_error,
    create_store_error,
    create_validation_error,
)


class TestErrorContext:
    """ErrorContext coercion and masking."""

    def test_rejects_non_primitive_values(self) -> None:
        with pytest.raises(TypeError):
            ErrorContext(additional_data={"bad": object()})

    def test_coerces_path_to_str(self) -> None:
        context = ErrorContext(additional_data={"db_path": Path("data") / "x.db"})

        assert context.additional_data == {"db_path": str(Path("data") / "x.db")}

    def test_safe_dict_masks_user_id(self) -> None:
        context = ErrorContext(operation="fetch", user_id="76561198000000000")

        assert context.safe_dict() == {"operation": "fetch", "additional_data": {}}


class TestSteamVaultError:
    """Base error formatting."""

    def test_str_includes_code(self) -> None:
        error = SteamVaultError(ErrorCode.STORE_ERROR, "disk full")

        assert str(error) == "STORE_ERROR: disk full"

    def test_to_dict(self) -> None:
        cause = ValueError("boom")
        error = SteamVaultError(
            ErrorCode.APPLICATION_ERROR,
            "failed",
            ErrorContext(operation="op"),
            cause,
        )

        assert error.to_dict() == {
            "code": "APPLICATION_ERROR",
            "message": "failed",
            "context": {"operation": "op", "additional_data": {}},
            "original_error": "boom",
        }


class TestUpstreamErrors:
    """Aggregated upstream failures."""

    def test_invalid_identifier_is_domain_error(self) -> None:
        error = InvalidIdentifierError("12345")

        assert isinstance(error, InvalidInputError)
        assert isinstance(error, DomainError)
        assert error.code is ErrorCode.INVALID_IDENTIFIER

    def test_all_exhausted_message_names_last_failure(self) -> None:
        # Given
        failures = [
            StrategyExhaustedError("direct", "HTTP 403"),
            StrategyExhaustedError("relay-a", "blocked or empty"),
        ]

        # When
        error = AllStrategiesExhaustedError(failures)

        # Then
        assert "relay-a" in error.message
        assert "blocked or empty" in error.message
        assert error.reasons == ["direct: HTTP 403", "relay-a: blocked or empty"]
        assert isinstance(error, InfrastructureError)

    def test_inventory_not_found_is_exhausted_subclass(self) -> None:
        error = InventoryNotFoundError([StrategyExhaustedError("direct", "unexpected shape")])

        assert isinstance(error, AllStrategiesExhaustedError)
        assert error.code is ErrorCode.INVENTORY_NOT_FOUND


class TestErrorFactories:
    """Helper constructors."""

    def test_validation_error_carries_field(self) -> None:
        error = create_validation_error("bad", field="price", operation="set_price")

        assert isinstance(error, InvalidInputError)
        assert error.context.additional_data == {"field": "price"}

    def test_store_error_code_override(self) -> None:
        error = create_store_error("nope", code=ErrorCode.CACHE_READ_FAILED)

        assert error.code is ErrorCode.CACHE_READ_FAILED

    def test_config_error(self) -> None:
        error = create_config_error("bad template", config_key="upstream.strategies")

        assert error.code is ErrorCode.CONFIGURATION_ERROR
        assert error.context.additional_data == {"config_key": "upstream.strategies"}
