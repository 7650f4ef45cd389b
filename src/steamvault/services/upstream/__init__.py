"""Upstream inventory access: strategies, fetcher, validation, normalization."""

from .cancellation import CancellationToken
from .inventory_client import InventoryFetcher, validate_account_id
from .inventory_models import (
    Asset,
    Description,
    InventoryDocument,
    InventorySnapshot,
    NormalizedItem,
)
from .normalizer import normalize
from .response_validator import ResponseValidator, ValidationResult, Verdict
from .transport_strategies import (
    DirectStrategy,
    RelayStrategy,
    ResolvedStrategy,
    TransportStrategy,
    TransportStrategyList,
)

__all__ = [
    "Asset",
    "CancellationToken",
    "Description",
    "DirectStrategy",
    "InventoryDocument",
    "InventoryFetcher",
    "InventorySnapshot",
    "NormalizedItem",
    "RelayStrategy",
    "ResolvedStrategy",
    "ResponseValidator",
    "TransportStrategy",
    "TransportStrategyList",
    "ValidationResult",
    "Verdict",
    "normalize",
    "validate_account_id",
]
