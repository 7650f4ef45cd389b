"""Inventory domain models.

Immutable dataclasses for the upstream inventory document and the
records derived from it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from steamvault.shared.constants import ResponseMarkers

DescriptionKey = tuple[str, str]


def _collection(raw: Mapping[str, Any], names: Iterable[str]) -> list[Any] | None:
    """Return the first present collection under any of ``names``.

    Legacy payloads key their collections by id; their values are taken in
    insertion order.
    """
    for name in names:
        value = raw.get(name)
        if isinstance(value, list):
            return value
        if isinstance(value, Mapping):
            return list(value.values())
    return None


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class Asset:
    """One owned item instance."""

    asset_id: str
    class_id: str
    instance_id: str
    amount: int = 1

    @property
    def description_key(self) -> DescriptionKey:
        return (self.class_id, self.instance_id)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> Asset:
        """Build an Asset from an upstream record.

        Raises:
            TypeError: If ``raw`` is not a mapping
            ValueError: If identifiers are missing or amount is not an integer
        """
        if not isinstance(raw, Mapping):
            msg = f"asset record must be a mapping, got {type(raw).__name__}"
            raise TypeError(msg)

        asset_id = raw.get("assetid", raw.get("id"))
        class_id = raw.get("classid")
        if asset_id is None or class_id is None:
            msg = "asset record lacks assetid or classid"
            raise ValueError(msg)

        return cls(
            asset_id=str(asset_id),
            class_id=str(class_id),
            instance_id=str(raw.get("instanceid", "0")),
            amount=int(raw.get("amount", 1)),
        )


@dataclass(frozen=True)
class Description:
    """Display metadata shared by every asset of one (class, instance)."""

    class_id: str
    instance_id: str
    market_name: str | None = None
    display_name: str | None = None
    type: str | None = None
    icon_ref: str | None = None

    @property
    def key(self) -> DescriptionKey:
        return (self.class_id, self.instance_id)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> Description:
        if not isinstance(raw, Mapping):
            msg = f"description record must be a mapping, got {type(raw).__name__}"
            raise TypeError(msg)
        if raw.get("classid") is None:
            msg = "description record lacks classid"
            raise ValueError(msg)

        return cls(
            class_id=str(raw["classid"]),
            instance_id=str(raw.get("instanceid", "0")),
            market_name=_optional_str(raw.get("market_hash_name", raw.get("market_name"))),
            display_name=_optional_str(raw.get("name")),
            type=_optional_str(raw.get("type")),
            icon_ref=_optional_str(raw.get("icon_url")),
        )


@dataclass(frozen=True)
class InventoryDocument:
    """Validated upstream inventory document.

    Attributes:
        assets: Asset records in upstream order
        descriptions: Description records in upstream order
        raw: The parsed JSON mapping as received
        source: Label of the transport strategy that produced it
    """

    assets: tuple[Asset, ...]
    descriptions: tuple[Description, ...] = ()
    raw: dict[str, Any] = field(default_factory=dict, compare=False)
    source: str | None = None

    @classmethod
    def has_asset_collection(cls, raw: Any) -> bool:
        return isinstance(raw, Mapping) and _collection(raw, ResponseMarkers.ASSET_FIELDS) is not None

    @classmethod
    def from_raw(cls, raw: Any, source: str | None = None) -> InventoryDocument:
        """Parse a decoded JSON body.

        Raises:
            TypeError: If the body or one of its records has the wrong type
            ValueError: If no accepted asset collection is present or a
                record is incomplete
        """
        if not isinstance(raw, Mapping):
            msg = f"inventory document must be a JSON object, got {type(raw).__name__}"
            raise TypeError(msg)

        raw_assets = _collection(raw, ResponseMarkers.ASSET_FIELDS)
        if raw_assets is None:
            msg = f"inventory document has none of {ResponseMarkers.ASSET_FIELDS}"
            raise ValueError(msg)

        raw_descriptions = _collection(raw, ResponseMarkers.DESCRIPTION_FIELDS) or []

        return cls(
            assets=tuple(Asset.from_raw(item) for item in raw_assets),
            descriptions=tuple(Description.from_raw(item) for item in raw_descriptions),
            raw=dict(raw),
            source=source,
        )

    def description_index(self) -> dict[DescriptionKey, Description]:
        """Map (class_id, instance_id) to its first Description."""
        index: dict[DescriptionKey, Description] = {}
        for description in self.descriptions:
            index.setdefault(description.key, description)
        return index


@dataclass(frozen=True)
class NormalizedItem:
    """Flat join of one Asset with its Description."""

    snapshot_id: str
    asset_id: str
    class_id: str
    instance_id: str
    amount: int
    market_name: str
    display_name: str
    type: str
    icon_ref: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class InventorySnapshot:
    """One fetched inventory for one account at one point in time.

    ``fetched_at`` is epoch milliseconds.
    """

    account_id: str
    fetched_at: int
    item_count: int
    raw_document: dict[str, Any] = field(compare=False)
