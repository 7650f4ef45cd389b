"""Flatten an inventory document into one record per owned asset."""

from __future__ import annotations

from steamvault.services.upstream.inventory_models import InventoryDocument, NormalizedItem
from steamvault.shared.constants import NormalizationDefaults


def normalize(document: InventoryDocument, snapshot_id: str) -> list[NormalizedItem]:
    """Join every asset with its description.

    Assets keep upstream order and are never deduplicated. Description
    fields that are absent, or whose description is missing entirely, take
    the ``"unknown"`` sentinel.

    Args:
        document: Validated inventory document
        snapshot_id: Owning account id

    Returns:
        One NormalizedItem per asset
    """
    unknown = NormalizationDefaults.UNKNOWN
    index = document.description_index()
    items: list[NormalizedItem] = []

    for asset in document.assets:
        description = index.get(asset.description_key)
        items.append(
            NormalizedItem(
                snapshot_id=snapshot_id,
                asset_id=asset.asset_id,
                class_id=asset.class_id,
                instance_id=asset.instance_id,
                amount=asset.amount,
                market_name=(description and description.market_name) or unknown,
                display_name=(description and description.display_name) or unknown,
                type=(description and description.type) or unknown,
                icon_ref=(description and description.icon_ref) or unknown,
            )
        )

    return items
