# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Cost basis resolution for Workshop FinSight.

The cost of goods attributed to an operation is resolved against the
*current* inventory snapshot: each line item or consumed supply is valued
at the current ``unit_price`` (workshop cost) of the inventory item it
references.

Two known limitations are intentional and preserved:

- the cost basis is the current cost, not the cost at the time of the
  sale or service;
- a line referencing an item that no longer exists in the snapshot
  (deleted or renamed) contributes a cost of 0, so the full revenue of
  that line is counted as profit.

Services carry an upstream ``total_supplies_cost`` which is used as their
cost of goods in financial totals; valuing their supplies against the
snapshot (:func:`supplies_cost_basis`) is used by stock-movement reporting.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Optional

from .models import InventoryItem, SaleReceipt, ServiceRecord

logger = logging.getLogger(__name__)


class InventorySnapshot(Mapping[str, InventoryItem]):
    """
    Read-only mapping ``inventory id -> InventoryItem``.

    The snapshot copies the items it is given, so later changes to the
    caller's collection do not leak into a computation in progress.
    """

    def __init__(self, items: Optional[Mapping[str, InventoryItem]] = None) -> None:
        self._items: dict[str, InventoryItem] = dict(items or {})

    @classmethod
    def from_items(cls, items: Iterable[InventoryItem]) -> "InventorySnapshot":
        return cls({item.id: item for item in items})

    def __getitem__(self, item_id: str) -> InventoryItem:
        return self._items[item_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def unit_cost(self, item_id: str) -> float:
        """Current unit cost of an item, or 0.0 if it is not in the snapshot."""
        item = self._items.get(item_id)
        if item is None:
            logger.debug("Inventory item %r not found, cost counted as 0", item_id)
            return 0.0
        return item.unit_price

    def inventory_value(self) -> float:
        """Total stock value at cost, excluding service items."""
        return sum(
            item.quantity * item.unit_price
            for item in self._items.values()
            if not item.is_service
        )


def as_snapshot(
    inventory: "InventorySnapshot | Mapping[str, InventoryItem] | Iterable[InventoryItem] | None",
) -> InventorySnapshot:
    """Normalize any supported inventory input into an InventorySnapshot."""
    if isinstance(inventory, InventorySnapshot):
        return inventory
    if inventory is None:
        return InventorySnapshot()
    if isinstance(inventory, Mapping):
        return InventorySnapshot(inventory)
    return InventorySnapshot.from_items(inventory)


def sale_cost_basis(sale: SaleReceipt, inventory: InventorySnapshot) -> float:
    """Total cost of goods of a sale: Σ quantity × current unit cost."""
    return sum(
        item.quantity * inventory.unit_cost(item.inventory_item_id)
        for item in sale.items
    )


def supplies_cost_basis(service: ServiceRecord, inventory: InventorySnapshot) -> float:
    """Cost of the supplies consumed by a service, valued at current cost."""
    return sum(
        supply.quantity * inventory.unit_cost(supply.supply_id)
        for supply in service.supplies
    )


def service_cost_basis(service: ServiceRecord) -> float:
    """Cost of goods of a service, as precomputed upstream."""
    return service.total_supplies_cost
