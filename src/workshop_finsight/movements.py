# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Inventory movement tracking for Workshop FinSight.

Derives a ledger of stock-depleting events from the operations of a period:
every sold line and every supply consumed by a completed service becomes a
movement, valued at the current unit cost of the inventory item. Items that
are missing from the snapshot, and service items (labour, not stock), are
skipped. Stock quantities are never modified.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from .config import DEFAULT_RULES, BusinessRules
from .costing import as_snapshot
from .models import InventoryMovement, SaleReceipt, ServiceRecord
from .operations import InventoryInput, filter_sales, filter_services
from .periods import Period


@dataclass(frozen=True)
class MovementSummary:
    """Total quantity and cost consumed for one inventory item."""

    item_name: str
    quantity: float
    total_cost: float
    movement_count: int


def list_inventory_movements(
    sales: Iterable[SaleReceipt],
    services: Iterable[ServiceRecord],
    inventory: InventoryInput,
    period: Period,
    rules: BusinessRules = DEFAULT_RULES,
) -> list[InventoryMovement]:
    """Return one movement per sold line / consumed supply of stock items.

    Sales and services are filtered with the same rules as the financial
    ledger (status and date window).
    """
    snapshot = as_snapshot(inventory)
    movements: list[InventoryMovement] = []

    for sale, moment in filter_sales(sales, period, rules):
        for line in sale.items:
            item = snapshot.get(line.inventory_item_id)
            if item is None or item.is_service:
                continue
            movements.append(
                InventoryMovement(
                    id=f"{sale.id}-{line.inventory_item_id}",
                    date=moment,
                    type=rules.sale_operation_type,
                    related_id=sale.id,
                    item_name=line.item_name or item.name,
                    quantity=line.quantity,
                    unit_cost=item.unit_price,
                    total_cost=line.quantity * item.unit_price,
                )
            )

    for service, moment in filter_services(services, period, rules):
        for service_item in service.service_items:
            for supply in service_item.supplies_used:
                item = snapshot.get(supply.supply_id)
                if item is None or item.is_service:
                    continue
                movements.append(
                    InventoryMovement(
                        id=f"{service.id}-{supply.supply_id}-{service_item.id}",
                        date=moment,
                        type=rules.service_movement_type,
                        related_id=service.id,
                        item_name=supply.supply_name or item.name,
                        quantity=supply.quantity,
                        unit_cost=item.unit_price,
                        total_cost=supply.quantity * item.unit_price,
                    )
                )

    return movements


def summarize_movements(
    movements: Iterable[InventoryMovement],
) -> list[MovementSummary]:
    """Group movements by item name, largest total cost first."""
    totals: dict[str, list[float]] = {}
    for m in movements:
        acc = totals.setdefault(m.item_name, [0.0, 0.0, 0])
        acc[0] += m.quantity
        acc[1] += m.total_cost
        acc[2] += 1

    summaries = [
        MovementSummary(
            item_name=name,
            quantity=qty,
            total_cost=cost,
            movement_count=int(n),
        )
        for name, (qty, cost, n) in totals.items()
    ]
    return sorted(summaries, key=lambda s: (-s.total_cost, s.item_name))
