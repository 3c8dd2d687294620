# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core profit computation engine for Workshop FinSight.

This module provides the profit rules applied to a single sale or service
and the aggregation of normalized operations into period totals.

1. Per-operation profit
   ---------------------
   - Sale:    profit = revenue − Σ(quantity × current unit cost)
   - Service: profit = service_profit when recorded upstream,
              otherwise total_cost − total_supplies_cost

   Revenue of a service is its tax-inclusive ``total_cost``; its cost of
   goods is the upstream ``total_supplies_cost``.

2. Period totals
   --------------
   ``compute_profit_totals()`` walks the aggregated operations once and
   produces income, profit and cost-of-goods totals (overall, sales only,
   services only), the number of units consumed, and a breakdown keyed by
   operation type ('Venta' or the service type).

   Income, profit and cost of goods come from the same pass over the same
   operation records, so the sum of per-operation profits and the
   "income minus cost" figure cannot drift apart for sales.

Notes
-----
This module does not filter by status or date (operations.py does that)
and does not deal with payroll or commissions (commissions.py). It keeps
the engine minimal, predictable and reusable by every report surface.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from .costing import InventorySnapshot, as_snapshot, sale_cost_basis
from .models import FinancialOperation, SaleReceipt, ServiceRecord


@dataclass
class TypeBreakdown:
    """Income, profit and number of operations for one operation type."""

    income: float = 0.0
    profit: float = 0.0
    count: int = 0


@dataclass(frozen=True)
class ProfitTotals:
    """
    Aggregated figures for a set of operations.

    Attributes
    ----------
    total_operational_income :
        Σ total_amount over all operations.
    total_operational_profit :
        Σ profit over all operations.
    total_cost_of_goods :
        Σ cost basis (sales: per sold unit at current cost; services:
        upstream total_supplies_cost).
    income_from_sales, profit_from_sales :
        Same figures restricted to sales.
    income_from_services, profit_from_services :
        Same figures restricted to services.
    total_units_sold :
        Σ quantities sold plus Σ supply quantities consumed by services.
    operation_count :
        Number of operations aggregated.
    breakdown :
        Operation type -> TypeBreakdown. Sales are grouped under a single
        'Venta' entry.
    inventory_value :
        Stock value at cost of non-service items, when an inventory
        snapshot was provided; 0.0 otherwise.
    """

    total_operational_income: float
    total_operational_profit: float
    total_cost_of_goods: float
    income_from_sales: float
    profit_from_sales: float
    income_from_services: float
    profit_from_services: float
    total_units_sold: float
    operation_count: int
    breakdown: dict[str, TypeBreakdown] = field(default_factory=dict)
    inventory_value: float = 0.0


def sale_profit(sale: SaleReceipt, inventory: InventorySnapshot) -> float:
    """Profit of a sale: revenue minus the current cost of the sold units."""
    return sale.total_amount - sale_cost_basis(sale, inventory)


def service_income(service: ServiceRecord) -> float:
    """Revenue of a service (tax-inclusive total cost billed to the customer)."""
    return service.total_cost


def service_profit(service: ServiceRecord) -> float:
    """Profit of a service: upstream value if recorded, else income − supplies."""
    if service.service_profit is not None:
        return service.service_profit
    return service.total_cost - service.total_supplies_cost


def compute_profit_totals(
    operations: Iterable[FinancialOperation],
    inventory: Optional[InventorySnapshot] = None,
) -> ProfitTotals:
    """Aggregate normalized operations into income / profit / cost totals.

    Args:
        operations: Operations produced by
            :func:`workshop_finsight.operations.aggregate_operations`.
        inventory: Optional inventory snapshot, only used to report the
            current stock value alongside the totals.

    Returns:
        A ProfitTotals instance. An empty input yields all-zero totals and
        an empty breakdown.
    """
    income = profit = cost = 0.0
    sales_income = sales_profit = 0.0
    services_income = services_profit = 0.0
    units = 0.0
    count = 0
    breakdown: dict[str, TypeBreakdown] = {}

    for op in operations:
        count += 1
        income += op.total_amount
        profit += op.profit
        cost += op.cost_of_goods

        if op.source == "sale":
            sales_income += op.total_amount
            sales_profit += op.profit
            units += op.record.units_sold
        else:
            services_income += op.total_amount
            services_profit += op.profit
            units += sum(s.quantity for s in op.record.supplies)

        bucket = breakdown.setdefault(op.type, TypeBreakdown())
        bucket.income += op.total_amount
        bucket.profit += op.profit
        bucket.count += 1

    inventory_value = (
        as_snapshot(inventory).inventory_value() if inventory is not None else 0.0
    )

    return ProfitTotals(
        total_operational_income=income,
        total_operational_profit=profit,
        total_cost_of_goods=cost,
        income_from_sales=sales_income,
        profit_from_sales=sales_profit,
        income_from_services=services_income,
        profit_from_services=services_profit,
        total_units_sold=units,
        operation_count=count,
        breakdown=breakdown,
        inventory_value=inventory_value,
    )
