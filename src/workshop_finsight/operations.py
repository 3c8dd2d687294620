# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Operation aggregation for Workshop FinSight.

Sales receipts and service orders are different documents; reports need a
single ledger. This module filters both collections to a reporting period
and normalizes each qualifying record into a FinancialOperation.

Qualifying records
------------------
- Sales: status is not the cancelled status, and ``sale_date`` falls in
  the period.
- Services: status is one of the completed statuses (Completado,
  Entregado), and the effective date falls in the period. The effective
  date is ``delivery_date_time`` when present, otherwise ``service_date``.

Records whose date is missing or cannot be parsed are left out silently
(logged at DEBUG level). Nothing here raises for bad input and source
collections are never mutated.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Optional, Union

from .config import DEFAULT_RULES, BusinessRules
from .costing import InventorySnapshot, as_snapshot, sale_cost_basis, service_cost_basis
from .engine import sale_profit, service_income, service_profit
from .models import FinancialOperation, InventoryItem, SaleReceipt, ServiceRecord
from .periods import Period, parse_moment

logger = logging.getLogger(__name__)

InventoryInput = Union[
    InventorySnapshot, Mapping[str, InventoryItem], Iterable[InventoryItem], None
]


def service_effective_date(service: ServiceRecord) -> Any:
    """Raw date used to place a service in time (delivery, else service date)."""
    if service.delivery_date_time:
        return service.delivery_date_time
    return service.service_date


def _sale_moment_in_period(
    sale: SaleReceipt, period: Period, rules: BusinessRules
) -> Optional[datetime]:
    if sale.status == rules.cancelled_sale_status:
        return None
    moment = parse_moment(sale.sale_date, rules.timezone)
    if moment is None:
        logger.debug("Sale %r has no usable date, excluded", sale.id)
        return None
    return moment if period.contains(moment) else None


def _service_moment_in_period(
    service: ServiceRecord, period: Period, rules: BusinessRules
) -> Optional[datetime]:
    if service.status not in rules.completed_service_statuses:
        return None
    moment = parse_moment(service_effective_date(service), rules.timezone)
    if moment is None:
        logger.debug("Service %r has no usable date, excluded", service.id)
        return None
    return moment if period.contains(moment) else None


def filter_sales(
    sales: Iterable[SaleReceipt],
    period: Period,
    rules: BusinessRules = DEFAULT_RULES,
) -> list[tuple[SaleReceipt, datetime]]:
    """Return (sale, moment) pairs for non-cancelled sales within the period."""
    out = []
    for sale in sales:
        moment = _sale_moment_in_period(sale, period, rules)
        if moment is not None:
            out.append((sale, moment))
    return out


def filter_services(
    services: Iterable[ServiceRecord],
    period: Period,
    rules: BusinessRules = DEFAULT_RULES,
) -> list[tuple[ServiceRecord, datetime]]:
    """Return (service, moment) pairs for completed services within the period."""
    out = []
    for service in services:
        moment = _service_moment_in_period(service, period, rules)
        if moment is not None:
            out.append((service, moment))
    return out


def sale_to_operation(
    sale: SaleReceipt,
    moment: datetime,
    inventory: InventorySnapshot,
    rules: BusinessRules = DEFAULT_RULES,
) -> FinancialOperation:
    """Normalize a sale receipt into a FinancialOperation."""
    names = ", ".join(i.item_name for i in sale.items if i.item_name)
    return FinancialOperation(
        id=sale.id,
        date=moment,
        type=rules.sale_operation_type,
        description=names,
        total_amount=sale.total_amount,
        profit=sale_profit(sale, inventory),
        cost_of_goods=sale_cost_basis(sale, inventory),
        source="sale",
        record=sale,
    )


def service_to_operation(
    service: ServiceRecord,
    moment: datetime,
    rules: BusinessRules = DEFAULT_RULES,
) -> FinancialOperation:
    """Normalize a service order into a FinancialOperation.

    Without a description, the names of the service items describe it.
    """
    description = service.description or ", ".join(
        i.name for i in service.service_items if i.name
    )
    return FinancialOperation(
        id=service.id,
        date=moment,
        type=service.service_type or rules.default_service_type,
        description=description,
        total_amount=service_income(service),
        profit=service_profit(service),
        cost_of_goods=service_cost_basis(service),
        source="service",
        record=service,
    )


def aggregate_operations(
    sales: Iterable[SaleReceipt],
    services: Iterable[ServiceRecord],
    inventory: InventoryInput,
    period: Period,
    rules: BusinessRules = DEFAULT_RULES,
) -> list[FinancialOperation]:
    """Merge qualifying sales and services into a single list of operations.

    Sales come first, in input order, followed by services in input order.
    No other ordering is guaranteed; use :func:`sort_operations` for display.
    """
    snapshot = as_snapshot(inventory)
    operations = [
        sale_to_operation(sale, moment, snapshot, rules)
        for sale, moment in filter_sales(sales, period, rules)
    ]
    operations.extend(
        service_to_operation(service, moment, rules)
        for service, moment in filter_services(services, period, rules)
    )
    logger.debug(
        "Aggregated %d operations for period %s", len(operations), period.label
    )
    return operations


def sort_operations(
    operations: Iterable[FinancialOperation], newest_first: bool = True
) -> list[FinancialOperation]:
    """Sort operations by date, then by (type, id) for a stable display order."""
    ordered = sorted(operations, key=lambda op: op.key)
    return sorted(ordered, key=lambda op: op.date, reverse=newest_first)
